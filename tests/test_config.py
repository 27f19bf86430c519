"""Tests for environment-sourced configuration"""

import dataclasses

import pytest

from mailbridge.core import Config, ConfigError

BASE_ENV = {
    "MAILCHIMP_API_KEY": "abc123-us13",
    "MAILCHIMP_SERVER_PREFIX": "us13",
    "MONGODB_URI": "mongodb://localhost:27017",
}


def test_defaults():
    config = Config.from_env(dict(BASE_ENV))

    assert config.mailchimp.api_key == "abc123-us13"
    assert config.mailchimp.server_prefix == "us13"
    assert config.mailchimp.base_url == "https://us13.api.mailchimp.com/3.0"
    assert config.mailchimp.timeout == 30.0
    assert config.mongodb_db == "mailbridge"
    assert config.mongodb_timeout_ms == 5000
    assert config.allowed_origins == ("http://localhost:3000",)
    assert config.log_level == "INFO"
    assert config.strict_server_prefix_validation is True
    assert config.port == 3000
    assert config.production is False


@pytest.mark.parametrize("missing", ["MAILCHIMP_API_KEY", "MAILCHIMP_SERVER_PREFIX", "MONGODB_URI"])
def test_missing_required_value(missing):
    env = dict(BASE_ENV)
    del env[missing]

    with pytest.raises(ConfigError) as exc:
        Config.from_env(env)
    assert missing in str(exc.value)


def test_bad_server_prefix_strict():
    env = dict(BASE_ENV, MAILCHIMP_SERVER_PREFIX="uk-1")
    with pytest.raises(ConfigError):
        Config.from_env(env)


def test_bad_server_prefix_lenient():
    env = dict(BASE_ENV, MAILCHIMP_SERVER_PREFIX="uk-1", STRICT_SERVER_PREFIX_VALIDATION="false")
    config = Config.from_env(env)
    assert config.mailchimp.server_prefix == "uk-1"
    assert config.strict_server_prefix_validation is False


def test_origins_and_overrides():
    env = dict(
        BASE_ENV,
        ALLOWED_ORIGINS="https://a.example, https://b.example",
        LOG_LEVEL="debug",
        PORT="8080",
        MAX_UPLOAD_MB="2",
        MONGODB_TIMEOUT_MS="750",
        ENVIRONMENT="production",
    )
    config = Config.from_env(env)

    assert config.allowed_origins == ("https://a.example", "https://b.example")
    assert config.log_level == "DEBUG"
    assert config.port == 8080
    assert config.max_upload_bytes == 2 * 1024 * 1024
    assert config.mongodb_timeout_ms == 750
    assert config.production is True


def test_frontend_url_fallback():
    config = Config.from_env(dict(BASE_ENV, FRONTEND_URL="https://app.example"))
    assert config.allowed_origins == ("https://app.example",)


def test_invalid_number():
    with pytest.raises(ConfigError):
        Config.from_env(dict(BASE_ENV, PORT="eighty"))


def test_config_is_immutable():
    config = Config.from_env(dict(BASE_ENV))
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.port = 1
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.mailchimp.api_key = "other"
