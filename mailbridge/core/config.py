import os
import re
import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from .errors import ConfigError

load_dotenv()

logger = logging.getLogger(__name__)

# Mailchimp data-centre prefix, e.g. 'us13'
SERVER_PREFIX_PATTERN = re.compile(r'^[a-z]{2}\d+$')

DEFAULT_ORIGIN = 'http://localhost:3000'


def _as_bool(value, default=False):
    if value is None or value == '':
        return default
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def _is_production(environ):
    return (
        environ.get('ENVIRONMENT') == 'production' or
        environ.get('FLASK_ENV') == 'production' or
        environ.get('PRODUCTION') == '1'
    )


def _split_origins(raw):
    return tuple(o.strip() for o in raw.split(',') if o.strip())


@dataclass(frozen=True)
class MailchimpConfig:
    """Connection settings for the Mailchimp Marketing API."""
    api_key: str
    server_prefix: str
    timeout: float = 30.0

    @property
    def base_url(self):
        return f"https://{self.server_prefix}.api.mailchimp.com/3.0"


@dataclass(frozen=True)
class Config:
    """
    Process-wide configuration, read once at start-up.

    Build it with Config.from_env(); the value is immutable and is handed to
    the Mailchimp client and the Mongo connection explicitly.
    """
    mailchimp: MailchimpConfig
    mongodb_uri: str
    mongodb_db: str = 'mailbridge'
    mongodb_timeout_ms: int = 5000
    allowed_origins: Tuple[str, ...] = (DEFAULT_ORIGIN,)
    log_level: str = 'INFO'
    strict_server_prefix_validation: bool = True
    port: int = 3000
    upload_folder: str = 'uploads'
    max_upload_bytes: int = 16 * 1024 * 1024
    production: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'Config':
        """
        Read configuration from the environment.

        Raises ConfigError when a required value is missing, or when the
        server prefix is malformed and strict validation is on.
        """
        env = os.environ if environ is None else environ

        api_key = (env.get('MAILCHIMP_API_KEY') or '').strip()
        server_prefix = (env.get('MAILCHIMP_SERVER_PREFIX') or '').strip().lower()
        mongodb_uri = (env.get('MONGODB_URI') or '').strip()

        missing = [name for name, value in (
            ('MAILCHIMP_API_KEY', api_key),
            ('MAILCHIMP_SERVER_PREFIX', server_prefix),
            ('MONGODB_URI', mongodb_uri),
        ) if not value]
        if missing:
            raise ConfigError(f"Missing required configuration: {', '.join(missing)}")

        strict = _as_bool(env.get('STRICT_SERVER_PREFIX_VALIDATION'), default=True)
        if not SERVER_PREFIX_PATTERN.match(server_prefix):
            message = f"MAILCHIMP_SERVER_PREFIX '{server_prefix}' does not look like a data centre (e.g. 'us13')"
            if strict:
                raise ConfigError(message)
            logger.warning(message)

        origins = _split_origins(env.get('ALLOWED_ORIGINS') or env.get('FRONTEND_URL') or DEFAULT_ORIGIN)

        try:
            timeout = float(env.get('MAILCHIMP_TIMEOUT', '30'))
            port = int(env.get('PORT', '3000'))
            max_upload_mb = int(env.get('MAX_UPLOAD_MB', '16'))
            mongodb_timeout_ms = int(env.get('MONGODB_TIMEOUT_MS', '5000'))
        except ValueError as e:
            raise ConfigError(f"Invalid numeric configuration value: {e}") from e

        return cls(
            mailchimp=MailchimpConfig(api_key=api_key, server_prefix=server_prefix, timeout=timeout),
            mongodb_uri=mongodb_uri,
            mongodb_db=env.get('MONGODB_DB', 'mailbridge'),
            mongodb_timeout_ms=mongodb_timeout_ms,
            allowed_origins=origins or (DEFAULT_ORIGIN,),
            log_level=env.get('LOG_LEVEL', 'INFO').upper(),
            strict_server_prefix_validation=strict,
            port=port,
            upload_folder=env.get('UPLOAD_FOLDER', 'uploads'),
            max_upload_bytes=max_upload_mb * 1024 * 1024,
            production=_is_production(env),
        )
