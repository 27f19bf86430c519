"""
Shared fixtures: a MailBridge app on an in-memory MongoDB (mongomock) with a
mocked Mailchimp client.

Install test dependencies with: pip install -e ".[dev]"
"""

import io
from unittest.mock import MagicMock

import mongomock
import pytest

from mailbridge import create_app
from mailbridge.core import Config, Database, MailchimpConfig
from mailbridge.modules.mailchimp import MailchimpClient


@pytest.fixture
def upload_dir(tmp_path):
    return str(tmp_path / "uploads")


@pytest.fixture
def config(upload_dir):
    return Config(
        mailchimp=MailchimpConfig(api_key="test-key-us13", server_prefix="us13"),
        mongodb_uri="mongodb://localhost:27017",
        mongodb_db="mailbridge_test",
        allowed_origins=("http://localhost:3000",),
        upload_folder=upload_dir,
    )


@pytest.fixture
def database():
    return Database(mongomock.MongoClient()["mailbridge_test"])


@pytest.fixture
def mailchimp():
    """Mailchimp client double that accepts every call"""
    client = MagicMock(spec=MailchimpClient)
    client.add_list_member.side_effect = lambda list_id, email, status='subscribed', merge_fields=None: {
        'id': email, 'email_address': email, 'status': status, 'merge_fields': merge_fields or {}
    }
    client.create_campaign.return_value = "cmp_123"
    client.set_campaign_content.return_value = {'html': '<p>ok</p>'}
    client.send_campaign.side_effect = lambda campaign_id: {'id': campaign_id, 'status': 'sent'}
    client.get_all_lists.return_value = []
    client.ping.return_value = {'health_status': "Everything's Chimpy!"}
    return client


@pytest.fixture
def app(config, mailchimp, database):
    app = create_app(config, client=mailchimp, database=database)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ext(app):
    return app.extensions["mailbridge"]


@pytest.fixture
def csv_upload():
    """Build a multipart payload for a CSV upload"""
    def _build(text, filename="subscribers.csv"):
        return {"file": (io.BytesIO(text.encode("utf-8")), filename)}
    return _build
