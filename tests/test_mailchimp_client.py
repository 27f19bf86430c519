"""Tests for the Mailchimp API adapter (HTTP session mocked)"""

from unittest.mock import MagicMock

import pytest
import requests

from mailbridge.core import MailchimpConfig
from mailbridge.modules.mailchimp import MailchimpClient, MailchimpError


def _response(status_code=200, body=None, reason="OK"):
    resp = MagicMock()
    resp.status_code = status_code
    resp.reason = reason
    if body is None:
        resp.content = b""
        resp.text = ""
        resp.json.side_effect = ValueError("no body")
    else:
        resp.content = b"{...}"
        resp.text = str(body)
        resp.json.return_value = body
    return resp


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def mc(session):
    return MailchimpClient(MailchimpConfig(api_key="key-us13", server_prefix="us13", timeout=5), session=session)


def _call(session):
    args, kwargs = session.request.call_args
    return args[0], args[1], kwargs


def test_get_all_lists_maps_summary(mc, session):
    session.request.return_value = _response(200, {"lists": [{
        "id": "abc",
        "name": "Newsletter",
        "web_id": 42,
        "date_created": "2024-01-01T00:00:00+00:00",
        "stats": {"member_count": 7},
    }]})

    lists = mc.get_all_lists()

    assert lists == [{
        "id": "abc",
        "name": "Newsletter",
        "memberCount": 7,
        "dateCreated": "2024-01-01T00:00:00+00:00",
        "webId": 42,
    }]
    method, url, kwargs = _call(session)
    assert method == "GET"
    assert url == "https://us13.api.mailchimp.com/3.0/lists"
    assert kwargs["auth"][1] == "key-us13"
    assert kwargs["timeout"] == 5


def test_add_list_member_payload(mc, session):
    session.request.return_value = _response(200, {"id": "h1", "email_address": "a@x.com"})

    member = mc.add_list_member("L1", "a@x.com", "subscribed", {"FNAME": "A", "LNAME": ""})

    assert member["email_address"] == "a@x.com"
    method, url, kwargs = _call(session)
    assert (method, url) == ("POST", "https://us13.api.mailchimp.com/3.0/lists/L1/members")
    assert kwargs["json"] == {
        "email_address": "a@x.com",
        "status": "subscribed",
        "merge_fields": {"FNAME": "A", "LNAME": ""},
    }


def test_add_list_member_rejects_unknown_status(mc, session):
    with pytest.raises(ValueError):
        mc.add_list_member("L1", "a@x.com", "archived")
    session.request.assert_not_called()


def test_provider_error_is_wrapped(mc, session):
    session.request.return_value = _response(400, {
        "type": "https://mailchimp.com/developer/marketing/docs/errors/",
        "title": "Member Exists",
        "status": 400,
        "detail": "a@x.com is already a list member.",
    }, reason="Bad Request")

    with pytest.raises(MailchimpError) as exc:
        mc.add_list_member("L1", "a@x.com")

    err = exc.value
    assert err.status == 400
    assert err.title == "Member Exists"
    assert err.detail == "a@x.com is already a list member."
    assert "already a list member" in err.message


def test_provider_error_includes_field_errors(mc, session):
    session.request.return_value = _response(400, {
        "title": "Invalid Resource",
        "status": 400,
        "detail": "The resource submitted could not be validated.",
        "errors": [{"field": "email_address", "message": "This value should be a valid email."}],
    })

    with pytest.raises(MailchimpError) as exc:
        mc.add_list_member("L1", "nope")
    assert "email_address" in exc.value.message


def test_transport_error_is_wrapped(mc, session):
    session.request.side_effect = requests.ConnectionError("connection reset")

    with pytest.raises(MailchimpError) as exc:
        mc.ping()
    assert exc.value.status is None
    assert "connection reset" in exc.value.message


def test_create_campaign_returns_id(mc, session):
    session.request.return_value = _response(200, {"id": "cmp1", "type": "regular"})

    campaign_id = mc.create_campaign("L1", "Hello", "Team", "team@x.com", "Launch")

    assert campaign_id == "cmp1"
    method, url, kwargs = _call(session)
    assert (method, url) == ("POST", "https://us13.api.mailchimp.com/3.0/campaigns")
    assert kwargs["json"] == {
        "type": "regular",
        "recipients": {"list_id": "L1"},
        "settings": {
            "subject_line": "Hello",
            "from_name": "Team",
            "reply_to": "team@x.com",
            "title": "Launch",
        },
    }


def test_set_content_and_send(mc, session):
    session.request.side_effect = [_response(200, {"html": "<p>hi</p>"}), _response(204)]

    mc.set_campaign_content("cmp1", "<p>hi</p>")
    result = mc.send_campaign("cmp1")

    assert result == {"id": "cmp1", "status": "sent"}
    calls = session.request.call_args_list
    assert calls[0][0][:2] == ("PUT", "https://us13.api.mailchimp.com/3.0/campaigns/cmp1/content")
    assert calls[0][1]["json"] == {"html": "<p>hi</p>"}
    assert calls[1][0][:2] == ("POST", "https://us13.api.mailchimp.com/3.0/campaigns/cmp1/actions/send")


def test_create_segment_payload(mc, session):
    session.request.return_value = _response(200, {"id": 9, "name": "VIP"})

    mc.create_segment("L1", "VIP")

    method, url, kwargs = _call(session)
    assert url == "https://us13.api.mailchimp.com/3.0/lists/L1/segments"
    assert kwargs["json"] == {"name": "VIP", "options": {"match": "all", "conditions": []}}


def test_add_segment_members_partial_failure(mc, session):
    session.request.side_effect = [
        _response(200, {"email_address": "a@x.com"}),
        _response(404, {"title": "Resource Not Found", "status": 404, "detail": "not a member"}),
        _response(200, {"email_address": "c@x.com"}),
    ]

    results = mc.add_segment_members("L1", "9", ["a@x.com", "b@x.com", "c@x.com"])

    assert results["success"] == 2
    assert results["failed"] == 1
    assert len(results["errors"]) == 1
    assert results["errors"][0].startswith("Error adding b@x.com")
    assert session.request.call_count == 3
