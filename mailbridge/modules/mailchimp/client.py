"""
Mailchimp Marketing API Adapter
===============================

Thin pass-through to the Mailchimp Marketing API v3 over `requests`.
Every failure (provider error or transport fault) is raised as a
MailchimpError on the first attempt; nothing is retried here.
"""

import logging

import requests

from mailbridge.core.errors import MailBridgeError

logger = logging.getLogger(__name__)

SUBSCRIBED = 'subscribed'
MEMBER_STATUSES = ('subscribed', 'unsubscribed', 'cleaned', 'pending')


class MailchimpError(MailBridgeError):
    """A Mailchimp call failed.

    status is the HTTP status of the provider response, or None for
    transport failures (DNS, connection reset, timeout).
    """

    def __init__(self, message, status=None, detail=None, title=None):
        super().__init__(message, details=detail)
        self.status = status
        self.detail = detail
        self.title = title

    @classmethod
    def from_response(cls, response):
        """Build an error from a problem-document response"""
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        title = body.get('title') or response.reason or 'Mailchimp API error'
        detail = body.get('detail') or response.text[:500]
        status = body.get('status') or response.status_code

        errors = body.get('errors')
        if errors:
            fields = ', '.join(
                f"{e.get('field')}: {e.get('message')}" for e in errors if isinstance(e, dict)
            )
            if fields:
                detail = f"{detail} ({fields})"

        message = f"{title}: {detail}" if detail else title
        return cls(message, status=status, detail=detail, title=title)


class MailchimpClient:
    """
    Client for the Mailchimp Marketing API.

    Built from an immutable MailchimpConfig; holds no other state besides the
    HTTP session.
    """

    def __init__(self, config, session=None):
        self.config = config
        self.session = session or requests.Session()

    def _request(self, method, path, payload=None, params=None):
        url = f"{self.config.base_url}{path}"
        try:
            resp = self.session.request(
                method,
                url,
                auth=('mailbridge', self.config.api_key),
                json=payload,
                params=params,
                headers={'Accept': 'application/json'},
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Mailchimp {method} {path} failed: {e}")
            raise MailchimpError(f"Mailchimp request failed: {e}") from e

        if resp.status_code >= 400:
            error = MailchimpError.from_response(resp)
            logger.warning(f"Mailchimp {method} {path} - Status: {resp.status_code} - {error.message}")
            raise error

        logger.debug(f"Mailchimp {method} {path} - Status: {resp.status_code}")
        if resp.status_code == 204 or not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise MailchimpError(f"Invalid JSON from Mailchimp: {e}", status=resp.status_code) from e

    # ===================
    # HEALTH
    # ===================

    def ping(self):
        """Return the health-check payload ({'health_status': ...})"""
        return self._request('GET', '/ping')

    # ===================
    # LISTS / MEMBERS
    # ===================

    def get_all_lists(self, count=1000):
        """Return every audience as {id, name, memberCount, dateCreated, webId}"""
        data = self._request('GET', '/lists', params={'count': count})
        return [_list_summary(item) for item in data.get('lists', [])]

    def add_list_member(self, list_id, email, status=SUBSCRIBED, merge_fields=None):
        """Add a single member to a list; returns the member record"""
        if status not in MEMBER_STATUSES:
            raise ValueError(f"Unknown member status: {status}")
        return self._request('POST', f'/lists/{list_id}/members', {
            'email_address': email,
            'status': status,
            'merge_fields': merge_fields or {},
        })

    # ===================
    # SEGMENTS
    # ===================

    def create_segment(self, list_id, name, conditions=None):
        return self._request('POST', f'/lists/{list_id}/segments', {
            'name': name,
            'options': {
                'match': 'all',
                'conditions': conditions or [],
            },
        })

    def add_segment_member(self, list_id, segment_id, email):
        return self._request('POST', f'/lists/{list_id}/segments/{segment_id}/members', {
            'email_address': email,
        })

    def add_segment_members(self, list_id, segment_id, emails):
        """
        Add each address to a segment, one call per address.

        Best effort: a rejected address is recorded and the loop continues.
        Returns {success, failed, errors}.
        """
        results = {'success': 0, 'failed': 0, 'errors': []}
        for email in emails:
            try:
                self.add_segment_member(list_id, segment_id, email)
                results['success'] += 1
            except MailchimpError as e:
                results['failed'] += 1
                results['errors'].append(f"Error adding {email}: {e.message}")
        return results

    # ===================
    # CAMPAIGNS
    # ===================

    def create_campaign(self, list_id, subject, from_name, reply_to, title):
        """Create a regular campaign bound to list_id; returns the campaign id"""
        data = self._request('POST', '/campaigns', {
            'type': 'regular',
            'recipients': {'list_id': list_id},
            'settings': {
                'subject_line': subject,
                'from_name': from_name,
                'reply_to': reply_to,
                'title': title,
            },
        })
        campaign_id = data.get('id')
        if not campaign_id:
            raise MailchimpError('Mailchimp did not return a campaign id')
        return campaign_id

    def set_campaign_content(self, campaign_id, html):
        return self._request('PUT', f'/campaigns/{campaign_id}/content', {'html': html})

    def send_campaign(self, campaign_id):
        self._request('POST', f'/campaigns/{campaign_id}/actions/send')
        return {'id': campaign_id, 'status': 'sent'}


def _list_summary(item):
    return {
        'id': item.get('id'),
        'name': item.get('name'),
        'memberCount': (item.get('stats') or {}).get('member_count', 0),
        'dateCreated': item.get('date_created'),
        'webId': item.get('web_id'),
    }
