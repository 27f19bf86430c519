"""
Bulk Send
=========

Create -> set content -> send a Mailchimp campaign, then record it locally
with a snapshot of the list's subscribers.

A failure after the campaign was created leaves it on Mailchimp unsent; it is
logged with its id and not cleaned up.
"""

import logging
from datetime import datetime, timezone

from mailbridge.core.errors import ValidationError
from mailbridge.core.logging_service import db_log
from mailbridge.modules.mailchimp import MailchimpError

logger = logging.getLogger(__name__)

BULK_SEND_FIELDS = ('listId', 'subject', 'fromName', 'replyTo', 'htmlContent')


def validate_bulk_send(data):
    """Raise ValidationError unless all five bulk-send fields are present"""
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object', details=list(BULK_SEND_FIELDS))
    missing = [f for f in BULK_SEND_FIELDS if not data.get(f)]
    if missing:
        raise ValidationError('Missing required fields', details=missing)


def bulk_send(client, campaigns, subscribers, data):
    """
    Run the composite send.

    Args:
        client: MailchimpClient
        campaigns: CampaignStore
        subscribers: SubscriberStore
        data: dict with listId, subject, fromName, replyTo, htmlContent
              (optional listName, title)

    Returns:
        dict with {success, message, campaignId, subscriberCount}
    """
    validate_bulk_send(data)

    list_id = data['listId']
    now = datetime.now(timezone.utc)
    title = data.get('title') or f"Campaign {now.isoformat()}"

    campaign_id = client.create_campaign(
        list_id,
        data['subject'],
        data['fromName'],
        data['replyTo'],
        title
    )
    logger.info(f"Campaign created: {campaign_id}")

    try:
        client.set_campaign_content(campaign_id, data['htmlContent'])
        logger.info(f"Campaign content set: {campaign_id}")
        client.send_campaign(campaign_id)
        logger.info(f"Campaign sent: {campaign_id}")
    except MailchimpError as e:
        logger.error(f"Campaign {campaign_id} left unsent on Mailchimp: {e}")
        db_log('error', 'campaigns', 'Orphaned Mailchimp campaign', {
            'campaign_id': campaign_id, 'list_id': list_id, 'error': e.message
        })
        raise

    snapshot = subscribers.find_by_list(list_id)
    campaigns.create({
        'subject': data['subject'],
        'content': data['htmlContent'],
        'listId': list_id,
        'listName': data.get('listName'),
        'sentDate': now,
        'subscribers': [s['_id'] for s in snapshot],
    })

    db_log('info', 'campaigns', 'Bulk send completed', {
        'campaign_id': campaign_id, 'list_id': list_id, 'subscribers': len(snapshot)
    })
    return {
        'success': True,
        'message': 'Email campaign sent successfully',
        'campaignId': campaign_id,
        'subscriberCount': len(snapshot),
    }
