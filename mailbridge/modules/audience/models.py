"""
Audience Models
===============

Local copy of Mailchimp list members, kept in the `subscribers` collection.
Documents are keyed by (email, listId) and only ever upserted.
"""

import logging
from datetime import datetime, timezone

from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from mailbridge.core.errors import PersistenceError, ValidationError

logger = logging.getLogger(__name__)

SUBSCRIBER_STATUSES = ('subscribed', 'unsubscribed', 'cleaned', 'pending')


def _now():
    return datetime.now(timezone.utc)


class SubscriberStore:
    """CRUD helpers for Subscriber documents"""

    def __init__(self, collection):
        self.collection = collection

    def upsert(self, email, list_id, first_name='', last_name='', status='subscribed'):
        """Create or update the Subscriber for (email, list_id); returns the document"""
        if not email or not list_id:
            raise ValidationError('Subscriber requires email and listId')
        if status not in SUBSCRIBER_STATUSES:
            raise ValidationError(f"Invalid subscriber status: {status}")

        try:
            return self.collection.find_one_and_update(
                {'email': email, 'listId': list_id},
                {'$set': {
                    'firstName': first_name or '',
                    'lastName': last_name or '',
                    'status': status,
                    'subscriptionDate': _now(),
                }},
                upsert=True,
                return_document=ReturnDocument.AFTER
            )
        except PyMongoError as e:
            logger.error(f"Error upserting subscriber {email} on list {list_id}: {e}")
            raise PersistenceError(f"Failed to save subscriber {email}: {e}") from e

    def find_by_list(self, list_id):
        """All Subscriber documents for a list, in insertion order"""
        try:
            return list(self.collection.find({'listId': list_id}).sort('_id', 1))
        except PyMongoError as e:
            logger.error(f"Error loading subscribers for list {list_id}: {e}")
            raise PersistenceError(f"Failed to load subscribers: {e}") from e
