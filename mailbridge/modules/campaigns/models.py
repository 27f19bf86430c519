"""
Campaigns Models
================

Campaign documents in the `campaigns` collection: a local record of what was
sent, with a snapshot of the list's Subscriber ids at send time.
"""

import logging
from datetime import datetime, timezone

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import PyMongoError

from mailbridge.core.errors import PersistenceError, ValidationError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('subject', 'content', 'listId')


def _now():
    return datetime.now(timezone.utc)


def serialize(doc):
    """Render a Mongo document as JSON-safe data (ids to str, dates to ISO)"""
    if isinstance(doc, list):
        return [serialize(d) for d in doc]
    if isinstance(doc, dict):
        return {key: serialize(value) for key, value in doc.items()}
    if isinstance(doc, ObjectId):
        return str(doc)
    if isinstance(doc, datetime):
        return doc.isoformat()
    return doc


class CampaignStore:
    """CRUD helpers for Campaign documents"""

    def __init__(self, collection):
        self.collection = collection

    def create(self, data):
        """Insert a Campaign; returns the stored document (with _id)"""
        missing = [f for f in REQUIRED_FIELDS if not data.get(f)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        now = _now()
        doc = {
            'subject': data['subject'],
            'content': data['content'],
            'listId': data['listId'],
            'listName': data.get('listName') or '',
            'sentDate': data.get('sentDate') or now,
            'createdAt': now,
            'subscribers': list(data.get('subscribers') or []),
        }
        try:
            result = self.collection.insert_one(doc)
        except PyMongoError as e:
            logger.error(f"Error saving campaign: {e}")
            raise PersistenceError(f"Failed to save campaign: {e}") from e

        doc['_id'] = result.inserted_id
        logger.info(f"Saved campaign {result.inserted_id}: {doc['subject']}")
        return doc

    def get(self, campaign_id):
        """Campaign by id, or None for unknown or malformed ids"""
        try:
            oid = ObjectId(campaign_id)
        except (InvalidId, TypeError):
            return None
        try:
            return self.collection.find_one({'_id': oid})
        except PyMongoError as e:
            logger.error(f"Error getting campaign {campaign_id}: {e}")
            raise PersistenceError(f"Failed to load campaign: {e}") from e

    def all(self):
        """Every Campaign, newest first"""
        try:
            return list(self.collection.find().sort('createdAt', -1))
        except PyMongoError as e:
            logger.error(f"Error getting all campaigns: {e}")
            raise PersistenceError(f"Failed to load campaigns: {e}") from e
