import logging

from pymongo import ASCENDING, MongoClient
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

SUBSCRIBERS = 'subscribers'
CAMPAIGNS = 'campaigns'
APP_LOGS = 'app_logs'


class Database:
    """Thin holder for the MongoDB connection pool and database handle."""

    def __init__(self, db, client=None):
        self.db = db
        self.client = client

    @classmethod
    def connect(cls, uri, db_name, timeout_ms=5000):
        """Open a connection pool for the given URI (lazy, no round-trip)."""
        # Bounds how long a write (app_logs included) waits on an unreachable server
        client = MongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
        logger.info(f"MongoDB client created for database '{db_name}'")
        return cls(client[db_name], client)

    @property
    def subscribers(self):
        return self.db[SUBSCRIBERS]

    @property
    def campaigns(self):
        return self.db[CAMPAIGNS]

    @property
    def app_logs(self):
        return self.db[APP_LOGS]

    def init_indexes(self):
        """Create/verify the collection indexes"""
        # One Subscriber per (email, listId); the same email may sit on several lists
        self.subscribers.create_index(
            [('email', ASCENDING), ('listId', ASCENDING)],
            unique=True,
            name='email_list_unique'
        )
        self.subscribers.create_index([('listId', ASCENDING)], name='list_id')
        self.campaigns.create_index([('listId', ASCENDING)], name='list_id')
        self.app_logs.create_index([('timestamp', ASCENDING)], name='timestamp')
        logger.info("MongoDB indexes created/verified successfully")

    def ping(self):
        """Return True when the server answers a ping"""
        try:
            self.db.command('ping')
            return True
        except PyMongoError as e:
            logger.error(f"MongoDB ping failed: {e}")
            return False

    def close(self):
        if self.client is not None:
            self.client.close()
