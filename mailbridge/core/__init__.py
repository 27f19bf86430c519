"""
MailBridge Core
===============

Core utilities and shared functionality for MailBridge modules.
"""

from .config import Config, MailchimpConfig
from .database import Database
from .errors import (
    MailBridgeError, ConfigError, ValidationError, NotFoundError,
    UploadError, PersistenceError
)
from .logging_service import LoggingService, configure_logging, db_log

__all__ = [
    'Config', 'MailchimpConfig', 'Database', 'LoggingService',
    'configure_logging', 'db_log', 'MailBridgeError', 'ConfigError',
    'ValidationError', 'NotFoundError', 'UploadError', 'PersistenceError',
]
