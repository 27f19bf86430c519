"""
Centralized logging service for MailBridge.
Provides structured logging with MongoDB storage and console fallback.
"""

import json
import logging
import traceback
from datetime import datetime, timezone

from flask import current_app, has_app_context, has_request_context, request

logger = logging.getLogger(__name__)


def configure_logging(level='INFO'):
    """Set the root log level and a plain console format"""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    )
    logging.getLogger().setLevel(getattr(logging, str(level).upper(), logging.INFO))


class LoggingService:
    """Centralized logging service for application-wide logging"""

    @staticmethod
    def _get_collection():
        """Return the app_logs collection of the running app, if any"""
        if not has_app_context():
            return None
        ext = current_app.extensions.get('mailbridge')
        if ext is None or ext.database is None:
            return None
        return ext.database.app_logs

    @staticmethod
    def _get_request_context():
        """Extract request context information"""
        if not has_request_context():
            return None, None, None

        ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
        if ip_address and ',' in ip_address:
            ip_address = ip_address.split(',')[0].strip()

        user_agent = request.headers.get('User-Agent', '')
        return ip_address, user_agent, request.path

    @staticmethod
    def log(level, source, message, details=None):
        """
        Log a message to the app_logs collection

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (audience, campaigns, mailchimp, ...)
            message (str): Main log message
            details (dict/str): Additional details
        """
        level = level.upper()
        try:
            collection = LoggingService._get_collection()
            if collection is None:
                return

            ip_address, user_agent, request_path = LoggingService._get_request_context()
            if details is not None and not isinstance(details, (dict, str)):
                details = json.dumps(details, default=str)

            collection.insert_one({
                'timestamp': datetime.now(timezone.utc),
                'level': level,
                'source': source,
                'message': message,
                'details': details,
                'ip_address': ip_address,
                'user_agent': user_agent,
                'request_path': request_path,
            })
        except Exception as e:
            # Fallback to console logging if the store is unavailable
            print(f"[{datetime.now().isoformat()}] [{level}] [{source}] {message}")
            if details:
                print(f"Details: {details}")
            print(f"Logging service error: {e}")

    @staticmethod
    def error(source, message, details=None):
        LoggingService.log('ERROR', source, message, details)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        """Log error with full traceback"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc()
        }
        if details:
            error_details['additional_details'] = details

        LoggingService.error(source, f"Exception occurred: {type(error).__name__}", error_details)


def db_log(level, source, message, details=None):
    """Module-level shortcut used by the blueprints"""
    LoggingService.log(level, source, message, details)
