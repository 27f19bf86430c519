"""
Error types shared across MailBridge modules.

Each error carries the HTTP status the routes translate it to.
"""


class MailBridgeError(Exception):
    """Base class for MailBridge errors"""
    status_code = 500

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        body = {'error': self.message}
        if self.details:
            body['details'] = self.details
        return body


class ConfigError(MailBridgeError):
    """Required configuration is missing or malformed (fatal at start-up)"""


class ValidationError(MailBridgeError):
    """Caller-supplied input is missing or malformed"""
    status_code = 400


class NotFoundError(MailBridgeError):
    status_code = 404


class UploadError(MailBridgeError):
    """The uploaded file is missing or unreadable"""
    status_code = 400


class PersistenceError(MailBridgeError):
    """The document store rejected a read or write"""
