"""
MailBridge - Mailchimp audience & campaign API
==============================================

A Flask layer over the Mailchimp Marketing API with:
- Audience lists, members and segments
- CSV bulk import mirrored into MongoDB
- Campaign content/send and one-shot bulk send with subscriber snapshots

Usage:
    from mailbridge import create_app
    app = create_app()          # reads configuration from the environment

    # or, on an existing app
    from mailbridge import MailBridge
    MailBridge(app, Config.from_env())
"""

import os
import logging
import traceback
from datetime import datetime, timezone

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from .core import Config, Database, LoggingService, MailBridgeError, UploadError, configure_logging
from .modules.audience import audience_bp
from .modules.audience.models import SubscriberStore
from .modules.campaigns import campaigns_bp
from .modules.campaigns.models import CampaignStore
from .modules.mailchimp import MailchimpClient

__version__ = '0.1.0'

logger = logging.getLogger(__name__)


class MailBridge:
    """
    Flask extension wiring the Mailchimp client, MongoDB stores and blueprints.

    client and database may be passed in (tests do this); otherwise they are
    built from config.
    """

    def __init__(self, app=None, config=None, client=None, database=None):
        self.config = config
        self.client = client
        self.database = database
        self.subscribers = None
        self.campaigns = None

        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        if self.config is None:
            self.config = Config.from_env()
        config = self.config

        configure_logging(config.log_level)

        app.config.setdefault('UPLOAD_FOLDER', config.upload_folder)
        app.config.setdefault('MAX_CONTENT_LENGTH', config.max_upload_bytes)
        app.config.setdefault('PRODUCTION', config.production)

        if self.client is None:
            self.client = MailchimpClient(config.mailchimp)
        if self.database is None:
            self.database = Database.connect(
                config.mongodb_uri, config.mongodb_db, timeout_ms=config.mongodb_timeout_ms
            )

        self.database.init_indexes()
        self.subscribers = SubscriberStore(self.database.subscribers)
        self.campaigns = CampaignStore(self.database.campaigns)

        os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

        CORS(app, origins=list(config.allowed_origins), supports_credentials=True)

        app.register_blueprint(audience_bp)
        app.register_blueprint(campaigns_bp)
        self._register_system_routes(app)
        self._register_error_handlers(app)

        app.extensions['mailbridge'] = self
        logger.info(f"MailBridge initialised (Mailchimp server {config.mailchimp.server_prefix}, "
                    f"origins {', '.join(config.allowed_origins)})")

    def get_registered_modules(self):
        return ['audience', 'campaigns']

    def _register_system_routes(self, app):
        ext = self

        @app.route('/api/test-mailchimp')
        def test_mailchimp():
            """Check the Mailchimp credentials with a ping"""
            try:
                ext.client.ping()
                return jsonify({'status': 'success', 'message': 'Connected to Mailchimp API'}), 200
            except MailBridgeError as e:
                logger.error(f"Mailchimp connection error: {e}")
                return jsonify({'status': 'error', 'message': e.message}), 500

        @app.route('/api/test-mailchimp-lists')
        def test_mailchimp_lists():
            """Fetch the audiences as a credentials + permissions check"""
            try:
                lists = ext.client.get_all_lists()
                logger.info(f"Successfully fetched lists: {len(lists)} lists found")
                return jsonify(lists), 200
            except MailBridgeError as e:
                logger.error(f"Mailchimp API error: {e}")
                return jsonify({
                    'error': 'Failed to fetch Mailchimp lists',
                    'details': e.message,
                    'timestamp': datetime.now(timezone.utc).isoformat()
                }), 500

        @app.route('/health')
        def health():
            """Process health: MongoDB reachability and Mailchimp settings"""
            mongo_ok = ext.database.ping()
            checks = {
                'mongodb': 'ok' if mongo_ok else 'critical',
                'mailchimp_config': 'ok' if ext.config.mailchimp.api_key else 'critical',
            }
            status = 'ok' if all(v == 'ok' for v in checks.values()) else 'critical'
            return jsonify({'status': status, 'checks': checks}), 200 if status == 'ok' else 503

    def _register_error_handlers(self, app):

        @app.errorhandler(404)
        def not_found(e):
            return 'Not Found', 404

        @app.errorhandler(RequestEntityTooLarge)
        def upload_too_large(e):
            return jsonify({'error': 'File upload error', 'details': e.description}), 400

        @app.errorhandler(UploadError)
        def upload_error(e):
            return jsonify({'error': 'File upload error', 'details': e.message}), 400

        @app.errorhandler(MailBridgeError)
        def mailbridge_error(e):
            logger.error(f"Unhandled {type(e).__name__}: {e}")
            return jsonify(e.to_dict()), e.status_code

        @app.errorhandler(Exception)
        def internal_error(e):
            if isinstance(e, HTTPException):
                return e
            logger.exception(f"Unhandled error: {e}")
            LoggingService.log_error_with_traceback('app', e)
            body = {'error': 'Internal server error', 'message': str(e)}
            if not app.config.get('PRODUCTION'):
                body['stack'] = traceback.format_exc()
            return jsonify(body), 500


def create_app(config=None, client=None, database=None):
    """Build the Flask application"""
    app = Flask(__name__)
    MailBridge(app, config, client=client, database=database)
    return app


__all__ = ['MailBridge', 'create_app', 'Config']
