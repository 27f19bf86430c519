"""
Campaigns Routes
================

- POST /                       -- create a local campaign record
- GET  /                       -- list local campaign records
- GET  /<id>                   -- one local campaign record
- PUT  /<campaign_id>/content  -- set Mailchimp campaign HTML
- POST /<campaign_id>/send     -- send a Mailchimp campaign
- POST /bulk-send              -- create + content + send, then snapshot
"""

import logging
from flask import request, jsonify, current_app

from . import campaigns_bp
from .models import serialize
from .orchestration import bulk_send
from mailbridge.core.errors import MailBridgeError, ValidationError
from mailbridge.core.logging_service import db_log

logger = logging.getLogger(__name__)


def _db_log(level, message, details=None):
    """Log to the persistent app_logs collection"""
    db_log(level, 'campaigns', message, details)


def _ext():
    return current_app.extensions['mailbridge']


@campaigns_bp.route('/', methods=['POST'], strict_slashes=False)
def create():
    """Create a campaign record locally (no Mailchimp call)"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'No data provided'}), 400

    try:
        campaign = _ext().campaigns.create(data)
    except ValidationError as e:
        return jsonify({'error': e.message}), 400
    except MailBridgeError as e:
        return jsonify({'error': e.message}), 500

    return jsonify(serialize(campaign)), 201


@campaigns_bp.route('/', methods=['GET'], strict_slashes=False)
def list_campaigns():
    """All local campaign records"""
    try:
        return jsonify(serialize(_ext().campaigns.all())), 200
    except MailBridgeError as e:
        return jsonify({'error': e.message}), 500


@campaigns_bp.route('/<campaign_id>', methods=['GET'])
def get_campaign(campaign_id):
    """One local campaign record"""
    try:
        campaign = _ext().campaigns.get(campaign_id)
    except MailBridgeError as e:
        return jsonify({'error': e.message}), 500

    if not campaign:
        return jsonify({'error': 'Campaign not found'}), 404
    return jsonify(serialize(campaign)), 200


@campaigns_bp.route('/<campaign_id>/content', methods=['PUT'])
def set_content(campaign_id):
    """Set the HTML body of a Mailchimp campaign"""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'No data provided'}), 400

    html = data.get('html')
    if not html:
        return jsonify({'error': 'HTML content is required'}), 400

    try:
        result = _ext().client.set_campaign_content(campaign_id, html)
        return jsonify(result), 200
    except MailBridgeError as e:
        logger.error(f"Error setting campaign content for {campaign_id}: {e}")
        return jsonify({'error': e.message}), 500


@campaigns_bp.route('/<campaign_id>/send', methods=['POST'])
def send(campaign_id):
    """Send a Mailchimp campaign"""
    try:
        result = _ext().client.send_campaign(campaign_id)
        _db_log('info', 'Campaign sent', {'campaign_id': campaign_id})
        return jsonify(result), 200
    except MailBridgeError as e:
        logger.error(f"Error sending campaign {campaign_id}: {e}")
        return jsonify({'error': e.message}), 500


@campaigns_bp.route('/bulk-send', methods=['POST'])
def bulk_send_route():
    """Create, fill and send a campaign in one request"""
    data = request.get_json(silent=True) or {}
    ext = _ext()
    try:
        result = bulk_send(ext.client, ext.campaigns, ext.subscribers, data)
    except ValidationError as e:
        return jsonify({'success': False, 'error': e.message, 'missing': e.details}), 400
    except MailBridgeError as e:
        logger.error(f"Error sending campaign: {e}")
        return jsonify({'success': False, 'error': e.message}), 500

    return jsonify(result), 200
