"""
Audience Routes
===============

- GET  /lists -- all Mailchimp audiences
- POST /lists/<list_id>/members -- add one member
- POST /lists/<list_id>/bulk-import -- CSV import (multipart field 'file')
- POST /lists/<list_id>/segments -- create a segment
- POST /lists/<list_id>/segments/<segment_id>/members -- add emails to a segment
- POST /upload -- parse a CSV and echo its rows
"""

import logging
from flask import request, jsonify, current_app

from . import audience_bp
from .importer import bulk_import, parse_upload
from mailbridge.core.errors import MailBridgeError, UploadError
from mailbridge.core.logging_service import db_log

logger = logging.getLogger(__name__)


def _db_log(level, message, details=None):
    """Log to the persistent app_logs collection"""
    db_log(level, 'audience', message, details)


def _ext():
    return current_app.extensions['mailbridge']


@audience_bp.route('/lists', methods=['GET'])
def get_lists():
    """List every Mailchimp audience"""
    try:
        lists = _ext().client.get_all_lists()
        logger.info(f"Fetched {len(lists)} Mailchimp lists")
        return jsonify(lists), 200
    except MailBridgeError as e:
        logger.error(f"Error fetching lists: {e}")
        _db_log('error', 'Failed to fetch Mailchimp lists', {'error': e.message})
        return jsonify({
            'error': 'Failed to fetch Mailchimp lists',
            'details': e.message
        }), 500


@audience_bp.route('/lists/<list_id>/members', methods=['POST'])
def add_member(list_id):
    """Add a single subscriber to a list"""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'No data provided'}), 400

    email = data.get('email') or ''
    if not isinstance(email, str):
        return jsonify({'error': 'Email must be a string'}), 400
    email = email.strip()
    if not email:
        return jsonify({'error': 'Email is required'}), 400

    fields = data.get('fields') or {}
    if not isinstance(fields, dict):
        return jsonify({'error': 'fields must be an object'}), 400

    try:
        member = _ext().client.add_list_member(list_id, email, 'subscribed', fields)
        _db_log('info', f'Member added to list {list_id}', {'email': email})
        return jsonify(member), 201
    except MailBridgeError as e:
        logger.error(f"Error adding member {email} to {list_id}: {e}")
        return jsonify({'error': e.message}), 500


@audience_bp.route('/lists/<list_id>/bulk-import', methods=['POST'])
def bulk_import_route(list_id):
    """Import subscribers from an uploaded CSV file"""
    logger.info(f"Importing to list ID: {list_id}")

    if 'file' not in request.files:
        return jsonify({'error': 'No file uploaded'}), 400

    ext = _ext()
    try:
        results = bulk_import(
            ext.client,
            ext.subscribers,
            list_id,
            request.files['file'],
            current_app.config['UPLOAD_FOLDER']
        )
    except UploadError as e:
        return jsonify(e.to_dict()), 400
    except MailBridgeError as e:
        logger.error(f"Bulk import to {list_id} failed: {e}")
        _db_log('error', 'Bulk import failed', {'list_id': list_id, 'error': e.message})
        return jsonify({'error': e.message}), 500

    _db_log('info', 'Bulk import completed', {
        'list_id': list_id,
        'success': results['success'],
        'failed': results['failed']
    })
    return jsonify({'message': 'Import completed', 'results': results}), 200


@audience_bp.route('/lists/<list_id>/segments', methods=['POST'])
def create_segment(list_id):
    """Create a segment on a list"""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'No data provided'}), 400

    name = data.get('name') or ''
    if not isinstance(name, str):
        return jsonify({'error': 'Segment name must be a string'}), 400
    name = name.strip()
    if not name:
        return jsonify({'error': 'Segment name is required'}), 400

    try:
        segment = _ext().client.create_segment(list_id, name, data.get('conditions'))
        _db_log('info', f'Segment created on list {list_id}', {'name': name})
        return jsonify(segment), 201
    except MailBridgeError as e:
        logger.error(f"Error creating segment {name} on {list_id}: {e}")
        return jsonify({'error': e.message}), 500


@audience_bp.route('/lists/<list_id>/segments/<segment_id>/members', methods=['POST'])
def add_segment_members(list_id, segment_id):
    """Add a batch of emails to a segment"""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'No data provided'}), 400

    emails = data.get('emails')
    if not isinstance(emails, list) or not emails:
        return jsonify({'error': 'Array of emails is required'}), 400

    try:
        results = _ext().client.add_segment_members(list_id, segment_id, emails)
        return jsonify(results), 200
    except MailBridgeError as e:
        logger.error(f"Error adding members to segment {segment_id}: {e}")
        return jsonify({'error': e.message}), 500


@audience_bp.route('/upload', methods=['POST'])
def upload():
    """Parse an uploaded CSV without importing it"""
    if 'file' not in request.files:
        return jsonify({'error': 'No file uploaded'}), 400

    try:
        rows = parse_upload(request.files['file'], current_app.config['UPLOAD_FOLDER'])
    except UploadError as e:
        return jsonify(e.to_dict()), 400

    return jsonify({'message': 'File processed successfully', 'data': rows}), 200
