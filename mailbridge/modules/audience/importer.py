"""
CSV Bulk Import
===============

Upload handling and the bulk-import pipeline:

    save upload -> parse rows -> remove temp file -> per row:
        validate email -> Mailchimp add member -> local upsert
    -> {success, failed, errors}

Rows are processed one at a time, in file order. A failing row is recorded
in the result and the next row is processed.
"""

import csv
import logging
import os
import uuid

from werkzeug.utils import secure_filename

from mailbridge.core.errors import MailBridgeError, UploadError

logger = logging.getLogger(__name__)

EMAIL_FIELD = 'email'
FIRST_NAME_FIELD = 'first_name'
LAST_NAME_FIELD = 'last_name'


def _upload_path(file_storage, upload_folder):
    """Unique temp path for an upload inside upload_folder"""
    if file_storage is None or not file_storage.filename:
        raise UploadError('No file uploaded')

    os.makedirs(upload_folder, exist_ok=True)
    filename = secure_filename(file_storage.filename) or 'upload.csv'
    return os.path.join(upload_folder, f"{uuid.uuid4().hex}_{filename}")


def remove_upload(path):
    """Delete a temporary upload if it is still on disk"""
    if path and os.path.exists(path):
        os.remove(path)
        logger.debug(f"Removed temporary upload {path}")


def parse_csv(path):
    """
    Parse a CSV file into a list of dicts keyed by lower-cased header.

    Short rows come back with missing keys set to None; surplus cells are
    dropped. An empty or header-only file gives [].
    """
    try:
        with open(path, newline='', encoding='utf-8-sig') as fh:
            reader = csv.DictReader(fh)
            rows = []
            for row in reader:
                rows.append({
                    key.strip().lower(): value
                    for key, value in row.items()
                    if key is not None
                })
            return rows
    except (UnicodeDecodeError, csv.Error) as e:
        raise UploadError('Could not parse uploaded file', details=str(e)) from e


def parse_upload(file_storage, upload_folder):
    """Save, parse and always remove an uploaded CSV; returns the rows"""
    path = _upload_path(file_storage, upload_folder)
    try:
        file_storage.save(path)
        return parse_csv(path)
    finally:
        remove_upload(path)


def _clean(value):
    return (value or '').strip()


def import_rows(client, store, list_id, rows):
    """
    Push parsed rows to Mailchimp and mirror them into the local store.

    Args:
        client: MailchimpClient
        store: SubscriberStore
        list_id: Mailchimp list id
        rows: iterable of dicts with 'email' and optional name columns

    Returns:
        dict with {success, failed, errors}
    """
    results = {'success': 0, 'failed': 0, 'errors': []}

    for row_number, row in enumerate(rows, start=1):
        email = _clean(row.get(EMAIL_FIELD))
        if not email:
            results['failed'] += 1
            results['errors'].append(f"Row {row_number}: Missing email address")
            continue

        first_name = _clean(row.get(FIRST_NAME_FIELD))
        last_name = _clean(row.get(LAST_NAME_FIELD))

        try:
            client.add_list_member(list_id, email, 'subscribed', {
                'FNAME': first_name,
                'LNAME': last_name,
            })
            store.upsert(email, list_id, first_name, last_name, 'subscribed')
            results['success'] += 1
        except MailBridgeError as e:
            results['failed'] += 1
            results['errors'].append(f"Error adding {email}: {e.message}")

    logger.info(
        f"Import to list {list_id}: {results['success']} succeeded, {results['failed']} failed"
    )
    return results


def bulk_import(client, store, list_id, file_storage, upload_folder):
    """Full pipeline for one uploaded file; see module docstring"""
    rows = parse_upload(file_storage, upload_folder)
    logger.info(f"Parsed {len(rows)} rows for list {list_id}")
    return import_rows(client, store, list_id, rows)
