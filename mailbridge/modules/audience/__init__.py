"""
Audience Module
===============

Provides:
- Mailchimp audience (list) lookup
- Single member add and CSV bulk import (mirrored into MongoDB)
- Segment creation and segment membership
- Standalone CSV upload/parse
"""

from flask import Blueprint

audience_bp = Blueprint(
    'audience',
    __name__,
    url_prefix='/api/audience'
)

from . import routes
