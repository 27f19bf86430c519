"""
Campaigns Module
================

Provides:
- Mailchimp campaign content/send actions
- Bulk send (create + content + send) with a local snapshot
- Local campaign records (create, list, get)
"""

from flask import Blueprint

campaigns_bp = Blueprint(
    'campaigns',
    __name__,
    url_prefix='/api/campaigns'
)

from . import routes
