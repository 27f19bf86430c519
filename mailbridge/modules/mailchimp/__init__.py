"""
Mailchimp Module
================

Adapter for the Mailchimp Marketing API (lists, members, segments, campaigns).
"""

from .client import MailchimpClient, MailchimpError

__all__ = ['MailchimpClient', 'MailchimpError']
