"""
MailBridge Modules
==================

Flask blueprint modules (audience, campaigns) and the Mailchimp adapter they share.
"""

__all__ = ['audience', 'campaigns', 'mailchimp']
