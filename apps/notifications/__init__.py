"""Notification delivery.

Transactional emails sent by the booking tasks go through
``services.send_email_notification``.
"""
