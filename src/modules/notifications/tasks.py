"""Celery tasks for outbound billing notifications."""

from __future__ import annotations

import logging

from celery_app import celery

logger = logging.getLogger(__name__)


@celery.task(name="src.modules.notifications.tasks.send_billing_sent_email")
def send_billing_sent_email(billing_id: int) -> dict:
    """Deliver the "invoice sent" e-mail for a billing.

    Mail delivery is simulated: the task only records the send.
    """
    logger.info("[EMAIL SENT] Invoice #%s has been sent to client.", billing_id)
    return {"billing_id": billing_id, "sent": True}
