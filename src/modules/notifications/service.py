"""Fire-and-forget notification dispatch for billing events."""

from __future__ import annotations

import logging

from kombu.exceptions import KombuError

from src.exceptions import SideEffectFailure

logger = logging.getLogger(__name__)


class BillingNotifier:
    """Enqueues billing notifications on the Celery notifications queue."""

    def notify_sent(self, billing_id: int) -> None:
        from src.modules.notifications.tasks import send_billing_sent_email

        try:
            send_billing_sent_email.delay(billing_id)
        except (KombuError, OSError) as exc:
            raise SideEffectFailure(
                f"Could not enqueue sent notification for billing {billing_id}"
            ) from exc
        logger.info("Queued sent notification for billing %s", billing_id)
