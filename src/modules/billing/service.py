"""Billing lifecycle service: status transitions, sent notifications, recurring successors."""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.exceptions import ValidationException
from src.models.billing import Billing
from src.models.enums import BillingStatus, SideEffectStatus
from src.modules.billing.constants import BILLING_LIFECYCLE, RECURRING_INTERVAL_MONTHS
from src.modules.billing.repository import BillingFilter, BillingRepository
from src.modules.billing.schemas import BillingCreate
from src.modules.notifications.service import BillingNotifier
from src.utils.dates import add_months

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def utc_now() -> datetime:
    return datetime.now(UTC)


# Columns a successor never inherits from its source billing
_NOT_CLONED: frozenset[str] = frozenset(
    {
        "id",
        "created_at",
        "updated_at",
        "invoice_number",
        "status",
        "payment_date",
        "source_billing_id",
        "issue_date",
        "payment_deadline",
    }
)


@dataclass
class SideEffectResult:
    status: SideEffectStatus
    record: Billing | None = None
    error: str | None = None


@dataclass
class StatusUpdateResult:
    """Outcome of a status change.

    ``billing`` is the committed primary write. The side effects are reported
    separately because their failure never undoes the primary write.
    """

    billing: Billing
    notification: SideEffectResult
    successor: SideEffectResult


def generate_auto_invoice_number(now: datetime, prefix: str | None = None) -> str:
    """INV-AUTO-NNNN from the last four digits of the millisecond timestamp.

    Not unique: two successors generated in the same 10-second cycle collide.
    """
    suffix = ((now - _EPOCH) // timedelta(milliseconds=1)) % 10000
    return f"{prefix or settings.auto_invoice_prefix}-{suffix:04d}"


def build_successor(source: Billing, now: datetime) -> Billing:
    """Build the next-cycle Planned billing for a recurring ``source``.

    Returns a transient instance; the caller persists it.
    """
    interval = source.effective_interval
    if interval is None:
        raise ValueError(f"Billing {source.id} is not recurring")
    months = RECURRING_INTERVAL_MONTHS[interval]
    today = now.date()

    values = {
        attr.key: copy.deepcopy(getattr(source, attr.key))
        for attr in sa_inspect(Billing).column_attrs
        if attr.key not in _NOT_CLONED
    }
    return Billing(
        **values,
        status=BillingStatus.PLANNED,
        invoice_number=generate_auto_invoice_number(now),
        issue_date=add_months(source.issue_date or today, months),
        payment_deadline=add_months(source.payment_deadline or today, months),
        payment_date=None,
        source_billing_id=source.id,
    )


class BillingService:
    def __init__(
        self,
        db: AsyncSession,
        notifier: BillingNotifier | None = None,
        clock: Clock = utc_now,
        repository: BillingRepository | None = None,
    ):
        self.db = db
        self.repository = repository or BillingRepository(db)
        self.notifier = notifier or BillingNotifier()
        self.clock = clock

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def create_billing(self, account_id: str, data: BillingCreate) -> Billing:
        if data.status == BillingStatus.PAID and data.payment_date is None:
            raise ValidationException(
                "A Paid billing requires a payment date",
                details=[{"field": "payment_date", "message": "required when status is Paid"}],
            )
        billing = Billing(
            **data.model_dump(exclude={"items", "tax_total"}),
            items=[item.model_dump(mode="json") for item in data.items],
            tax_total=data.tax_total.model_dump(mode="json") if data.tax_total else None,
        )

        billing = await self.repository.insert_billing(account_id, billing)
        logger.info("Created billing %s (%s) for account %s", billing.id, billing.status.value, account_id)
        return billing

    async def get_billing(self, billing_id: int, account_id: str) -> Billing:
        return await self.repository.get_billing_by_id(billing_id, account_id)

    async def list_billings(
        self, account_id: str, status: BillingStatus | None = None
    ) -> list[Billing]:
        billing_filter = BillingFilter(statuses=[status]) if status is not None else None
        return await self.repository.list_billings(account_id, billing_filter)

    async def delete_billing(self, billing_id: int, account_id: str) -> None:
        await self.repository.delete_billing(billing_id, account_id)
        logger.info("Deleted billing %s for account %s", billing_id, account_id)

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    async def set_status(
        self,
        billing_id: int,
        account_id: str,
        new_status: BillingStatus | str,
        payment_date: date | None = None,
    ) -> StatusUpdateResult:
        """Change a billing's status and run the status-specific side effects.

        Sent queues the client notification. Paid on a recurring billing
        creates the next cycle's Planned billing. Side-effect failures are
        logged and reported in the result; only validation, lookup and
        primary-write failures raise.

        Both side effects run after the primary write is flushed but before
        the request transaction commits. The notification is queued on the
        broker right away, so a failed commit can leave an e-mail queued for
        a status change that was rolled back. The successor insert shares the
        transaction and rolls back with it.
        """
        new_status = self._coerce_status(new_status)
        if new_status == BillingStatus.PAID and payment_date is None:
            raise ValidationException(
                "A payment date is required to mark a billing as Paid",
                details=[{"field": "payment_date", "message": "required when status is Paid"}],
            )

        current = await self.repository.get_billing_by_id(billing_id, account_id)
        old_status = current.status

        patch: dict = {"status": new_status}
        if payment_date is not None:
            patch["payment_date"] = payment_date
        billing = await self.repository.update_billing(billing_id, account_id, patch)

        if BILLING_LIFECYCLE.index(new_status) < BILLING_LIFECYCLE.index(old_status):
            logger.warning(
                "Billing %s moved backwards %s -> %s",
                billing_id,
                old_status.value,
                new_status.value,
            )
        logger.info(
            "Billing %s transitioned %s -> %s",
            billing_id,
            old_status.value,
            new_status.value,
        )

        notification = SideEffectResult(SideEffectStatus.SKIPPED)
        successor = SideEffectResult(SideEffectStatus.SKIPPED)
        # Planned and Approved carry no side effects
        if new_status == BillingStatus.SENT:
            notification = self._notify_sent(billing)
        elif new_status == BillingStatus.PAID:
            successor = await self._generate_successor(billing, account_id)

        return StatusUpdateResult(
            billing=billing, notification=notification, successor=successor
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _coerce_status(value: BillingStatus | str) -> BillingStatus:
        try:
            return BillingStatus(value)
        except ValueError as exc:
            allowed = [s.value for s in BillingStatus]
            raise ValidationException(
                f"Unknown billing status '{value}'. Allowed: {allowed}"
            ) from exc

    def _notify_sent(self, billing: Billing) -> SideEffectResult:
        try:
            self.notifier.notify_sent(billing.id)
        except Exception as exc:
            logger.exception("Sent notification failed for billing %s", billing.id)
            return SideEffectResult(SideEffectStatus.FAILED, error=str(exc))
        return SideEffectResult(SideEffectStatus.SUCCEEDED)

    async def _generate_successor(self, billing: Billing, account_id: str) -> SideEffectResult:
        if billing.effective_interval is None:
            return SideEffectResult(SideEffectStatus.SKIPPED)

        try:
            existing = await self.repository.find_successor(billing.id, account_id)
            if existing is not None:
                logger.info(
                    "Billing %s already has successor %s; not generating another",
                    billing.id,
                    existing.id,
                )
                return SideEffectResult(SideEffectStatus.SKIPPED, record=existing)

            successor = build_successor(billing, self.clock())
            successor = await self.repository.insert_billing(account_id, successor)
        except Exception as exc:
            logger.exception(
                "Recurring successor generation failed for billing %s", billing.id
            )
            return SideEffectResult(SideEffectStatus.FAILED, error=str(exc))

        logger.info(
            "Generated %s successor %s (%s) from billing %s",
            billing.effective_interval.value,
            successor.id,
            successor.invoice_number,
            billing.id,
        )
        return SideEffectResult(SideEffectStatus.SUCCEEDED, record=successor)
