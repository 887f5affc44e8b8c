"""Billing lifecycle order and recurrence intervals."""

from __future__ import annotations

from src.models.enums import BillingStatus, RecurringInterval

# Intended linear lifecycle; transitions are not enforced against it
BILLING_LIFECYCLE: tuple[BillingStatus, ...] = (
    BillingStatus.PLANNED,
    BillingStatus.APPROVED,
    BillingStatus.SENT,
    BillingStatus.PAID,
)

RECURRING_INTERVAL_MONTHS: dict[RecurringInterval, int] = {
    RecurringInterval.MONTHLY: 1,
    RecurringInterval.QUARTERLY: 3,
    RecurringInterval.YEARLY: 12,
}
