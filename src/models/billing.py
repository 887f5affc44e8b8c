"""Billing model: one invoice tracked through the Planned -> Paid lifecycle."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, Date, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.database.base import Base, IntegerPrimaryKeyMixin, JSONType, TimestampMixin
from src.models.enums import BillingStatus, BillingType, RecurringInterval

if TYPE_CHECKING:
    from src.models.contract import Contract


class Billing(IntegerPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "billings"

    account_id: Mapped[str] = mapped_column(String(255), nullable=False)

    # Weak reference, lookup only
    contract_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("contracts.id", ondelete="SET NULL"),
    )
    # Set on generated successors; one successor per source billing
    source_billing_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("billings.id", ondelete="SET NULL"),
        unique=True,
    )

    status: Mapped[BillingStatus] = mapped_column(
        nullable=False, default=BillingStatus.PLANNED
    )
    billing_type: Mapped[BillingType] = mapped_column(
        nullable=False, default=BillingType.RECEIVABLE
    )
    invoice_number: Mapped[str | None] = mapped_column(String(50))

    # Dates
    issue_date: Mapped[date | None] = mapped_column(Date)
    payment_deadline: Mapped[date | None] = mapped_column(Date)
    payment_date: Mapped[date | None] = mapped_column(Date)

    # Amounts
    amount: Mapped[Decimal | None] = mapped_column(Numeric(15, 2))
    subtotal: Mapped[Decimal | None] = mapped_column(Numeric(15, 2))
    tax_total: Mapped[dict[str, Any] | None] = mapped_column(JSONType)
    total: Mapped[Decimal | None] = mapped_column(Numeric(15, 2))

    items: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONType, nullable=False, default=list
    )
    client_info: Mapped[dict[str, Any] | None] = mapped_column(JSONType)

    # Recurrence
    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recurring_interval: Mapped[RecurringInterval | None] = mapped_column()

    # Relationships
    contract: Mapped[Contract | None] = relationship("Contract", lazy="noload")

    __table_args__ = (
        Index("ix_billings_account_id", "account_id"),
        Index("ix_billings_account_status", "account_id", "status"),
        Index("ix_billings_issue_date", "issue_date"),
    )

    @property
    def contract_party_b(self) -> str | None:
        return self.contract.party_b if self.contract is not None else None

    @property
    def client_name(self) -> str:
        """Display name from the client snapshot, '' when absent."""
        if not self.client_info:
            return ""
        return self.client_info.get("name") or ""

    @property
    def effective_interval(self) -> RecurringInterval | None:
        if not self.is_recurring:
            return None
        return self.recurring_interval

    @property
    def effective_amount(self) -> Decimal:
        """Amount counted in sales reports: total, else legacy amount, else 0."""
        if self.total is not None:
            return Decimal(self.total)
        if self.amount is not None:
            return Decimal(self.amount)
        return Decimal("0")

    @property
    def display_total(self) -> Decimal:
        """Final amount shown to users.

        Falls back to subtotal plus taxes when no total was stored, then to
        the legacy flat amount.
        """
        if self.total is not None:
            return Decimal(self.total)
        if self.subtotal is not None:
            taxes = self.tax_total or {}
            return (
                Decimal(self.subtotal)
                + Decimal(str(taxes.get("tax8") or 0))
                + Decimal(str(taxes.get("tax10") or 0))
            )
        if self.amount is not None:
            return Decimal(self.amount)
        return Decimal("0")
