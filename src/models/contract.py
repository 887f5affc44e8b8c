"""Contract model: lookup target for billings and source of renewal alerts."""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy import Boolean, Date, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from src.database.base import Base, IntegerPrimaryKeyMixin, JSONType, TimestampMixin


class Contract(IntegerPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "contracts"

    account_id: Mapped[str] = mapped_column(String(255), nullable=False)
    contract_number: Mapped[str | None] = mapped_column(String(50))
    title: Mapped[str | None] = mapped_column(String(255))

    party_a: Mapped[str] = mapped_column(String(255), nullable=False)
    party_b: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[str] = mapped_column(String(50), nullable=False)
    auto_renewal: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deadline: Mapped[date | None] = mapped_column(Date)

    # end_date, notice_period_days, billing_amount, is_recurring, ...
    # "metadata" is reserved on declarative classes
    contract_metadata: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata", JSONType
    )

    __table_args__ = (
        Index("ix_contracts_account_id", "account_id"),
        Index("ix_contracts_status", "status"),
    )
