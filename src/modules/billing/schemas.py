"""Pydantic v2 schemas for Billing API endpoints."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.models.enums import BillingStatus, BillingType, RecurringInterval, SideEffectStatus


# ---------------------------------------------------------------------------
# Nested value schemas
# ---------------------------------------------------------------------------


class BillingItem(BaseModel):
    description: str = Field(..., max_length=500)
    quantity: Decimal = Field(..., ge=0)
    unit: str = Field("", max_length=20)
    unit_price: Decimal
    tax_rate: Literal[0, 8, 10] = 10


class TaxTotal(BaseModel):
    tax8: Decimal = Decimal("0")
    tax10: Decimal = Decimal("0")


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BillingCreate(BaseModel):
    contract_id: int | None = None
    status: BillingStatus = BillingStatus.PLANNED
    billing_type: BillingType = BillingType.RECEIVABLE
    invoice_number: str | None = Field(None, max_length=50)
    issue_date: date | None = None
    payment_deadline: date | None = None
    payment_date: date | None = None
    amount: Decimal | None = None
    subtotal: Decimal | None = None
    tax_total: TaxTotal | None = None
    total: Decimal | None = None
    items: list[BillingItem] = Field(default_factory=list)
    client_info: dict[str, Any] | None = None
    is_recurring: bool = False
    recurring_interval: RecurringInterval | None = None


class BillingStatusUpdateRequest(BaseModel):
    status: BillingStatus
    payment_date: date | None = None

    @model_validator(mode="after")
    def _paid_requires_payment_date(self) -> BillingStatusUpdateRequest:
        if self.status == BillingStatus.PAID and self.payment_date is None:
            raise ValueError("payment_date is required when status is Paid")
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BillingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    contract_id: int | None = None
    contract_party_b: str | None = None
    source_billing_id: int | None = None
    status: BillingStatus
    billing_type: BillingType
    invoice_number: str | None = None
    issue_date: date | None = None
    payment_deadline: date | None = None
    payment_date: date | None = None
    amount: Decimal | None = None
    subtotal: Decimal | None = None
    tax_total: TaxTotal | None = None
    total: Decimal | None = None
    display_total: Decimal
    items: list[BillingItem] = Field(default_factory=list)
    client_info: dict[str, Any] | None = None
    is_recurring: bool
    recurring_interval: RecurringInterval | None = None
    created_at: datetime
    updated_at: datetime


class BillingListResponse(BaseModel):
    items: list[BillingResponse]
    total: int


class SideEffectResponse(BaseModel):
    status: SideEffectStatus
    billing_id: int | None = None
    error: str | None = None


class BillingStatusUpdateResponse(BaseModel):
    billing: BillingResponse
    notification: SideEffectResponse
    successor: SideEffectResponse
