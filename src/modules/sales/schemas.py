"""Read models for sales reporting. Built fresh per query, never mutated."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.models.enums import BillingStatus


class SalesWindow(BaseModel):
    """Inclusive month range; missing parts default from the current month."""

    model_config = ConfigDict(frozen=True)

    start_year: int | None = Field(None, ge=1900, le=9999)
    start_month: int | None = Field(None, ge=1, le=12)
    end_year: int | None = Field(None, ge=1900, le=9999)
    end_month: int | None = Field(None, ge=1, le=12)

    @property
    def is_complete(self) -> bool:
        return None not in (self.start_year, self.start_month, self.end_year, self.end_month)


class MonthlySalesData(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int
    month: int
    month_label: str
    total_sales: Decimal
    invoice_count: int
    sales_by_company: dict[str, Decimal] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _company_breakdown_sums_to_total(self) -> MonthlySalesData:
        if sum(self.sales_by_company.values()) != self.total_sales:
            raise ValueError(
                f"Company breakdown for {self.month_label} does not sum to total_sales"
            )
        return self


class InvoiceDetail(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    invoice_number: str | None = None
    client_name: str
    issue_date: date | None = None
    payment_deadline: date | None = None
    total: Decimal
    status: BillingStatus


class MonthlySalesResponse(BaseModel):
    items: list[MonthlySalesData]
    company: str | None = None


class CompanyListResponse(BaseModel):
    items: list[str]


class InvoiceDetailListResponse(BaseModel):
    items: list[InvoiceDetail]
    total: int
