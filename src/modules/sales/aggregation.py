"""Month-bucketed sales projections over a list of billings.

Pure functions: they read only their arguments and never mutate the
billings. Callers pass billings with drafts (Planned) already removed, and
pass ``today`` whenever the window is not fully specified.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Protocol

from src.models.enums import BillingStatus
from src.modules.sales.constants import UNNAMED_CLIENT
from src.modules.sales.schemas import InvoiceDetail, MonthlySalesData, SalesWindow
from src.utils.dates import MonthKey, month_label, month_span, trailing_window


class SalesRecord(Protocol):
    """The billing attributes the projections read."""

    id: int
    status: BillingStatus
    invoice_number: str | None
    issue_date: date | None
    payment_deadline: date | None

    @property
    def client_name(self) -> str: ...

    @property
    def effective_amount(self) -> Decimal: ...


def resolve_window(
    window: SalesWindow | None,
    today: date | None,
    default_months: int = 12,
) -> tuple[MonthKey, MonthKey]:
    """Fill in a partial window.

    Each missing part defaults independently: the end to today's month, the
    start to ``default_months - 1`` months before it.
    """
    window = window or SalesWindow()
    if window.is_complete:
        return (window.start_year, window.start_month), (window.end_year, window.end_month)
    if today is None:
        raise ValueError("today is required when the sales window is not fully specified")

    (default_start_year, default_start_month), (default_end_year, default_end_month) = (
        trailing_window(today, default_months)
    )
    start = (
        window.start_year if window.start_year is not None else default_start_year,
        window.start_month if window.start_month is not None else default_start_month,
    )
    end = (
        window.end_year if window.end_year is not None else default_end_year,
        window.end_month if window.end_month is not None else default_end_month,
    )
    return start, end


def _issue_month(billing: SalesRecord) -> MonthKey | None:
    if billing.issue_date is None:
        return None
    return billing.issue_date.year, billing.issue_date.month


def aggregate_monthly_sales(
    billings: Iterable[SalesRecord],
    window: SalesWindow | None = None,
    company: str | None = None,
    *,
    today: date | None = None,
    default_months: int = 12,
) -> list[MonthlySalesData]:
    """Sum sales per calendar month over an inclusive window.

    One entry per month in the window, ascending, zero-filled. Billings
    without an issue date, issued outside the window or (with ``company``)
    for another client are skipped. Each month also carries the per-client
    breakdown used by stacked charts; it always sums to ``total_sales``.
    """
    start, end = resolve_window(window, today, default_months)

    totals: dict[MonthKey, Decimal] = {}
    counts: dict[MonthKey, int] = {}
    by_company: dict[MonthKey, dict[str, Decimal]] = {}
    for key in month_span(start, end):
        totals[key] = Decimal("0")
        counts[key] = 0
        by_company[key] = {}

    for billing in billings:
        name = billing.client_name
        if company and name != company:
            continue
        key = _issue_month(billing)
        if key is None or key not in totals:
            continue

        amount = billing.effective_amount
        group = name or UNNAMED_CLIENT
        totals[key] += amount
        counts[key] += 1
        by_company[key][group] = by_company[key].get(group, Decimal("0")) + amount

    return [
        MonthlySalesData(
            year=year,
            month=month,
            month_label=month_label(year, month),
            total_sales=totals[(year, month)],
            invoice_count=counts[(year, month)],
            sales_by_company=by_company[(year, month)],
        )
        for year, month in sorted(totals)
    ]


def list_distinct_client_names(billings: Iterable[SalesRecord]) -> list[str]:
    """Distinct non-empty client names in lexicographic order."""
    return sorted({b.client_name for b in billings if b.client_name})


def invoices_for_month(
    billings: Iterable[SalesRecord],
    year: int,
    month: int,
    company: str | None = None,
) -> list[InvoiceDetail]:
    """Invoices issued in (year, month), newest first, undated last."""
    details = [
        InvoiceDetail(
            id=b.id,
            invoice_number=b.invoice_number,
            client_name=b.client_name or UNNAMED_CLIENT,
            issue_date=b.issue_date,
            payment_deadline=b.payment_deadline,
            total=b.effective_amount,
            status=b.status,
        )
        for b in billings
        if _issue_month(b) == (year, month) and (not company or b.client_name == company)
    ]

    return sort_invoice_details(details)


def sort_invoice_details(details: Iterable[InvoiceDetail]) -> list[InvoiceDetail]:
    """Newest issue date first; entries without an issue date always go last."""
    details = list(details)
    dated = sorted(
        (d for d in details if d.issue_date is not None),
        key=lambda d: d.issue_date,
        reverse=True,
    )
    undated = [d for d in details if d.issue_date is None]
    return dated + undated
