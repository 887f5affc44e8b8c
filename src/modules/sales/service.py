"""Account-scoped sales reporting over the billing repository."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.modules.billing.repository import BillingFilter, BillingRepository
from src.modules.billing.service import Clock, utc_now
from src.modules.sales.aggregation import (
    aggregate_monthly_sales,
    invoices_for_month,
    list_distinct_client_names,
)
from src.modules.sales.constants import NON_SALES_STATUSES
from src.modules.sales.schemas import InvoiceDetail, MonthlySalesData, SalesWindow

logger = logging.getLogger(__name__)


class SalesService:
    def __init__(
        self,
        db: AsyncSession,
        clock: Clock | None = None,
        repository: BillingRepository | None = None,
    ):
        self.db = db
        self.repository = repository or BillingRepository(db)
        self.clock = clock or utc_now

    async def _sales_billings(self, account_id: str, company: str | None = None):
        return await self.repository.list_billings(
            account_id,
            BillingFilter(exclude_statuses=NON_SALES_STATUSES, client_name=company or None),
        )

    async def monthly_sales(
        self,
        account_id: str,
        window: SalesWindow | None = None,
        company: str | None = None,
    ) -> list[MonthlySalesData]:
        billings = await self._sales_billings(account_id, company)
        series = aggregate_monthly_sales(
            billings,
            window,
            company,
            today=self.clock().date(),
            default_months=settings.sales_window_months,
        )
        logger.debug(
            "Aggregated %d billings into %d months for account %s (company=%s)",
            len(billings),
            len(series),
            account_id,
            company,
        )
        return series

    async def company_names(self, account_id: str) -> list[str]:
        # Every status, drafts included
        billings = await self.repository.list_billings(account_id)
        return list_distinct_client_names(billings)

    async def invoices(
        self,
        account_id: str,
        year: int,
        month: int,
        company: str | None = None,
    ) -> list[InvoiceDetail]:
        billings = await self._sales_billings(account_id, company)
        return invoices_for_month(billings, year, month, company)
