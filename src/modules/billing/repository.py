"""Account-scoped persistence for billings.

Every query filters on ``account_id``; a billing that belongs to another
account is indistinguishable from one that does not exist.
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from src.exceptions import NotFoundException, PersistenceException, ValidationException
from src.models.billing import Billing
from src.models.enums import BillingStatus

logger = logging.getLogger(__name__)

# Fields a patch may touch; identity, ownership and lineage are fixed
UPDATABLE_FIELDS: frozenset[str] = frozenset(
    {
        "status",
        "billing_type",
        "invoice_number",
        "issue_date",
        "payment_deadline",
        "payment_date",
        "amount",
        "subtotal",
        "tax_total",
        "total",
        "items",
        "client_info",
        "contract_id",
        "is_recurring",
        "recurring_interval",
    }
)


@dataclass
class BillingFilter:
    statuses: Collection[BillingStatus] | None = None
    exclude_statuses: Collection[BillingStatus] | None = None
    # Exact match on the client snapshot name
    client_name: str | None = None


class BillingRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_billing_by_id(self, billing_id: int, account_id: str) -> Billing:
        try:
            result = await self.db.execute(
                select(Billing)
                .options(joinedload(Billing.contract))
                .where(Billing.id == billing_id, Billing.account_id == account_id)
            )
        except SQLAlchemyError as exc:
            raise PersistenceException(f"Failed to load billing {billing_id}") from exc
        billing = result.scalar_one_or_none()
        if billing is None:
            raise NotFoundException(f"Billing {billing_id} not found")
        return billing

    async def update_billing(
        self, billing_id: int, account_id: str, patch: dict[str, Any]
    ) -> Billing:
        unknown = set(patch) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationException(
                f"Fields cannot be updated: {sorted(unknown)}",
                details=[{"field": f, "message": "not updatable"} for f in sorted(unknown)],
            )

        billing = await self.get_billing_by_id(billing_id, account_id)
        for field, value in patch.items():
            setattr(billing, field, value)

        try:
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceException(f"Failed to update billing {billing_id}") from exc
        return billing

    async def insert_billing(self, account_id: str, record: Billing) -> Billing:
        """Insert ``record`` for the account inside a SAVEPOINT.

        A failed insert only rolls back the savepoint, so writes flushed
        earlier in the same transaction survive.
        """
        record.account_id = account_id
        try:
            async with self.db.begin_nested():
                self.db.add(record)
                await self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceException("Failed to insert billing") from exc

        logger.debug("Inserted billing %s for account %s", record.id, account_id)
        return record

    async def list_billings(
        self, account_id: str, billing_filter: BillingFilter | None = None
    ) -> list[Billing]:
        """List the account's billings ordered by payment deadline (undated last)."""
        query = (
            select(Billing)
            .options(joinedload(Billing.contract))
            .where(Billing.account_id == account_id)
        )
        if billing_filter is not None:
            if billing_filter.statuses:
                query = query.where(Billing.status.in_(list(billing_filter.statuses)))
            if billing_filter.exclude_statuses:
                query = query.where(
                    Billing.status.not_in(list(billing_filter.exclude_statuses))
                )
            if billing_filter.client_name:
                query = query.where(
                    Billing.client_info["name"].as_string() == billing_filter.client_name
                )
        query = query.order_by(Billing.payment_deadline.asc().nulls_last(), Billing.id)

        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as exc:
            raise PersistenceException("Failed to list billings") from exc
        return list(result.scalars().all())

    async def find_successor(self, source_billing_id: int, account_id: str) -> Billing | None:
        try:
            result = await self.db.execute(
                select(Billing).where(
                    Billing.source_billing_id == source_billing_id,
                    Billing.account_id == account_id,
                )
            )
        except SQLAlchemyError as exc:
            raise PersistenceException(
                f"Failed to look up successor of billing {source_billing_id}"
            ) from exc
        return result.scalar_one_or_none()

    async def delete_billing(self, billing_id: int, account_id: str) -> None:
        billing = await self.get_billing_by_id(billing_id, account_id)
        try:
            await self.db.delete(billing)
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceException(f"Failed to delete billing {billing_id}") from exc
