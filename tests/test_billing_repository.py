"""Tests for BillingRepository against an in-memory SQLite database."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select

from src.exceptions import NotFoundException, PersistenceException, ValidationException
from src.models.billing import Billing
from src.models.contract import Contract
from src.models.enums import BillingStatus, RecurringInterval
from src.modules.billing.repository import BillingFilter, BillingRepository

ACCOUNT_ID = "owner@example.com"
OTHER_ACCOUNT_ID = "someone-else@example.com"


def _new_billing(**kwargs) -> Billing:
    defaults = {
        "status": BillingStatus.SENT,
        "issue_date": date(2026, 2, 1),
        "payment_deadline": date(2026, 2, 28),
        "total": Decimal("1000"),
        "items": [],
        "client_info": {"name": "Acme KK"},
    }
    defaults.update(kwargs)
    return Billing(**defaults)


class TestGetAndUpdate:
    @pytest.mark.asyncio
    async def test_get_is_account_scoped(self, async_test_session) -> None:
        repo = BillingRepository(async_test_session)
        billing = await repo.insert_billing(ACCOUNT_ID, _new_billing())

        found = await repo.get_billing_by_id(billing.id, ACCOUNT_ID)
        assert found.id == billing.id

        with pytest.raises(NotFoundException):
            await repo.get_billing_by_id(billing.id, OTHER_ACCOUNT_ID)

    @pytest.mark.asyncio
    async def test_get_missing_raises_not_found(self, async_test_session) -> None:
        repo = BillingRepository(async_test_session)

        with pytest.raises(NotFoundException, match="Billing 404 not found"):
            await repo.get_billing_by_id(404, ACCOUNT_ID)

    @pytest.mark.asyncio
    async def test_get_loads_contract_party(self, async_test_session) -> None:
        contract = Contract(
            account_id=ACCOUNT_ID,
            party_a="Owner Inc",
            party_b="Acme KK",
            status="Active",
        )
        async_test_session.add(contract)
        await async_test_session.flush()
        repo = BillingRepository(async_test_session)
        billing = await repo.insert_billing(ACCOUNT_ID, _new_billing(contract_id=contract.id))
        async_test_session.expunge(billing)

        loaded = await repo.get_billing_by_id(billing.id, ACCOUNT_ID)

        assert loaded.contract_party_b == "Acme KK"

    @pytest.mark.asyncio
    async def test_update_applies_patch(self, async_test_session) -> None:
        repo = BillingRepository(async_test_session)
        billing = await repo.insert_billing(ACCOUNT_ID, _new_billing())

        updated = await repo.update_billing(
            billing.id,
            ACCOUNT_ID,
            {"status": BillingStatus.PAID, "payment_date": date(2026, 2, 20)},
        )

        assert updated.status == BillingStatus.PAID
        assert updated.payment_date == date(2026, 2, 20)

    @pytest.mark.asyncio
    async def test_update_other_account_not_found(self, async_test_session) -> None:
        repo = BillingRepository(async_test_session)
        billing = await repo.insert_billing(ACCOUNT_ID, _new_billing())

        with pytest.raises(NotFoundException):
            await repo.update_billing(billing.id, OTHER_ACCOUNT_ID, {"status": BillingStatus.PAID})

        assert billing.status == BillingStatus.SENT

    @pytest.mark.asyncio
    async def test_update_rejects_fixed_fields(self, async_test_session) -> None:
        repo = BillingRepository(async_test_session)
        billing = await repo.insert_billing(ACCOUNT_ID, _new_billing())

        with pytest.raises(ValidationException, match="account_id"):
            await repo.update_billing(billing.id, ACCOUNT_ID, {"account_id": OTHER_ACCOUNT_ID})


class TestInsert:
    @pytest.mark.asyncio
    async def test_insert_sets_owner_and_defaults(self, async_test_session) -> None:
        repo = BillingRepository(async_test_session)

        billing = await repo.insert_billing(ACCOUNT_ID, Billing(total=Decimal("10")))

        assert billing.id is not None
        assert billing.account_id == ACCOUNT_ID
        assert billing.status == BillingStatus.PLANNED
        assert billing.is_recurring is False
        assert billing.items == []
        assert billing.created_at is not None

    @pytest.mark.asyncio
    async def test_failed_insert_keeps_earlier_writes(self, async_test_session) -> None:
        repo = BillingRepository(async_test_session)
        source = await repo.insert_billing(
            ACCOUNT_ID,
            _new_billing(is_recurring=True, recurring_interval=RecurringInterval.MONTHLY),
        )
        await repo.insert_billing(
            ACCOUNT_ID, _new_billing(status=BillingStatus.PLANNED, source_billing_id=source.id)
        )
        await repo.update_billing(
            source.id, ACCOUNT_ID, {"status": BillingStatus.PAID, "payment_date": date(2026, 2, 20)}
        )

        # Second successor for the same source violates the unique lineage column
        with pytest.raises(PersistenceException):
            await repo.insert_billing(
                ACCOUNT_ID, _new_billing(status=BillingStatus.PLANNED, source_billing_id=source.id)
            )

        result = await async_test_session.execute(
            select(Billing.status).where(Billing.id == source.id)
        )
        assert result.scalar_one() == BillingStatus.PAID
        count = await async_test_session.execute(select(Billing.id))
        assert len(count.all()) == 2


class TestListAndLineage:
    @pytest.mark.asyncio
    async def test_list_orders_by_deadline_undated_last(self, async_test_session) -> None:
        repo = BillingRepository(async_test_session)
        late = await repo.insert_billing(ACCOUNT_ID, _new_billing(payment_deadline=date(2026, 5, 1)))
        undated = await repo.insert_billing(ACCOUNT_ID, _new_billing(payment_deadline=None))
        early = await repo.insert_billing(ACCOUNT_ID, _new_billing(payment_deadline=date(2026, 3, 1)))
        await repo.insert_billing(OTHER_ACCOUNT_ID, _new_billing())

        billings = await repo.list_billings(ACCOUNT_ID)

        assert [b.id for b in billings] == [early.id, late.id, undated.id]

    @pytest.mark.asyncio
    async def test_list_status_filters(self, async_test_session) -> None:
        repo = BillingRepository(async_test_session)
        planned = await repo.insert_billing(ACCOUNT_ID, _new_billing(status=BillingStatus.PLANNED))
        sent = await repo.insert_billing(ACCOUNT_ID, _new_billing(status=BillingStatus.SENT))
        paid = await repo.insert_billing(
            ACCOUNT_ID, _new_billing(status=BillingStatus.PAID, payment_date=date(2026, 2, 3))
        )

        only_planned = await repo.list_billings(
            ACCOUNT_ID, BillingFilter(statuses=[BillingStatus.PLANNED])
        )
        without_planned = await repo.list_billings(
            ACCOUNT_ID, BillingFilter(exclude_statuses=frozenset({BillingStatus.PLANNED}))
        )

        assert [b.id for b in only_planned] == [planned.id]
        assert {b.id for b in without_planned} == {sent.id, paid.id}

    @pytest.mark.asyncio
    async def test_find_successor(self, async_test_session) -> None:
        repo = BillingRepository(async_test_session)
        source = await repo.insert_billing(ACCOUNT_ID, _new_billing())

        assert await repo.find_successor(source.id, ACCOUNT_ID) is None

        successor = await repo.insert_billing(
            ACCOUNT_ID, _new_billing(status=BillingStatus.PLANNED, source_billing_id=source.id)
        )

        found = await repo.find_successor(source.id, ACCOUNT_ID)
        assert found is not None
        assert found.id == successor.id
        assert await repo.find_successor(source.id, OTHER_ACCOUNT_ID) is None

    @pytest.mark.asyncio
    async def test_delete(self, async_test_session) -> None:
        repo = BillingRepository(async_test_session)
        billing = await repo.insert_billing(ACCOUNT_ID, _new_billing())

        with pytest.raises(NotFoundException):
            await repo.delete_billing(billing.id, OTHER_ACCOUNT_ID)

        await repo.delete_billing(billing.id, ACCOUNT_ID)

        with pytest.raises(NotFoundException):
            await repo.get_billing_by_id(billing.id, ACCOUNT_ID)

    @pytest.mark.asyncio
    async def test_list_client_name_filter(self, async_test_session) -> None:
        repo = BillingRepository(async_test_session)
        acme = await repo.insert_billing(ACCOUNT_ID, _new_billing(client_info={"name": "Acme KK"}))
        await repo.insert_billing(ACCOUNT_ID, _new_billing(client_info={"name": "Acme"}))
        await repo.insert_billing(ACCOUNT_ID, _new_billing(client_info=None))
        planned_acme = await repo.insert_billing(
            ACCOUNT_ID,
            _new_billing(status=BillingStatus.PLANNED, client_info={"name": "Acme KK"}),
        )

        everything = await repo.list_billings(ACCOUNT_ID, BillingFilter(client_name="Acme KK"))
        sales_only = await repo.list_billings(
            ACCOUNT_ID,
            BillingFilter(
                exclude_statuses=frozenset({BillingStatus.PLANNED}), client_name="Acme KK"
            ),
        )

        assert {b.id for b in everything} == {acme.id, planned_acme.id}
        assert [b.id for b in sales_only] == [acme.id]
