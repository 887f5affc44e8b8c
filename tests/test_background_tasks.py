"""Tests for Celery-backed notifications and the contract alert scan."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest
from kombu.exceptions import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.exceptions import SideEffectFailure
from src.models.contract import Contract
from src.modules.contract.tasks import _check_contract_alerts_async
from src.modules.notifications.service import BillingNotifier
from src.modules.notifications.tasks import send_billing_sent_email


class TestBillingNotifier:
    def test_notify_sent_enqueues_task(self) -> None:
        with patch("src.modules.notifications.tasks.send_billing_sent_email.delay") as delay:
            BillingNotifier().notify_sent(42)

        delay.assert_called_once_with(42)

    def test_broker_failure_raised_as_side_effect_failure(self) -> None:
        with patch(
            "src.modules.notifications.tasks.send_billing_sent_email.delay",
            side_effect=OperationalError("connection refused"),
        ):
            with pytest.raises(SideEffectFailure, match="billing 42"):
                BillingNotifier().notify_sent(42)

    def test_task_records_send(self, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="src.modules.notifications.tasks"):
            result = send_billing_sent_email(7)

        assert result == {"billing_id": 7, "sent": True}
        assert "[EMAIL SENT] Invoice #7 has been sent to client." in caplog.text


class TestContractAlertScan:
    @pytest.mark.asyncio
    async def test_scan_reports_expiring_active_contracts(self, async_test_engine, caplog) -> None:
        today = datetime.now(UTC).date()
        session_factory = async_sessionmaker(
            async_test_engine, class_=AsyncSession, expire_on_commit=False
        )
        async with session_factory() as session:
            session.add_all(
                [
                    Contract(
                        account_id="owner@example.com",
                        party_a="Owner Inc",
                        party_b="Acme KK",
                        status="Active",
                        deadline=today + timedelta(days=10),
                    ),
                    Contract(
                        account_id="owner@example.com",
                        party_a="Owner Inc",
                        party_b="Beta LLC",
                        status="締結済み",
                        contract_metadata={
                            "end_date": (today + timedelta(days=45)).isoformat(),
                            "notice_period_days": 60,
                        },
                    ),
                    Contract(
                        account_id="owner@example.com",
                        party_a="Owner Inc",
                        party_b="Gamma Inc",
                        status="Active",
                        deadline=today + timedelta(days=120),
                    ),
                    Contract(
                        account_id="owner@example.com",
                        party_a="Owner Inc",
                        party_b="Draft Co",
                        status="Draft",
                        deadline=today + timedelta(days=5),
                    ),
                ]
            )
            await session.commit()

        with patch("src.modules.contract.tasks.async_session", session_factory):
            with caplog.at_level(logging.INFO, logger="src.modules.contract.tasks"):
                result = await _check_contract_alerts_async()

        assert result["checked"] == 3
        assert sorted(a["party_b"] for a in result["alerts"]) == ["Acme KK", "Beta LLC"]
        acme = next(a for a in result["alerts"] if a["party_b"] == "Acme KK")
        assert acme["days_remaining"] == 10
        assert acme["end_date"] == (today + timedelta(days=10)).isoformat()
        assert "[ALERT] Contract #" in caplog.text
        assert "(Acme KK) expires in 10 days" in caplog.text