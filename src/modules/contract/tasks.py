"""Celery tasks for contract renewal alerts."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime

from sqlalchemy import select

from celery_app import celery
from src.config import settings
from src.database.engine import async_session
from src.models.contract import Contract
from src.modules.contract.alerts import ACTIVE_CONTRACT_STATUSES, find_expiring_contracts

logger = logging.getLogger(__name__)


async def _check_contract_alerts_async() -> dict:
    today = datetime.now(UTC).date()

    async with async_session() as session:
        result = await session.execute(
            select(Contract).where(Contract.status.in_(sorted(ACTIVE_CONTRACT_STATUSES)))
        )
        contracts = list(result.scalars().all())

    alerts = find_expiring_contracts(
        contracts, today, default_notice_days=settings.contract_notice_days_default
    )
    for alert in alerts:
        logger.info(
            "[ALERT] Contract #%s (%s) expires in %s days (Deadline: %s). Notice period: %s days.",
            alert.contract_id,
            alert.party_b,
            alert.days_remaining,
            alert.end_date.isoformat(),
            alert.notice_period_days,
        )

    return {
        "checked": len(contracts),
        "alerts": [
            {
                "contract_id": a.contract_id,
                "party_b": a.party_b,
                "end_date": a.end_date.isoformat(),
                "days_remaining": a.days_remaining,
                "action": a.action,
            }
            for a in alerts
        ],
    }


@celery.task(name="src.modules.contract.tasks.check_contract_alerts")
def check_contract_alerts() -> dict:
    """Daily scan for active contracts inside their notice period."""
    return asyncio.run(_check_contract_alerts_async())
