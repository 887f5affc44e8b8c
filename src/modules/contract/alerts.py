"""Renewal alerts for contracts approaching their end date."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from src.models.contract import Contract

logger = logging.getLogger(__name__)

# "締結済み" is the concluded status written by the Japanese-language UI
ACTIVE_CONTRACT_STATUSES: frozenset[str] = frozenset({"Active", "締結済み"})

ALERT_ACTION = "Renew or Terminate"


@dataclass(frozen=True)
class ContractAlert:
    contract_id: int
    party_b: str
    end_date: date
    days_remaining: int
    notice_period_days: int
    action: str = ALERT_ACTION


def contract_end_date(contract: Contract) -> date | None:
    """The ``deadline`` column, else ``metadata.end_date`` (YYYY-MM-DD)."""
    if contract.deadline is not None:
        return contract.deadline
    raw = (contract.contract_metadata or {}).get("end_date")
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


def _notice_period_days(contract: Contract, default: int) -> int:
    """``metadata.notice_period_days`` as an int; the default when absent or not numeric."""
    raw = (contract.contract_metadata or {}).get("notice_period_days")
    if raw is None or raw == "":
        return default
    try:
        days = int(raw)
    except (TypeError, ValueError):
        logger.warning(
            "Contract %s has invalid notice_period_days %r; using %s",
            contract.id,
            raw,
            default,
        )
        return default
    return days or default


def find_expiring_contracts(
    contracts: Iterable[Contract],
    today: date,
    default_notice_days: int = 30,
) -> list[ContractAlert]:
    """Active contracts whose end date falls within their notice period.

    A contract alerts while ``0 < days_until_end <= notice_period_days``.
    """
    alerts: list[ContractAlert] = []
    for contract in contracts:
        if contract.status not in ACTIVE_CONTRACT_STATUSES:
            continue
        end_date = contract_end_date(contract)
        if end_date is None:
            continue

        notice_days = _notice_period_days(contract, default_notice_days)
        days_remaining = (end_date - today).days
        if 0 < days_remaining <= notice_days:
            alerts.append(
                ContractAlert(
                    contract_id=contract.id,
                    party_b=contract.party_b,
                    end_date=end_date,
                    days_remaining=days_remaining,
                    notice_period_days=notice_days,
                )
            )
    return alerts
