# Import all models so SQLAlchemy metadata is populated before create_all
from src.models.billing import Billing
from src.models.contract import Contract
from src.models.enums import (
    BillingStatus,
    BillingType,
    RecurringInterval,
    SideEffectStatus,
)

__all__ = [
    "Billing",
    "BillingStatus",
    "BillingType",
    "Contract",
    "RecurringInterval",
    "SideEffectStatus",
]
