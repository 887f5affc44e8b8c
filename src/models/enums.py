import enum


class BillingStatus(str, enum.Enum):
    PLANNED = "Planned"
    APPROVED = "Approved"
    SENT = "Sent"
    PAID = "Paid"


class RecurringInterval(str, enum.Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class BillingType(str, enum.Enum):
    RECEIVABLE = "receivable"
    PAYABLE = "payable"


class SideEffectStatus(str, enum.Enum):
    SKIPPED = "SKIPPED"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
