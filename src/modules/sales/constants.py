"""Sales reporting constants."""

from __future__ import annotations

from src.models.enums import BillingStatus

# Grouping key and display name for billings without a client name
UNNAMED_CLIENT = "Unnamed client"

# Drafts that are not yet real invoices; excluded before aggregation
NON_SALES_STATUSES: frozenset[BillingStatus] = frozenset({BillingStatus.PLANNED})
