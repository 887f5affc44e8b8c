"""Billing API router: CRUD and status transitions."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.session import get_db
from src.models.enums import BillingStatus
from src.modules.account.auth import AuthenticatedUser, get_current_user
from src.modules.billing.schemas import (
    BillingCreate,
    BillingListResponse,
    BillingResponse,
    BillingStatusUpdateRequest,
    BillingStatusUpdateResponse,
    SideEffectResponse,
)
from src.modules.billing.service import BillingService, SideEffectResult

router = APIRouter(prefix="/billings", tags=["billings"])


def _side_effect_response(result: SideEffectResult) -> SideEffectResponse:
    return SideEffectResponse(
        status=result.status,
        billing_id=result.record.id if result.record is not None else None,
        error=result.error,
    )


@router.get("/", response_model=BillingListResponse)
async def list_billings(
    status: BillingStatus | None = Query(None),
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the account's billings, earliest payment deadline first."""
    svc = BillingService(db)
    items = await svc.list_billings(user.account_id, status=status)
    return BillingListResponse(
        items=[BillingResponse.model_validate(b) for b in items],
        total=len(items),
    )


@router.get("/{billing_id}", response_model=BillingResponse)
async def get_billing(
    billing_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    svc = BillingService(db)
    billing = await svc.get_billing(billing_id, user.account_id)
    return BillingResponse.model_validate(billing)


@router.post("/", response_model=BillingResponse, status_code=201)
async def create_billing(
    body: BillingCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    svc = BillingService(db)
    billing = await svc.create_billing(user.account_id, body)
    return BillingResponse.model_validate(billing)


@router.put("/{billing_id}/status", response_model=BillingStatusUpdateResponse)
async def update_billing_status(
    billing_id: int,
    body: BillingStatusUpdateRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Change status; reports the notification and recurring-successor outcomes."""
    svc = BillingService(db)
    result = await svc.set_status(
        billing_id=billing_id,
        account_id=user.account_id,
        new_status=body.status,
        payment_date=body.payment_date,
    )
    return BillingStatusUpdateResponse(
        billing=BillingResponse.model_validate(result.billing),
        notification=_side_effect_response(result.notification),
        successor=_side_effect_response(result.successor),
    )


@router.delete("/{billing_id}", status_code=204)
async def delete_billing(
    billing_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    svc = BillingService(db)
    await svc.delete_billing(billing_id, user.account_id)
    return Response(status_code=204)
