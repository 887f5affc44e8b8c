"""Sales reporting API router."""

from fastapi import APIRouter, Depends, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.session import get_db
from src.modules.account.auth import AuthenticatedUser, get_current_user
from src.modules.sales.schemas import (
    CompanyListResponse,
    InvoiceDetailListResponse,
    MonthlySalesResponse,
    SalesWindow,
)
from src.modules.sales.service import SalesService

router = APIRouter(prefix="/sales", tags=["sales"])

# Reports load every billing of the account; keep them rate-limited
limiter = Limiter(key_func=get_remote_address)


@router.get("/monthly", response_model=MonthlySalesResponse)
@limiter.limit("30/minute")
async def get_monthly_sales(
    request: Request,
    start_year: int | None = Query(None, ge=1900, le=9999),
    start_month: int | None = Query(None, ge=1, le=12),
    end_year: int | None = Query(None, ge=1900, le=9999),
    end_month: int | None = Query(None, ge=1, le=12),
    company: str | None = Query(None, max_length=255),
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Monthly sales series; defaults to the trailing 12 months."""
    window = SalesWindow(
        start_year=start_year,
        start_month=start_month,
        end_year=end_year,
        end_month=end_month,
    )
    svc = SalesService(db)
    items = await svc.monthly_sales(user.account_id, window, company)
    return MonthlySalesResponse(items=items, company=company)


@router.get("/companies", response_model=CompanyListResponse)
async def list_companies(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    svc = SalesService(db)
    return CompanyListResponse(items=await svc.company_names(user.account_id))


@router.get("/invoices", response_model=InvoiceDetailListResponse)
@limiter.limit("60/minute")
async def list_month_invoices(
    request: Request,
    year: int = Query(..., ge=1900, le=9999),
    month: int = Query(..., ge=1, le=12),
    company: str | None = Query(None, max_length=255),
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Invoices issued in one month, newest first."""
    svc = SalesService(db)
    items = await svc.invoices(user.account_id, year, month, company)
    return InvoiceDetailListResponse(items=items, total=len(items))
