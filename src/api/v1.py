"""Version 1 API: billing and sales routers under /api/v1."""

from fastapi import APIRouter

from src.modules.billing.router import router as billing_router
from src.modules.sales.router import router as sales_router

v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(billing_router)
v1_router.include_router(sales_router)
