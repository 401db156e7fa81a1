"""Admin dashboard router."""

from fastapi import APIRouter, Depends
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.storefront_service.dependencies import require_admin
from services.storefront_service.schemas import DashboardStats
from services.storefront_service.services.dashboard import build_dashboard
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["admin-dashboard"])


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Revenue, counts and the five most recent orders."""
    return await build_dashboard(db)
