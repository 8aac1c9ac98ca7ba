from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from taskboard.dependencies import get_db, get_actor_id
from taskboard.schemas.common import ApiResponse
from taskboard.schemas.stats import DashboardStats
from taskboard.schemas.task import RecentTask
from taskboard.services import stats as stats_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

@router.get("/stats", response_model=ApiResponse[DashboardStats])
async def get_dashboard_stats(db: AsyncSession = Depends(get_db), actor_id: int = Depends(get_actor_id)):
    return {"data": await stats_service.dashboard_stats(db, actor_id)}

@router.get("/recent-tasks", response_model=ApiResponse[list[RecentTask]])
async def get_recent_tasks(
    limit: int = Query(5, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    return {"data": await stats_service.recent_tasks(db, actor_id, limit)}
