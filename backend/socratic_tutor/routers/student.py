"""Student self-service activity endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from socratic_tutor.dependencies import get_current_user, get_db
from socratic_tutor.models.user import User
from socratic_tutor.schemas.analytics import StudentStats, UsageSeries
from socratic_tutor.services import conversation_service, usage_service

router = APIRouter(prefix="/api/student", tags=["student"])


@router.get("/stats", response_model=StudentStats)
async def get_student_stats(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Conversation and message totals for the current user."""
    return await conversation_service.get_student_stats(db, current_user.id)


@router.get("/usage-stats", response_model=UsageSeries)
async def get_student_usage_stats(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    days: int = Query(default=7, ge=1, le=365),
):
    """The current user's message counts per day (per hour for one day)."""
    return {"data": await usage_service.get_usage_series(db, [current_user.id], days)}
