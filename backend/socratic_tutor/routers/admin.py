"""Admin router: class AI restrictions, usage visibility, insights and teaching tools."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from socratic_tutor.ai.insights import extract_json_object
from socratic_tutor.ai.llm_base import LLMError
from socratic_tutor.ai.teaching_tools import (
    TEACHING_TOOLS_SYSTEM_PROMPT,
    build_lesson_plan_prompt,
    build_rubric_prompt,
)
from socratic_tutor.dependencies import get_admin_user, get_db, get_tutor_service
from socratic_tutor.models.user import User
from socratic_tutor.schemas.analytics import (
    DailyInsights,
    LessonPlanRequest,
    RubricRequest,
    UsageSeries,
)
from socratic_tutor.schemas.classroom import RestrictionSettings
from socratic_tutor.services import insight_service, restriction_service, usage_service
from socratic_tutor.services.conversation_service import get_class_student_ids
from socratic_tutor.services.tutor_service import TutorService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


def _class_code_or_none(admin: User) -> str | None:
    class_code = (admin.class_code or "").strip()
    if not class_code:
        logger.warning("Admin %s has no class code; returning empty results", admin.id)
        return None
    return class_code


async def _generate_json(tutor: TutorService, prompt: str, what: str) -> dict:
    try:
        raw = await tutor.send_analysis(TEACHING_TOOLS_SYSTEM_PROMPT, prompt)
    except LLMError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    try:
        return extract_json_object(raw)
    except ValueError:
        logger.warning("Could not parse generated %s: %.200s", what, raw)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to generate valid {what}",
        )


@router.get("/ai-restrictions")
async def get_ai_restrictions(
    admin: Annotated[User, Depends(get_admin_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Return the class's restriction toggles, or null when none are saved."""
    if not admin.class_code:
        return {"settings": None}
    restrictions = await restriction_service.get_class_settings(db, admin.class_code)
    return {"settings": restrictions.to_mapping() if restrictions is not None else None}


@router.post("/ai-restrictions")
async def save_ai_restrictions(
    body: RestrictionSettings,
    admin: Annotated[User, Depends(get_admin_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Replace the class's restriction toggles."""
    if not admin.class_code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No class code on admin profile",
        )
    await restriction_service.save_class_settings(
        db, admin.class_code, admin.id, body.to_restrictions()
    )
    await db.commit()
    return {"ok": True}


@router.get("/usage-stats", response_model=UsageSeries)
async def get_class_usage_stats(
    admin: Annotated[User, Depends(get_admin_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    days: int = Query(default=7, ge=1, le=365),
):
    """Student message counts for the admin's class, per day (per hour for one day)."""
    class_code = _class_code_or_none(admin)
    if class_code is None:
        return {"data": []}
    student_ids = await get_class_student_ids(db, class_code)
    return {"data": await usage_service.get_usage_series(db, student_ids, days)}


@router.get("/daily-insights", response_model=DailyInsights)
async def get_daily_insights(
    admin: Annotated[User, Depends(get_admin_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    tutor: Annotated[TutorService, Depends(get_tutor_service)],
    days: int = Query(default=7, ge=1, le=90),
):
    """Per-day summaries of what the class asked, most recent first."""
    class_code = _class_code_or_none(admin)
    if class_code is None:
        return {"insights": []}
    insights = await insight_service.get_daily_insights(db, tutor, class_code, days)
    return {"insights": insights}


@router.post("/class-planner")
async def create_lesson_plan(
    body: LessonPlanRequest,
    _: Annotated[User, Depends(get_admin_user)],
    tutor: Annotated[TutorService, Depends(get_tutor_service)],
):
    """Generate a lesson plan for the given subject and topic."""
    prompt = build_lesson_plan_prompt(
        subject=body.subject,
        topic=body.topic,
        duration=body.duration,
        grade_level=body.grade_level,
        learning_objectives=body.learning_objectives,
        student_needs=body.student_needs,
    )
    return {"lesson_plan": await _generate_json(tutor, prompt, "lesson plan")}


@router.post("/rubric-builder")
async def create_rubric(
    body: RubricRequest,
    _: Annotated[User, Depends(get_admin_user)],
    tutor: Annotated[TutorService, Depends(get_tutor_service)],
):
    """Generate an assessment rubric for an assignment."""
    prompt = build_rubric_prompt(
        assignment_title=body.assignment_title,
        assignment_description=body.assignment_description,
        rubric_type=body.rubric_type,
        number_of_levels=body.number_of_levels,
        grade_level=body.grade_level,
        subject=body.subject,
    )
    return {"rubric": await _generate_json(tutor, prompt, "rubric")}
