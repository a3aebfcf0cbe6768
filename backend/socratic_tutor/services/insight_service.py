"""Daily teacher insights over a class's student questions."""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from socratic_tutor.ai.insights import (
    INSIGHTS_SYSTEM_PROMPT,
    QuestionAnalysis,
    build_insights_user_prompt,
    empty_analysis,
    engagement_for_count,
    extract_topics,
    fallback_analysis,
    parse_question_analysis,
)
from socratic_tutor.ai.llm_base import LLMError
from socratic_tutor.models.conversation import Conversation, Message, utc_now_naive
from socratic_tutor.services.conversation_service import get_class_student_ids
from socratic_tutor.services.tutor_service import TutorService

logger = logging.getLogger(__name__)

SAMPLE_QUESTIONS_PER_DAY = 3
SAMPLE_QUESTION_CHARS = 100


@dataclass
class _DayActivity:
    date: str
    total_questions: int = 0
    students: set[uuid.UUID] = field(default_factory=set)
    sample_questions: list[str] = field(default_factory=list)


def _sample(content: str) -> str:
    if len(content) > SAMPLE_QUESTION_CHARS:
        return content[:SAMPLE_QUESTION_CHARS] + "..."
    return content


def group_by_day(rows: list[tuple[str, datetime, uuid.UUID]]) -> list[_DayActivity]:
    """Group (content, created_at, user_id) rows into per-day activity, oldest first."""
    days: dict[str, _DayActivity] = {}
    for content, created_at, user_id in rows:
        key = created_at.date().isoformat()
        day = days.setdefault(key, _DayActivity(date=key))
        day.total_questions += 1
        day.students.add(user_id)
        if len(day.sample_questions) < SAMPLE_QUESTIONS_PER_DAY:
            day.sample_questions.append(_sample(content))
    return list(days.values())


async def analyse_questions(tutor: TutorService, questions: list[str]) -> QuestionAnalysis:
    """Ask the model for an analysis. Unparsable replies degrade to a generic summary."""
    if not questions:
        return empty_analysis()
    raw = await tutor.send_analysis(INSIGHTS_SYSTEM_PROMPT, build_insights_user_prompt(questions))
    try:
        return parse_question_analysis(raw)
    except ValueError as exc:
        logger.warning("Could not parse question analysis: %s", exc)
        return fallback_analysis(questions)


def keyword_analysis(day: _DayActivity) -> QuestionAnalysis:
    return QuestionAnalysis(
        summary=f"{day.total_questions} questions from {len(day.students)} students",
        struggling_topics=[topic for topic, _ in extract_topics(day.sample_questions)],
        engagement_level=engagement_for_count(
            day.total_questions, high_above=10, medium_above=5
        ),
    )


async def _insight_for_day(tutor: TutorService, day: _DayActivity) -> dict:
    try:
        analysis = await analyse_questions(tutor, day.sample_questions)
    except LLMError as exc:
        logger.warning("Insight analysis failed for %s; using keyword topics: %s", day.date, exc)
        analysis = keyword_analysis(day)

    sample_count = len(day.sample_questions)
    return {
        "date": day.date,
        "total_questions": day.total_questions,
        "unique_students": len(day.students),
        "sample_questions": day.sample_questions,
        "summary": analysis.summary,
        "struggling_topics": analysis.struggling_topics,
        "teaching_recommendations": analysis.teaching_recommendations,
        "common_misconceptions": analysis.common_misconceptions,
        "engagement": analysis.engagement_level,
        "top_topics": [
            {"topic": topic, "count": max(sample_count - idx, 1)}
            for idx, topic in enumerate(analysis.struggling_topics)
        ],
    }


async def get_daily_insights(
    db: AsyncSession,
    tutor: TutorService,
    class_code: str,
    days: int = 7,
    now: datetime | None = None,
) -> list[dict]:
    """Per-day insights for the class, most recent day first."""
    student_ids = await get_class_student_ids(db, class_code)
    if not student_ids:
        return []

    end = now or utc_now_naive()
    start = end - timedelta(days=days)
    result = await db.execute(
        select(Message.content, Message.created_at, Conversation.user_id)
        .join(Conversation, Conversation.id == Message.conversation_id)
        .where(
            Conversation.user_id.in_(student_ids),
            Message.role == "user",
            Message.created_at >= start,
            Message.created_at <= end,
        )
        .order_by(Message.created_at.asc())
    )
    activity = group_by_day([tuple(row) for row in result.all()])
    if not activity:
        return []

    insights = await asyncio.gather(*(_insight_for_day(tutor, day) for day in activity))
    return sorted(insights, key=lambda item: item["date"], reverse=True)
