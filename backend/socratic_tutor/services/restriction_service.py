"""Per-class AI restriction settings: admin upsert and fail-open lookup."""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from socratic_tutor.ai.prompt_builder import AiRestrictions
from socratic_tutor.models.classroom import TeacherSettings
from socratic_tutor.models.conversation import utc_now_naive

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RestrictionLookup:
    """Outcome of reading a class's restrictions: settings, or the error that stopped us."""

    restrictions: AiRestrictions | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def restrictions_or_default(
        self, default: AiRestrictions | None = None
    ) -> AiRestrictions | None:
        """Return the loaded settings, or ``default`` when the lookup failed."""
        if self.error is not None:
            return default
        return self.restrictions


async def get_class_settings(db: AsyncSession, class_code: str) -> AiRestrictions | None:
    result = await db.execute(
        select(TeacherSettings.settings).where(TeacherSettings.class_code == class_code)
    )
    stored = result.scalar_one_or_none()
    return AiRestrictions.from_mapping(stored)


async def save_class_settings(
    db: AsyncSession,
    class_code: str,
    admin_id: uuid.UUID,
    restrictions: AiRestrictions,
) -> TeacherSettings:
    """Create or replace the class's settings. Last write wins."""
    row = await db.get(TeacherSettings, class_code)
    if row is None:
        row = TeacherSettings(class_code=class_code)
        db.add(row)
    row.admin_id = admin_id
    row.settings = restrictions.to_mapping()
    row.updated_at = utc_now_naive()
    await db.flush()
    return row


async def lookup_restrictions(db: AsyncSession, class_code: str | None) -> RestrictionLookup:
    """Read restrictions for a student's class without ever raising.

    Call before anything else is written in the session: on a database error
    the session is rolled back so the caller can keep using it, and the
    failure is returned instead of raised.
    """
    if not class_code:
        return RestrictionLookup()
    try:
        restrictions = await get_class_settings(db, class_code)
    except SQLAlchemyError as exc:
        logger.warning(
            "Restriction lookup failed for class %s; continuing without restrictions: %s",
            class_code,
            exc,
        )
        await db.rollback()
        return RestrictionLookup(error=exc)
    return RestrictionLookup(restrictions=restrictions)
