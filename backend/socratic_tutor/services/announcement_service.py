"""Class announcements from teachers and the responses to them."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from socratic_tutor.models.classroom import Announcement, AnnouncementResponse
from socratic_tutor.models.user import User


class AnnouncementNotFoundError(LookupError):
    pass


class AnnouncementAccessError(PermissionError):
    """Raised when the caller is neither in the announcement's class nor its author."""


def _person(user: User) -> dict:
    return {"username": user.username, "full_name": user.full_name}


def announcement_payload(announcement: Announcement, teacher: User) -> dict:
    return {
        "id": str(announcement.id),
        "teacher_id": str(announcement.teacher_id),
        "class_code": announcement.class_code,
        "subject": announcement.subject,
        "content": announcement.content,
        "created_at": announcement.created_at.isoformat() if announcement.created_at else None,
        "teacher": _person(teacher),
    }


def response_payload(response: AnnouncementResponse, sender: User) -> dict:
    return {
        "id": str(response.id),
        "announcement_id": str(response.announcement_id),
        "sender_id": str(response.sender_id),
        "content": response.content,
        "created_at": response.created_at.isoformat() if response.created_at else None,
        "sender": _person(sender),
    }


async def list_for_class(db: AsyncSession, class_code: str | None) -> list[dict]:
    """Announcements for a class, newest first."""
    if not class_code:
        return []
    result = await db.execute(
        select(Announcement, User)
        .join(User, User.id == Announcement.teacher_id)
        .where(Announcement.class_code == class_code)
        .order_by(Announcement.created_at.desc())
    )
    return [announcement_payload(a, teacher) for a, teacher in result.all()]


async def create_announcement(
    db: AsyncSession, teacher: User, subject: str, content: str
) -> Announcement:
    announcement = Announcement(
        teacher_id=teacher.id,
        class_code=teacher.class_code,
        subject=subject,
        content=content,
    )
    db.add(announcement)
    await db.flush()
    return announcement


async def get_accessible_announcement(
    db: AsyncSession, user: User, announcement_id: uuid.UUID
) -> Announcement:
    announcement = await db.get(Announcement, announcement_id)
    if announcement is None:
        raise AnnouncementNotFoundError(str(announcement_id))
    in_class = bool(user.class_code) and user.class_code == announcement.class_code
    if not in_class and announcement.teacher_id != user.id:
        raise AnnouncementAccessError(str(announcement_id))
    return announcement


async def list_responses(db: AsyncSession, announcement_id: uuid.UUID) -> list[dict]:
    """Responses in the order they were sent."""
    result = await db.execute(
        select(AnnouncementResponse, User)
        .join(User, User.id == AnnouncementResponse.sender_id)
        .where(AnnouncementResponse.announcement_id == announcement_id)
        .order_by(AnnouncementResponse.created_at.asc())
    )
    return [response_payload(r, sender) for r, sender in result.all()]


async def create_response(
    db: AsyncSession, sender: User, announcement_id: uuid.UUID, content: str
) -> AnnouncementResponse:
    response = AnnouncementResponse(
        announcement_id=announcement_id,
        sender_id=sender.id,
        content=content,
    )
    db.add(response)
    await db.flush()
    return response
