"""Class announcements and responses."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from socratic_tutor.dependencies import get_current_user, get_db
from socratic_tutor.models.user import User
from socratic_tutor.schemas.classroom import (
    AnnouncementCreate,
    AnnouncementOut,
    AnnouncementResponseCreate,
    AnnouncementResponseOut,
)
from socratic_tutor.services import announcement_service
from socratic_tutor.services.announcement_service import (
    AnnouncementAccessError,
    AnnouncementNotFoundError,
)

router = APIRouter(prefix="/api/announcements", tags=["announcements"])


async def _accessible(db: AsyncSession, user: User, announcement_id: uuid.UUID):
    try:
        return await announcement_service.get_accessible_announcement(db, user, announcement_id)
    except AnnouncementNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Announcement not found"
        )
    except AnnouncementAccessError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")


@router.get("", response_model=list[AnnouncementOut])
async def list_announcements(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Announcements for the current user's class, newest first."""
    return await announcement_service.list_for_class(db, current_user.class_code)


@router.post("", response_model=AnnouncementOut, status_code=status.HTTP_201_CREATED)
async def create_announcement(
    body: AnnouncementCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Post an announcement to the teacher's class."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only teachers can create announcements",
        )
    if not current_user.class_code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Teacher must have a class code",
        )
    announcement = await announcement_service.create_announcement(
        db, current_user, body.subject, body.content
    )
    await db.commit()
    return announcement_service.announcement_payload(announcement, current_user)


@router.get("/{announcement_id}/responses", response_model=list[AnnouncementResponseOut])
async def list_responses(
    announcement_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Responses to an announcement, oldest first."""
    await _accessible(db, current_user, announcement_id)
    return await announcement_service.list_responses(db, announcement_id)


@router.post(
    "/{announcement_id}/responses",
    response_model=AnnouncementResponseOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_response(
    announcement_id: uuid.UUID,
    body: AnnouncementResponseCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Reply to an announcement in the current user's class."""
    await _accessible(db, current_user, announcement_id)
    response = await announcement_service.create_response(
        db, current_user, announcement_id, body.content
    )
    await db.commit()
    return announcement_service.response_payload(response, current_user)
