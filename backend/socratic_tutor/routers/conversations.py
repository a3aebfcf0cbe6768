"""Conversation endpoints: create, list, read, change status, soft delete."""

import uuid
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from socratic_tutor.dependencies import get_current_user, get_db
from socratic_tutor.models.user import User
from socratic_tutor.schemas.conversation import (
    ConversationCreate,
    ConversationDetail,
    ConversationOut,
    ConversationPage,
    ConversationStatusUpdate,
)
from socratic_tutor.services import conversation_service
from socratic_tutor.services.conversation_service import (
    ConversationNotFoundError,
    InvalidStatusTransitionError,
)

router = APIRouter(prefix="/api/conversations", tags=["conversations"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")


@router.post("", response_model=ConversationOut, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    body: ConversationCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Start a new tutoring conversation for the current user."""
    conversation = await conversation_service.create_conversation(
        db, current_user.id, body.problem_statement, body.subject
    )
    await db.commit()
    return conversation_service.conversation_payload(conversation)


@router.get("", response_model=ConversationPage)
async def list_conversations(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=50),
    status_filter: Annotated[
        str | None, Query(alias="status", pattern="^(active|ended)$")
    ] = None,
    since: datetime | None = None,
    user_id: uuid.UUID | None = None,
):
    """Students see their own conversations; admins see their class's."""
    if since is not None and since.tzinfo is not None:
        since = since.astimezone(timezone.utc).replace(tzinfo=None)
    return await conversation_service.list_conversations(
        db,
        current_user,
        page=page,
        page_size=page_size,
        status=status_filter,
        since=since,
        filter_user_id=user_id,
    )


@router.get("/{conversation_id}", response_model=ConversationDetail)
async def get_conversation(
    conversation_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Return a conversation with its messages in chronological order."""
    try:
        conversation, owner = await conversation_service.get_visible_conversation(
            db, current_user, conversation_id
        )
    except ConversationNotFoundError:
        raise _not_found()
    messages = await conversation_service.get_conversation_messages(db, conversation.id)
    payload = conversation_service.conversation_payload(
        conversation, owner if owner.id != current_user.id else None
    )
    payload["messages"] = [conversation_service.message_payload(m) for m in messages]
    return payload


@router.patch("/{conversation_id}", response_model=ConversationOut)
async def update_conversation_status(
    conversation_id: uuid.UUID,
    body: ConversationStatusUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Move the conversation forward (active -> ended -> deleted)."""
    try:
        conversation = await conversation_service.change_status(
            db, current_user.id, conversation_id, body.status
        )
    except ConversationNotFoundError:
        raise _not_found()
    except InvalidStatusTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    await db.commit()
    return conversation_service.conversation_payload(conversation)


@router.delete("/{conversation_id}")
async def delete_conversation(
    conversation_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Soft-delete a conversation; its messages are kept."""
    try:
        await conversation_service.soft_delete(db, current_user.id, conversation_id)
    except ConversationNotFoundError:
        raise _not_found()
    await db.commit()
    return {"message": "Conversation deleted"}
