"""Conversation and message persistence with ownership and class visibility."""

import uuid
from datetime import datetime
from math import ceil

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from socratic_tutor.models.conversation import Conversation, Message, utc_now_naive
from socratic_tutor.models.user import User

TITLE_MAX_CHARS = 80

# Status moves forward only.
ALLOWED_TRANSITIONS = {
    "active": {"active", "ended", "deleted"},
    "ended": {"ended", "deleted"},
}


class ConversationNotFoundError(LookupError):
    """Raised when a conversation does not exist or is not visible to the caller."""


class InvalidStatusTransitionError(ValueError):
    """Raised when a status change would move a conversation backwards."""


def _derive_title(problem_statement: str | None) -> str | None:
    if not problem_statement:
        return None
    text = " ".join(problem_statement.split())
    if len(text) <= TITLE_MAX_CHARS:
        return text
    return text[: TITLE_MAX_CHARS - 3].rstrip() + "..."


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def message_payload(message: Message) -> dict:
    return {
        "id": str(message.id),
        "role": message.role,
        "content": message.content,
        "hint_level": message.hint_level,
        "created_at": _iso(message.created_at),
    }


def conversation_payload(conversation: Conversation, owner: User | None = None) -> dict:
    payload = {
        "id": str(conversation.id),
        "user_id": str(conversation.user_id),
        "title": conversation.title,
        "subject": conversation.subject,
        "problem_statement": conversation.problem_statement,
        "status": conversation.status,
        "started_at": _iso(conversation.started_at),
        "ended_at": _iso(conversation.ended_at),
    }
    if owner is not None:
        payload["student"] = {
            "username": owner.username,
            "full_name": owner.full_name,
            "class_code": owner.class_code,
        }
    return payload


async def create_conversation(
    db: AsyncSession,
    user_id: uuid.UUID,
    problem_statement: str,
    subject: str | None = None,
) -> Conversation:
    conversation = Conversation(
        user_id=user_id,
        subject=subject or None,
        problem_statement=problem_statement,
        title=_derive_title(problem_statement),
        status="active",
    )
    db.add(conversation)
    await db.flush()
    return conversation


async def get_owned_conversation(
    db: AsyncSession, user_id: uuid.UUID, conversation_id: uuid.UUID
) -> Conversation:
    """Return the caller's own conversation or raise ``ConversationNotFoundError``."""
    result = await db.execute(
        select(Conversation).where(
            Conversation.id == conversation_id, Conversation.user_id == user_id
        )
    )
    conversation = result.scalar_one_or_none()
    if conversation is None:
        raise ConversationNotFoundError(str(conversation_id))
    return conversation


async def get_visible_conversation(
    db: AsyncSession, viewer: User, conversation_id: uuid.UUID
) -> tuple[Conversation, User]:
    """Return a conversation readable by ``viewer`` together with its owner.

    Owners always see their conversations. Admins see a student's conversation
    only when both carry the same non-empty class code. Deleted conversations
    are visible to nobody.
    """
    result = await db.execute(
        select(Conversation, User)
        .join(User, User.id == Conversation.user_id)
        .where(Conversation.id == conversation_id)
    )
    row = result.one_or_none()
    if row is None:
        raise ConversationNotFoundError(str(conversation_id))
    conversation, owner = row
    if conversation.status == "deleted":
        raise ConversationNotFoundError(str(conversation_id))
    if conversation.user_id == viewer.id:
        return conversation, owner
    if (
        viewer.is_admin
        and viewer.class_code
        and owner.class_code
        and viewer.class_code == owner.class_code
    ):
        return conversation, owner
    raise ConversationNotFoundError(str(conversation_id))


async def get_conversation_messages(
    db: AsyncSession, conversation_id: uuid.UUID
) -> list[Message]:
    result = await db.execute(
        select(Message)
        .where(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.asc())
    )
    return list(result.scalars().all())


async def count_messages(db: AsyncSession, conversation_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count(Message.id)).where(Message.conversation_id == conversation_id)
    )
    return int(result.scalar() or 0)


async def get_recent_history(
    db: AsyncSession, conversation_id: uuid.UUID, limit: int = 10
) -> list[dict]:
    """Return the last ``limit`` messages in chronological order."""
    result = await db.execute(
        select(Message)
        .where(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.desc())
        .limit(limit)
    )
    newest_first = result.scalars().all()
    return [{"role": m.role, "content": m.content} for m in reversed(newest_first)]


async def save_message(
    db: AsyncSession,
    conversation_id: uuid.UUID,
    role: str,
    content: str,
    hint_level: int | None = None,
) -> Message:
    """Persist a message. Messages are append-only."""
    msg = Message(
        conversation_id=conversation_id,
        role=role,
        content=content,
        hint_level=hint_level,
    )
    db.add(msg)
    await db.flush()
    return msg


async def change_status(
    db: AsyncSession,
    user_id: uuid.UUID,
    conversation_id: uuid.UUID,
    status: str,
) -> Conversation:
    """Move the caller's conversation forward to ``status``."""
    conversation = await get_owned_conversation(db, user_id, conversation_id)
    if conversation.status == "deleted":
        raise ConversationNotFoundError(str(conversation_id))
    if status not in ALLOWED_TRANSITIONS.get(conversation.status, set()):
        raise InvalidStatusTransitionError(
            f"Cannot change status from '{conversation.status}' to '{status}'."
        )
    if status == conversation.status:
        return conversation
    conversation.status = status
    if status == "ended" and conversation.ended_at is None:
        conversation.ended_at = utc_now_naive()
    await db.flush()
    return conversation


async def soft_delete(
    db: AsyncSession, user_id: uuid.UUID, conversation_id: uuid.UUID
) -> Conversation:
    return await change_status(db, user_id, conversation_id, "deleted")


async def get_class_student_ids(db: AsyncSession, class_code: str) -> list[uuid.UUID]:
    result = await db.execute(
        select(User.id).where(User.class_code == class_code, User.role == "student")
    )
    return list(result.scalars().all())


async def list_conversations(
    db: AsyncSession,
    viewer: User,
    *,
    page: int = 1,
    page_size: int = 20,
    status: str | None = None,
    since: datetime | None = None,
    filter_user_id: uuid.UUID | None = None,
) -> dict:
    """Paginated, newest-first listing; deleted conversations are never listed.

    Students see their own conversations. Admins see the conversations of the
    students in their class, optionally narrowed to one student.
    """
    empty = {"items": [], "page": page, "page_size": page_size, "total": 0, "total_pages": 0}

    if viewer.is_admin:
        if not viewer.class_code:
            return empty
        owner_ids = await get_class_student_ids(db, viewer.class_code)
        if filter_user_id is not None:
            if filter_user_id not in owner_ids:
                return empty
            owner_ids = [filter_user_id]
        if not owner_ids:
            return empty
    else:
        owner_ids = [viewer.id]

    conditions = [Conversation.user_id.in_(owner_ids), Conversation.status != "deleted"]
    if status:
        conditions.append(Conversation.status == status)
    if since is not None:
        conditions.append(Conversation.started_at >= since)

    count_result = await db.execute(select(func.count(Conversation.id)).where(*conditions))
    total = int(count_result.scalar() or 0)

    result = await db.execute(
        select(Conversation, User)
        .join(User, User.id == Conversation.user_id)
        .where(*conditions)
        .order_by(Conversation.started_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    items = [
        conversation_payload(conversation, owner if viewer.is_admin else None)
        for conversation, owner in result.all()
    ]
    return {
        "items": items,
        "page": page,
        "page_size": page_size,
        "total": total,
        "total_pages": ceil(total / page_size) if page_size > 0 else 0,
    }


async def get_student_stats(db: AsyncSession, user_id: uuid.UUID) -> dict:
    conv_result = await db.execute(
        select(Conversation.status).where(Conversation.user_id == user_id)
    )
    statuses = list(conv_result.scalars().all())

    msg_result = await db.execute(
        select(func.count(Message.id))
        .join(Conversation, Conversation.id == Message.conversation_id)
        .where(Conversation.user_id == user_id, Message.role == "user")
    )
    return {
        "total_conversations": len(statuses),
        "active_conversations": sum(1 for s in statuses if s == "active"),
        "total_messages": int(msg_result.scalar() or 0),
    }
