from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class ConversationCreate(BaseModel):
    subject: str | None = Field(default=None, max_length=100)
    problem_statement: str = Field(min_length=1, max_length=1000)


class ConversationStatusUpdate(BaseModel):
    status: Literal["active", "ended", "deleted"]


class MessageOut(BaseModel):
    id: UUID
    role: str
    content: str
    hint_level: int | None = None
    created_at: datetime | None = None


class StudentRef(BaseModel):
    username: str
    full_name: str | None = None
    class_code: str | None = None


class ConversationOut(BaseModel):
    id: UUID
    user_id: UUID
    title: str | None = None
    subject: str | None = None
    problem_statement: str | None = None
    status: str
    started_at: datetime | None = None
    ended_at: datetime | None = None
    student: StudentRef | None = None


class ConversationDetail(ConversationOut):
    messages: list[MessageOut] = Field(default_factory=list)


class ConversationPage(BaseModel):
    items: list[ConversationOut]
    page: int
    page_size: int
    total: int
    total_pages: int


class ChatTurnIn(BaseModel):
    conversation_id: UUID
    message: str = Field(min_length=1, max_length=1000)


class ChatTurnOut(BaseModel):
    reply: str
    hint_level: int
