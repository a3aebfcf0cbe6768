"""Shared test fixtures and mock implementations."""

import uuid

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import socratic_tutor.models  # noqa: F401
from socratic_tutor.ai.llm_base import LLMError, LLMProvider, LLMUsage
from socratic_tutor.db.session import build_session_factory
from socratic_tutor.models.user import Base, User
from socratic_tutor.services.tutor_service import TutorConfig, TutorService


class MockLLMProvider(LLMProvider):
    """Mock LLM provider that returns predetermined replies.

    Every call is recorded in ``calls``. Replies are consumed in order and the
    last one repeats. Set ``error`` to make every call raise it.
    """

    def __init__(
        self,
        replies: list[str] | None = None,
        error: LLMError | None = None,
        input_tokens: int = 10,
        output_tokens: int = 5,
    ) -> None:
        super().__init__()
        self.model_id = "mock-model"
        self.replies = list(replies or ["What do you notice about the first step?"])
        self.error = error
        self.calls: list[dict] = []
        self._input_tokens = input_tokens
        self._output_tokens = output_tokens

    async def generate(
        self,
        system_prompt: str,
        messages: list[dict],
        *,
        max_tokens: int = 200,
        temperature: float = 0.5,
        timeout: float = 15.0,
        json_mode: bool = False,
    ) -> str:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "messages": messages,
                "max_tokens": max_tokens,
                "temperature": temperature,
                "timeout": timeout,
                "json_mode": json_mode,
            }
        )
        if self.error is not None:
            raise self.error
        self.last_usage = LLMUsage(
            input_tokens=self._input_tokens, output_tokens=self._output_tokens
        )
        if len(self.replies) > 1:
            return self.replies.pop(0)
        return self.replies[0]


def make_tutor(llm: LLMProvider | None = None, **overrides) -> TutorService:
    config = TutorConfig(
        api_key="sk-test-key-123456",
        model="gpt-4o-mini",
        api_url="https://api.openai.com/v1/chat/completions",
        **overrides,
    )
    return TutorService(config, llm or MockLLMProvider())


async def create_user(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    role: str = "student",
    class_code: str | None = "CLS-TEST01",
    full_name: str | None = None,
) -> User:
    async with session_factory() as db:
        user = User(
            email=f"{uuid.uuid4().hex}@example.com",
            username=f"user_{uuid.uuid4().hex[:8]}",
            password_hash="x",
            full_name=full_name,
            role=role,
            school_id="001",
            class_code=class_code,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Create an isolated SQLite database with the full schema."""
    db_path = tmp_path / "tutor.sqlite3"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    factory = build_session_factory(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield factory
    finally:
        await engine.dispose()
