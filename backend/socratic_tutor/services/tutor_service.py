"""Tutor pipeline: hint level, Socratic prompt, LLM call, and the chat turn."""

import logging
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from socratic_tutor.ai.hint_levels import compute_hint_level
from socratic_tutor.ai.llm_base import LLMError, LLMMessage, LLMProvider
from socratic_tutor.ai.phrases import extract_recent_phrases
from socratic_tutor.ai.prompt_builder import AiRestrictions, build_socratic_prompt
from socratic_tutor.ai.prompts import FALLBACK_REPLY
from socratic_tutor.services import conversation_service, restriction_service, usage_service
from socratic_tutor.services.conversation_service import ConversationNotFoundError
from socratic_tutor.services.sanitizer import sanitize_for_ai, validate_message_content

logger = logging.getLogger(__name__)

CHAT_ROLES = ("user", "assistant")


@dataclass(frozen=True)
class TutorConfig:
    """Everything the tutor pipeline needs from the environment, read once at startup."""

    api_key: str
    model: str
    api_url: str
    chat_temperature: float = 0.5
    chat_max_tokens: int = 200
    chat_timeout_seconds: float = 15.0
    history_limit: int = 10
    phrase_window: int = 6
    phrase_limit: int = 12
    max_user_message_chars: int = 1000
    analysis_temperature: float = 0.3
    analysis_max_tokens: int = 1000
    analysis_timeout_seconds: float = 30.0

    @classmethod
    def from_settings(cls, settings) -> "TutorConfig":
        return cls(
            api_key=settings.openai_api_key,
            model=settings.ai_model,
            api_url=settings.openai_api_url,
            chat_temperature=settings.chat_temperature,
            chat_max_tokens=settings.chat_max_tokens,
            chat_timeout_seconds=settings.chat_timeout_seconds,
            history_limit=settings.chat_history_limit,
            phrase_window=settings.phrase_window_messages,
            phrase_limit=settings.phrase_limit,
            max_user_message_chars=settings.max_user_message_chars,
            analysis_temperature=settings.analysis_temperature,
            analysis_max_tokens=settings.analysis_max_tokens,
            analysis_timeout_seconds=settings.analysis_timeout_seconds,
        )


@dataclass
class TutorRequest:
    history: list[Mapping] = field(default_factory=list)
    attempts: int = 1
    subject: str | None = None
    problem_statement: str | None = None
    restrictions: AiRestrictions | None = None
    avoid_phrases: list[str] = field(default_factory=list)
    override_level: int | None = None
    stuck_since_ms: int | None = None


@dataclass
class TutorReply:
    text: str
    hint_level: int
    input_tokens: int = 0
    output_tokens: int = 0


class TutorService:
    def __init__(self, config: TutorConfig, llm: LLMProvider):
        self.config = config
        self.llm = llm

    def build_messages(self, history: Sequence[Mapping]) -> list[LLMMessage]:
        """Keep the trailing chat turns and scrub every student message."""
        turns = [m for m in history if m.get("role") in CHAT_ROLES]
        messages: list[LLMMessage] = []
        for m in turns[-self.config.history_limit:]:
            content = m.get("content") or ""
            if m["role"] == "user":
                content = sanitize_for_ai(content)
            messages.append({"role": m["role"], "content": content})
        return messages

    async def generate(self, request: TutorRequest) -> TutorReply:
        """Produce the tutor's next reply. ``LLMError`` propagates unchanged."""
        hint_level = compute_hint_level(
            request.attempts,
            override_level=request.override_level,
            stuck_since_ms=request.stuck_since_ms,
            subject=request.subject,
        )
        system_prompt = build_socratic_prompt(
            subject=request.subject,
            problem_statement=request.problem_statement,
            hint_level=hint_level,
            restrictions=request.restrictions,
            avoid_phrases=request.avoid_phrases,
        )
        text = await self.llm.generate(
            system_prompt,
            self.build_messages(request.history),
            max_tokens=self.config.chat_max_tokens,
            temperature=self.config.chat_temperature,
            timeout=self.config.chat_timeout_seconds,
        )
        usage = self.llm.last_usage
        return TutorReply(
            text=text or FALLBACK_REPLY,
            hint_level=hint_level,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
        )

    async def send_analysis(self, system_prompt: str, user_prompt: str) -> str:
        """One JSON-mode completion for teacher-facing tools."""
        return await self.llm.generate(
            system_prompt,
            [{"role": "user", "content": user_prompt}],
            max_tokens=self.config.analysis_max_tokens,
            temperature=self.config.analysis_temperature,
            timeout=self.config.analysis_timeout_seconds,
            json_mode=True,
        )


async def run_chat_turn(
    db: AsyncSession,
    tutor: TutorService,
    user_id: uuid.UUID,
    class_code: str | None,
    conversation_id: uuid.UUID,
    message: str,
) -> TutorReply:
    """Handle one student message end to end.

    The student message is committed before the LLM call. If the call fails
    the ``LLMError`` is re-raised and no assistant message is stored.
    """
    validate_message_content(message, tutor.config.max_user_message_chars)

    # Must run first: a failed lookup rolls the session back.
    lookup = await restriction_service.lookup_restrictions(db, class_code)
    restrictions = lookup.restrictions_or_default(None)

    conversation = await conversation_service.get_owned_conversation(
        db, user_id, conversation_id
    )
    if conversation.status == "deleted":
        raise ConversationNotFoundError(str(conversation_id))

    prior_count = await conversation_service.count_messages(db, conversation_id)
    await conversation_service.save_message(db, conversation_id, "user", message)
    history = await conversation_service.get_recent_history(
        db, conversation_id, limit=tutor.config.history_limit
    )
    request = TutorRequest(
        history=history,
        attempts=len(history) or prior_count + 1,
        subject=conversation.subject,
        problem_statement=conversation.problem_statement,
        restrictions=restrictions,
        avoid_phrases=extract_recent_phrases(
            history,
            window=tutor.config.phrase_window,
            limit=tutor.config.phrase_limit,
        ),
    )
    await db.commit()

    try:
        reply = await tutor.generate(request)
    except LLMError as exc:
        logger.warning("Tutor reply failed for conversation %s: %s", conversation_id, exc)
        raise

    await conversation_service.save_message(
        db, conversation_id, "assistant", reply.text, hint_level=reply.hint_level
    )
    await usage_service.record_event(
        db,
        user_id,
        "ai_response",
        {
            "conversation_id": str(conversation_id),
            "hint_level": reply.hint_level,
            "input_tokens": reply.input_tokens,
            "output_tokens": reply.output_tokens,
        },
    )
    await db.commit()
    return reply
