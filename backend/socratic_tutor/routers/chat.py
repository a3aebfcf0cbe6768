"""Chat router: one Socratic tutor turn per request, plus the AI health probe."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from socratic_tutor.ai.llm_base import LLMError
from socratic_tutor.dependencies import get_current_user, get_db, get_tutor_service
from socratic_tutor.models.user import User
from socratic_tutor.schemas.conversation import ChatTurnIn, ChatTurnOut
from socratic_tutor.services.conversation_service import ConversationNotFoundError
from socratic_tutor.services.sanitizer import MessageRejectedError
from socratic_tutor.services.tutor_service import TutorService, run_chat_turn

router = APIRouter(prefix="/api/ai", tags=["chat"])


@router.post("/chat", response_model=ChatTurnOut)
async def chat_turn(
    body: ChatTurnIn,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    tutor: Annotated[TutorService, Depends(get_tutor_service)],
):
    """Save the student's message and return the tutor's reply with its hint level."""
    try:
        reply = await run_chat_turn(
            db,
            tutor,
            current_user.id,
            current_user.class_code,
            body.conversation_id,
            body.message,
        )
    except MessageRejectedError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except ConversationNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    except LLMError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    return ChatTurnOut(reply=reply.text, hint_level=reply.hint_level)


@router.get("/health")
async def ai_health(tutor: Annotated[TutorService, Depends(get_tutor_service)]):
    """Report whether the tutor has an API key and a model configured."""
    raw_key = tutor.config.api_key.strip()
    has_key = len(raw_key) > 10
    return {
        "ok": has_key and bool(tutor.config.model),
        "provider": "openai",
        "has_key": has_key,
        "masked": f"{raw_key[:6]}...{raw_key[-4:]}" if has_key else "",
        "model": tutor.config.model or None,
    }
