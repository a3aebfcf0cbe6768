"""PII scrubbing, prompt-injection stripping and message validation."""

import html
import re
from collections.abc import Mapping

from socratic_tutor.config import settings

EMAIL_PATTERN = re.compile(r"\b[\w.%+-]+@[\w.-]+\.[A-Za-z]{2,}\b")
PHONE_PATTERN = re.compile(r"(?<![\w])\+?\d[\d\s().-]{7,}\d\b")
ADDRESS_PATTERN = re.compile(
    r"\b\d{1,5}\s+(?:[A-Za-z0-9'.-]+\s+){1,4}"
    r"(?:street|st|avenue|ave|road|rd|boulevard|blvd|lane|ln|drive|dr|court|ct|way|place|pl)\b\.?",
    re.IGNORECASE,
)
INJECTION_PATTERN = re.compile(
    r"^[ \t]*ignore\s+previous\s+instructions.*$", re.IGNORECASE | re.MULTILINE
)
INAPPROPRIATE_PATTERN = re.compile(r"\b(?:kill|suicide|credit\s*card)\b", re.IGNORECASE)
_IDENTIFYING_KEY = re.compile(r"name|email|phone|address|id", re.IGNORECASE)


class MessageRejectedError(ValueError):
    """Raised when a student message fails content validation."""


def remove_pii(text: str) -> str:
    out = EMAIL_PATTERN.sub("[email]", text)
    out = PHONE_PATTERN.sub("[phone]", out)
    out = ADDRESS_PATTERN.sub("[address]", out)
    return out


def sanitize_for_ai(text: str) -> str:
    """Scrub PII and replace lines that try to override the tutor's instructions."""
    return INJECTION_PATTERN.sub("[instruction removed]", remove_pii(text))


def escape_html(text: str) -> str:
    return html.escape(text, quote=False)


def anonymize_user(user_data: Mapping) -> dict:
    """Return a copy with identifying fields blanked out."""
    return {
        key: (None if _IDENTIFYING_KEY.search(str(key)) else value)
        for key, value in user_data.items()
    }


def validate_message_content(text: str, max_chars: int | None = None) -> None:
    """Raise ``MessageRejectedError`` for over-long or inappropriate messages."""
    limit = max_chars if max_chars is not None else settings.max_user_message_chars
    if len(text) > limit:
        raise MessageRejectedError("Message too long")
    if INAPPROPRIATE_PATTERN.search(text):
        raise MessageRejectedError("Inappropriate content")
