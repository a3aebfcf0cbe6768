"""Recent-phrase extraction used to keep tutor wording from repeating."""

import re
from collections.abc import Mapping, Sequence

SENTENCE_TERMINATORS = re.compile(r"[.!?]")
NOISE_PATTERN = re.compile(r"interesting question", re.IGNORECASE)
MIN_PHRASE_CHARS = 4


def extract_recent_phrases(
    messages: Sequence[Mapping],
    *,
    window: int = 6,
    limit: int = 12,
) -> list[str]:
    """Split the last ``window`` messages into sentence fragments.

    Order matters: split, trim, drop short fragments, drop noise, keep the
    last ``limit``. Duplicates are left for the prompt builder to collapse.
    """
    recent = list(messages)[-window:] if window > 0 else []
    fragments: list[str] = []
    for message in recent:
        content = message.get("content") or ""
        for piece in SENTENCE_TERMINATORS.split(content):
            fragment = piece.strip()
            if len(fragment) < MIN_PHRASE_CHARS:
                continue
            if NOISE_PATTERN.search(fragment):
                continue
            fragments.append(fragment)
    return fragments[-limit:] if limit > 0 else []
