"""Hint level calculator: how much guidance the tutor may reveal this turn."""

import math

MIN_HINT_LEVEL = 1
MAX_HINT_LEVEL = 5
# Idle time after which the student is treated as stuck and gets one extra level.
STUCK_ESCALATION_MS = 5 * 60 * 1000


def clamp_hint_level(level: int) -> int:
    return max(MIN_HINT_LEVEL, min(MAX_HINT_LEVEL, int(level)))


def compute_hint_level(
    attempts: int,
    *,
    override_level: int | None = None,
    stuck_since_ms: int | None = None,
    subject: str | None = None,
) -> int:
    """Map the attempt count of a conversation to a hint level in [1, 5].

    Attempts escalate one level every two turns (1-2 -> 1, 3-4 -> 2, ...,
    9+ -> 5). An explicit ``override_level`` wins over everything else, and a
    student idle for more than five minutes is bumped one level. Inputs are
    clamped, never rejected.
    """
    if override_level is not None:
        return clamp_hint_level(override_level)

    level = clamp_hint_level(math.ceil(max(0, attempts) / 2))

    if stuck_since_ms is not None and stuck_since_ms > STUCK_ESCALATION_MS:
        level = clamp_hint_level(level + 1)

    return _adjust_for_subject(level, subject)


def _adjust_for_subject(level: int, subject: str | None) -> int:
    """Reserved hook for per-subject escalation; currently returns ``level``."""
    return level
