"""Socratic system prompt assembly.

The prompt is an ordered list of optional sections. Each builder returns the
section text or ``None``; absent sections are dropped and the rest are joined
with newlines, so the same inputs always produce the same string.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, fields

from socratic_tutor.ai.hint_levels import clamp_hint_level
from socratic_tutor.ai.prompts import (
    AVOID_PHRASES_HEADER,
    HINT_LEVEL_TEMPLATES,
    RESTRICTION_DIRECTIVES,
    RESTRICTIONS_HEADER,
    SOCRATIC_SYSTEM_PROMPT,
    VARIABILITY_DIRECTIVES,
)

MAX_AVOID_PHRASES = 12

# Persisted settings use camelCase keys.
_STORED_KEYS = {
    "explain_definitions": "explainDefinitions",
    "model_physics_engineering": "modelPhysicsEngineering",
    "show_workings": "showWorkings",
    "avoid_direct_answers": "avoidDirectAnswers",
}


@dataclass(frozen=True)
class AiRestrictions:
    """Teacher toggles for one class. ``None`` means the toggle was never set."""

    explain_definitions: bool | None = None
    model_physics_engineering: bool | None = None
    show_workings: bool | None = None
    avoid_direct_answers: bool | None = None

    @classmethod
    def from_mapping(cls, data: Mapping | None) -> "AiRestrictions | None":
        """Build from a stored settings object (camelCase or snake_case keys)."""
        if not isinstance(data, Mapping):
            return None
        values: dict[str, bool] = {}
        for name, stored in _STORED_KEYS.items():
            raw = data.get(stored, data.get(name))
            if isinstance(raw, bool):
                values[name] = raw
        return cls(**values)

    def to_mapping(self) -> dict[str, bool]:
        return {
            _STORED_KEYS[f.name]: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    @property
    def is_defined(self) -> bool:
        return any(getattr(self, f.name) is not None for f in fields(self))


def restriction_section(restrictions: AiRestrictions | None) -> str | None:
    if restrictions is None or not restrictions.is_defined:
        return None
    rules: list[str] = []
    for name, (allowed, prohibited) in RESTRICTION_DIRECTIVES.items():
        value = getattr(restrictions, name)
        if value is None:
            continue
        rules.append(allowed if value else prohibited)
    return "\n".join([RESTRICTIONS_HEADER, *rules])


def variability_section() -> str:
    return VARIABILITY_DIRECTIVES


def dedupe_recent(phrases: Sequence[str], limit: int = MAX_AVOID_PHRASES) -> list[str]:
    """Exact-string dedup keeping each phrase's latest position, then the last ``limit``."""
    latest_first = list(dict.fromkeys(reversed([p for p in phrases if p])))
    latest_first.reverse()
    return latest_first[-limit:] if limit > 0 else []


def avoid_phrases_section(avoid_phrases: Sequence[str] | None) -> str | None:
    if not avoid_phrases:
        return None
    phrases = dedupe_recent(avoid_phrases)
    if not phrases:
        return None
    bullets = [f'- "{phrase}"' for phrase in phrases]
    return "\n".join([AVOID_PHRASES_HEADER, *bullets])


def base_prompt_section() -> str:
    return SOCRATIC_SYSTEM_PROMPT


def context_section(subject: str | None, problem_statement: str | None) -> str | None:
    lines = []
    if subject:
        lines.append(f"Subject: {subject}")
    if problem_statement:
        lines.append(f"Problem: {problem_statement}")
    return "\n".join(lines) if lines else None


def hint_level_section(hint_level: int) -> str:
    return f"Hint level guidance: {HINT_LEVEL_TEMPLATES[clamp_hint_level(hint_level)]}"


def build_socratic_prompt(
    subject: str | None = None,
    problem_statement: str | None = None,
    hint_level: int = 1,
    restrictions: AiRestrictions | None = None,
    avoid_phrases: Sequence[str] | None = None,
) -> str:
    """Assemble the tutor system prompt.

    Teacher restrictions come first and are stated as overriding the general
    rules of the base prompt that follows them.
    """
    sections = [
        restriction_section(restrictions),
        variability_section(),
        avoid_phrases_section(avoid_phrases),
        base_prompt_section(),
        context_section(subject, problem_statement),
        hint_level_section(hint_level),
    ]
    return "\n".join(section for section in sections if section)
