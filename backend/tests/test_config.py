"""Settings parsing tests."""

import pytest

from socratic_tutor.config import Settings, _parse_school_id_set


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("001", {"001"}),
        ("001, 002;003", {"001", "002", "003"}),
        ('["001", "002"]', {"001", "002"}),
        ("'001' \"002\"", {"001", "002"}),
        ("", set()),
        ("   ", set()),
    ],
)
def test_school_id_parsing(raw: str, expected: set[str]) -> None:
    assert _parse_school_id_set(raw) == expected


def test_model_aliases_are_normalised() -> None:
    assert Settings(_env_file=None, ai_model="4o-mini").ai_model == "gpt-4o-mini"
    assert Settings(_env_file=None, ai_model=" GPT4o ").ai_model == "gpt-4o"
    assert Settings(_env_file=None, ai_model="gpt-4.1").ai_model == "gpt-4.1"


def test_tutor_defaults() -> None:
    config = Settings(_env_file=None)
    assert config.chat_max_tokens == 200
    assert config.chat_temperature == 0.5
    assert config.chat_history_limit == 10
    assert config.phrase_window_messages == 6
    assert config.phrase_limit == 12
    assert config.max_user_message_chars == 1000
