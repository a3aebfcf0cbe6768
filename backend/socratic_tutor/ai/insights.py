"""Teacher-facing analysis of student questions."""

import json
import re
from collections import Counter
from dataclasses import dataclass, field

ENGAGEMENT_LEVELS = ("low", "medium", "high")

INSIGHTS_SYSTEM_PROMPT = """You are an expert educational analyst helping teachers understand their students' learning patterns.

Analyze the following student questions and provide actionable insights for the teacher.

Your response must be in valid JSON format with this exact structure:
{
  "summary": "A brief 1-2 sentence overview of student activity and engagement",
  "strugglingTopics": ["topic1", "topic2", "topic3"],
  "teachingRecommendations": ["recommendation1", "recommendation2", "recommendation3"],
  "commonMisconceptions": ["misconception1", "misconception2"],
  "engagementLevel": "low|medium|high"
}

Guidelines:
- Be specific and actionable in recommendations
- Focus on patterns, not individual questions
- Identify subject areas where students need more support
- Suggest concrete teaching strategies
- Keep each item concise (1 sentence max)
- Engagement: low (< 5 questions), medium (5-15), high (> 15)"""

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_NON_WORD = re.compile(r"[^\w\s]")
TOPIC_STOPWORDS = frozenset(
    {"what", "when", "where", "which", "that", "this", "with", "from", "they", "have", "been"}
)


@dataclass
class QuestionAnalysis:
    summary: str
    struggling_topics: list[str] = field(default_factory=list)
    teaching_recommendations: list[str] = field(default_factory=list)
    common_misconceptions: list[str] = field(default_factory=list)
    engagement_level: str = "medium"


def extract_json_object(text: str) -> dict:
    """Parse the first ``{...}`` span of ``text``; raises ``ValueError`` if none parses."""
    match = _JSON_OBJECT.search(text or "")
    candidate = match.group(0) if match else (text or "")
    parsed = json.loads(candidate)
    if not isinstance(parsed, dict):
        raise ValueError("Expected a JSON object")
    return parsed


def build_insights_user_prompt(questions: list[str]) -> str:
    numbered = "\n".join(f"{i}. {q}" for i, q in enumerate(questions, start=1))
    return f"Student Questions:\n{numbered}\n\nProvide your analysis in JSON format."


def _string_list(value, limit: int) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value][:limit]


def parse_question_analysis(raw: str) -> QuestionAnalysis:
    data = extract_json_object(raw)
    engagement = data.get("engagementLevel")
    return QuestionAnalysis(
        summary=data.get("summary") or "Analysis completed.",
        struggling_topics=_string_list(data.get("strugglingTopics"), 5),
        teaching_recommendations=_string_list(data.get("teachingRecommendations"), 5),
        common_misconceptions=_string_list(data.get("commonMisconceptions"), 3),
        engagement_level=engagement if engagement in ENGAGEMENT_LEVELS else "medium",
    )


def engagement_for_count(count: int, *, high_above: int = 15, medium_above: int = 5) -> str:
    if count > high_above:
        return "high"
    if count > medium_above:
        return "medium"
    return "low"


def empty_analysis() -> QuestionAnalysis:
    return QuestionAnalysis(summary="No student activity to analyze.", engagement_level="low")


def fallback_analysis(questions: list[str]) -> QuestionAnalysis:
    return QuestionAnalysis(
        summary=f"Analyzed {len(questions)} student questions.",
        teaching_recommendations=["Continue monitoring student questions for patterns"],
        engagement_level=engagement_for_count(len(questions)),
    )


def extract_topics(questions: list[str], limit: int = 5) -> list[tuple[str, int]]:
    """Keyword frequency over the questions, most frequent first."""
    counts: Counter[str] = Counter()
    for question in questions:
        words = _NON_WORD.sub(" ", question.lower()).split()
        counts.update(w for w in words if len(w) > 3 and w not in TOPIC_STOPWORDS)
    return counts.most_common(limit)
