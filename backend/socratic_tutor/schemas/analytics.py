from typing import Literal

from pydantic import BaseModel, Field


class UsagePoint(BaseModel):
    date: str
    count: int


class UsageSeries(BaseModel):
    data: list[UsagePoint]


class StudentStats(BaseModel):
    total_conversations: int
    active_conversations: int
    total_messages: int


class TopicCount(BaseModel):
    topic: str
    count: int


class DailyInsight(BaseModel):
    date: str
    total_questions: int
    unique_students: int
    sample_questions: list[str]
    summary: str
    struggling_topics: list[str] = Field(default_factory=list)
    teaching_recommendations: list[str] = Field(default_factory=list)
    common_misconceptions: list[str] = Field(default_factory=list)
    engagement: Literal["low", "medium", "high"]
    top_topics: list[TopicCount] = Field(default_factory=list)


class DailyInsights(BaseModel):
    insights: list[DailyInsight]


class LessonPlanRequest(BaseModel):
    subject: str = Field(min_length=1, max_length=100)
    topic: str = Field(min_length=1, max_length=200)
    grade_level: str | None = Field(default=None, max_length=32)
    duration: int = Field(default=45, ge=5, le=240)
    learning_objectives: str | None = Field(default=None, max_length=2000)
    student_needs: str | None = Field(default=None, max_length=2000)


class RubricRequest(BaseModel):
    assignment_title: str = Field(min_length=1, max_length=200)
    assignment_description: str = Field(min_length=1, max_length=5000)
    grade_level: str | None = Field(default=None, max_length=32)
    subject: str | None = Field(default=None, max_length=100)
    rubric_type: Literal["analytic", "holistic"] = "analytic"
    number_of_levels: Literal[3, 4, 5] = 4
