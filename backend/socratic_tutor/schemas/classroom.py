from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from socratic_tutor.ai.prompt_builder import AiRestrictions


class RestrictionSettings(BaseModel):
    """The four teacher toggles, stored and exchanged with camelCase keys."""

    explain_definitions: bool = Field(alias="explainDefinitions")
    model_physics_engineering: bool = Field(alias="modelPhysicsEngineering")
    show_workings: bool = Field(alias="showWorkings")
    avoid_direct_answers: bool = Field(alias="avoidDirectAnswers")

    model_config = ConfigDict(populate_by_name=True)

    def to_restrictions(self) -> AiRestrictions:
        return AiRestrictions(
            explain_definitions=self.explain_definitions,
            model_physics_engineering=self.model_physics_engineering,
            show_workings=self.show_workings,
            avoid_direct_answers=self.avoid_direct_answers,
        )


class AnnouncementCreate(BaseModel):
    subject: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1, max_length=5000)


class AnnouncementResponseCreate(BaseModel):
    content: str = Field(min_length=1, max_length=2000)


class PersonRef(BaseModel):
    username: str
    full_name: str | None = None


class AnnouncementOut(BaseModel):
    id: UUID
    teacher_id: UUID
    class_code: str
    subject: str
    content: str
    created_at: datetime | None = None
    teacher: PersonRef


class AnnouncementResponseOut(BaseModel):
    id: UUID
    announcement_id: UUID
    sender_id: UUID
    content: str
    created_at: datetime | None = None
    sender: PersonRef
