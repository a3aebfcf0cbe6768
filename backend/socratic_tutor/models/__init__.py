from socratic_tutor.models.user import User, Base
from socratic_tutor.models.conversation import Conversation, Message
from socratic_tutor.models.classroom import (
    AnalyticsEvent,
    Announcement,
    AnnouncementResponse,
    TeacherSettings,
)

__all__ = [
    "User",
    "Base",
    "Conversation",
    "Message",
    "TeacherSettings",
    "Announcement",
    "AnnouncementResponse",
    "AnalyticsEvent",
]
