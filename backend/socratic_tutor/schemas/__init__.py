from socratic_tutor.schemas.user import (
    UserCreate,
    UserLogin,
    UserProfile,
    TokenResponse,
)
from socratic_tutor.schemas.conversation import (
    ChatTurnIn,
    ChatTurnOut,
    ConversationCreate,
    ConversationDetail,
    ConversationOut,
    ConversationPage,
    ConversationStatusUpdate,
    MessageOut,
)
from socratic_tutor.schemas.classroom import (
    AnnouncementCreate,
    AnnouncementOut,
    AnnouncementResponseCreate,
    AnnouncementResponseOut,
    RestrictionSettings,
)
from socratic_tutor.schemas.analytics import (
    DailyInsights,
    LessonPlanRequest,
    RubricRequest,
    StudentStats,
    UsageSeries,
)

__all__ = [
    "UserCreate",
    "UserLogin",
    "UserProfile",
    "TokenResponse",
    "ChatTurnIn",
    "ChatTurnOut",
    "ConversationCreate",
    "ConversationDetail",
    "ConversationOut",
    "ConversationPage",
    "ConversationStatusUpdate",
    "MessageOut",
    "AnnouncementCreate",
    "AnnouncementOut",
    "AnnouncementResponseCreate",
    "AnnouncementResponseOut",
    "RestrictionSettings",
    "DailyInsights",
    "LessonPlanRequest",
    "RubricRequest",
    "StudentStats",
    "UsageSeries",
]
