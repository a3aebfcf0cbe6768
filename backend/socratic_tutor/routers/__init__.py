from socratic_tutor.routers.auth import router as auth_router
from socratic_tutor.routers.chat import router as chat_router
from socratic_tutor.routers.conversations import router as conversations_router
from socratic_tutor.routers.admin import router as admin_router
from socratic_tutor.routers.student import router as student_router
from socratic_tutor.routers.announcements import router as announcements_router

__all__ = [
    "auth_router",
    "chat_router",
    "conversations_router",
    "admin_router",
    "student_router",
    "announcements_router",
]
