"""FastAPI application entry point with startup initialisation and logging."""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from socratic_tutor.config import settings
from socratic_tutor.db.session import engine
from socratic_tutor.db.init_db import init_db
from socratic_tutor.routers import (
    admin_router,
    announcements_router,
    auth_router,
    chat_router,
    conversations_router,
    student_router,
)


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    root_logger = logging.getLogger("socratic_tutor")
    root_logger.setLevel(logging.INFO)

    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)


_configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    await init_db()
    yield
    await engine.dispose()


app = FastAPI(title="Socratic Tutor", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(conversations_router)
app.include_router(chat_router)
app.include_router(admin_router)
app.include_router(student_router)
app.include_router(announcements_router)


@app.exception_handler(RequestValidationError)
async def invalid_body_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies and parameters as 400 Invalid body."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid body", "issues": jsonable_encoder(exc.errors())},
    )


@app.get("/health")
async def health_check():
    """Liveness probe."""
    return {"status": "healthy"}
