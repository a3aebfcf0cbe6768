"""Schema migrations, run once at application startup."""

import asyncio
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config

logger = logging.getLogger(__name__)

BACKEND_DIR = Path(__file__).resolve().parents[2]


def build_alembic_config(database_url: str | None = None) -> Config:
    """Alembic config pointing at ``backend/alembic``.

    ``database_url`` overrides the configured database for this run only.
    """
    cfg = Config(str(BACKEND_DIR / "alembic.ini"))
    cfg.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    cfg.attributes["configure_logger"] = False
    if database_url:
        cfg.attributes["database_url"] = database_url
    return cfg


async def init_db(database_url: str | None = None) -> None:
    """Upgrade the schema to the latest revision."""
    cfg = build_alembic_config(database_url)
    logger.info("Applying database migrations")
    await asyncio.to_thread(command.upgrade, cfg, "head")
    logger.info("Database schema is up to date")
