import logging
import os
from pathlib import Path

from alembic import command
from alembic.config import Config

from product_api.core.config import get_settings

logger = logging.getLogger("papi.migrations")


def _alembic_config() -> Config:
    """
    Create an Alembic config pointing at backend/alembic.ini.
    We set sqlalchemy.url explicitly (env.py also overrides it) to be robust.
    """
    settings = get_settings()
    backend_dir = Path(__file__).resolve().parents[2]  # .../backend
    cfg = Config(str(backend_dir / "alembic.ini"))
    cfg.set_main_option("script_location", str(backend_dir / "alembic"))
    cfg.set_main_option("sqlalchemy.url", settings.database_url)
    return cfg


def upgrade_head() -> None:
    """Run alembic upgrade head."""
    logger.info("Running Alembic upgrade head.")
    command.upgrade(_alembic_config(), "head")


def _bool_env(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "on"}


def run_migrations_on_startup() -> None:
    """
    Production only, controlled by ALEMBIC_UPGRADE_ON_STARTUP=true.
    Other environments create tables directly from the models.
    """
    settings = get_settings()
    if settings.environment != "production":
        return
    if not _bool_env("ALEMBIC_UPGRADE_ON_STARTUP", default=False):
        return
    try:
        upgrade_head()
    except Exception:
        logger.exception("Migration startup step failed.")
        raise
