"""
Schema migrations at startup (Alembic upgrade head)
"""
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import Engine

logger = logging.getLogger(__name__)

# Shipped inside the package so an installed wheel can migrate too
MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"


def get_alembic_config() -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    return cfg


def run_migrations(engine: Engine) -> None:
    """
    Apply pending migrations using the application's engine

    subtracker/migrations/env.py берёт соединение из cfg.attributes["connection"].
    """
    cfg = get_alembic_config()
    with engine.begin() as connection:
        cfg.attributes["connection"] = connection
        command.upgrade(cfg, "head")
    logger.info("migrations applied")
