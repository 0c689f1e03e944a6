"""
Logging setup
"""
import logging

from subtracker.config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(settings: Settings) -> None:
    """
    Configure root logging: DEBUG for dev, INFO for prod, unless LOG_LEVEL is set
    """
    if settings.LOG_LEVEL:
        level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    else:
        level = logging.INFO if settings.is_prod else logging.DEBUG

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # SQL echo only on explicit request
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
