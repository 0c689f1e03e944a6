"""
FastAPI dependencies (DB session, settings)
"""
from fastapi import Request

from subtracker.config import Settings
from subtracker.infrastructure.db.session import get_db as _get_db


# Re-export get_db для удобства
get_db = _get_db


def get_app_settings(request: Request) -> Settings:
    """
    Settings the running app was created with (app.state.settings)

    Usage:
        @router.post("/")
        def create(settings: Settings = Depends(get_app_settings)):
            ...
    """
    return request.app.state.settings
