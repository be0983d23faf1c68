from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.app_state import state
from app.db import get_db
from app.utils.db.errors import storage_errors

router = APIRouter(
    tags=["system"],
    responses={404: {"description": "Not found"}},
)


@router.get("/health")
def health(db: Session = Depends(get_db)) -> dict:
    """Liveness plus a storage round trip; storage failures surface as 503."""
    with storage_errors("health"):
        db.execute(text("SELECT 1"))
    return {"status": "ok"}


@router.get("/system/settings")
def get_system_settings() -> dict:
    """Return non-sensitive configuration for troubleshooting."""
    s = get_settings()

    # Extract safe database info only (no credentials)
    database_host = None
    database_driver = None
    try:
        url_obj = s.database_url_obj
        database_host = url_obj.host
        database_driver = url_obj.get_backend_name()
    except ValueError:
        pass

    return {
        "app": {
            "name": s.app_name,
            "environment": s.environment,
            "log_level": s.log_level,
            "is_production": s.is_production,
        },
        "database": {
            "host": database_host,
            "driver": database_driver,
            "pool_size": s.database_pool_size,
            "storage_timeout_seconds": s.storage_timeout_seconds,
        },
        "realtime": {
            "presence_timeout_seconds": s.presence_timeout_seconds,
            "fanout_max_backlog": s.fanout_max_backlog,
            "presence_channels": len(state.presence.channels()),
        },
    }
