"""Liveness/readiness probe: database reachability and the active email mode."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db, ping
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    db_ok = ping(db)
    return HealthResponse(
        status="ok" if db_ok else "degraded",
        environment=settings.APP_ENV,
        timestamp=datetime.now(UTC),
        database="connected" if db_ok else "disconnected",
        email="smtp" if settings.EMAIL_ENABLED else "log",
    )
