"""Health probe response."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"] = Field(description="degraded when the database is unreachable")
    environment: str
    timestamp: datetime
    database: Literal["connected", "disconnected"]
    email: Literal["smtp", "log"] = Field(description="smtp sends mail; log only records it")
