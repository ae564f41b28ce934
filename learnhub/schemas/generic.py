from datetime import datetime, timezone
from typing import Optional, TypeVar, Generic

from pydantic import BaseModel, Field

T = TypeVar("T")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ApiResponse(BaseModel, Generic[T]):
    """Envelope of every API response; ``code`` is only set on errors"""
    status: str
    message: Optional[str] = None
    code: Optional[int] = None
    data: Optional[T] = None
    timestamp: datetime = Field(default_factory=_now)

    @classmethod
    def success(cls, data: Optional[T] = None, message: Optional[str] = None):
        return cls(status="SUCCESS", message=message, data=data)

    @classmethod
    def error(cls, code: int, message: str, data: Optional[T] = None):
        return cls(status="ERROR", message=message, code=code, data=data)


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="healthy, or degraded when the database is unreachable")
    service: str
    version: str
    environment: str
    database: bool
    distributed_locks: bool = Field(..., description="False when locks are process-local")
