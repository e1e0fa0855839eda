"""Environment domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, field_validator


class EnvironmentDataPayload(BaseModel):
    """Schema for upserting/updating one environment data slot"""

    id: str
    value: Any = None

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("id is required")
        return v


class EnvironmentDataResponse(BaseModel):
    """Schema for a stored environment data row"""

    id: str
    value: Any = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
