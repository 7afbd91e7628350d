"""Schemas shared by several modules."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class TimestampSchema(BaseModel):
    """Timestamps carried by every catalog row that has them."""

    created_at: datetime = Field(description="When the row was created")
    updated_at: Optional[datetime] = Field(default=None, description="When the row was last written")


class HiddenFilter(str, Enum):
    """How listings treat content that belongs to hidden libraries."""

    HIDE = "hide"
    INCLUDE = "include"
    ONLY = "only"
