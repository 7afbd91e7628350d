"""Pydantic schemas for user settings."""

from pydantic import BaseModel, Field


class HiddenContentSetting(BaseModel):
    """Whether content of hidden libraries is shown by default."""

    enabled: bool = Field(description="Show hidden libraries and their comics in listings")
