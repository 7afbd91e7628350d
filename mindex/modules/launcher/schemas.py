"""Pydantic schemas for handing files to the desktop."""

from typing import Optional

from pydantic import BaseModel, Field


class OpenFileRequest(BaseModel):
    """Schema for opening a catalog file with the default application."""

    path: str = Field(description="Absolute path of the file to open")


class OpenFileResult(BaseModel):
    """Outcome of an open request: ``success`` or an ``error`` message."""

    success: Optional[bool] = None
    error: Optional[str] = None
