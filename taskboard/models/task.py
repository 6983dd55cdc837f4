"""Task data model for taskboard."""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field


class Task(BaseModel):
    """Canonical Task model.

    A task belongs to exactly one owner (``user_id``) and is never updated in
    place: it is created with a name and later deleted by its owner.
    """
    
    id: str = Field(..., description="Store-assigned task identifier (UUID v4)")
    name: str = Field(..., description="Task name (non-empty, trimmed)")
    user_id: str = Field(..., description="Identity provider user ID of the owner")
    created_at: Optional[datetime] = Field(None, description="Task creation timestamp")


class TaskCreate(BaseModel):
    """Request body for task creation.

    ``name`` is left untyped so that a missing or non-string name is reported
    as a 400 with the API's own error message instead of a validation error.
    """
    name: Optional[Any] = Field(None, description="Task name (trimmed server-side)")


class DeleteResult(BaseModel):
    """Acknowledgment returned by task deletion."""
    success: bool = True
