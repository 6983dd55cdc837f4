"""User data models for taskboard.

Users live on the identity provider. These models describe what taskboard
reads from it; nothing here is persisted locally.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class Role(str, Enum):
    """Role stored in a user's public metadata. No role means "none"."""
    ADMIN = "admin"
    MODERATOR = "moderator"


class DirectoryUser(BaseModel):
    """A user record as returned by the identity provider directory."""
    
    id: str = Field(..., description="Identity provider user ID")
    first_name: Optional[str] = Field(None, description="Given name")
    last_name: Optional[str] = Field(None, description="Family name")
    email: Optional[str] = Field(None, description="Primary email address")
    image_url: Optional[str] = Field(None, description="Avatar URL")
    role: Optional[Role] = Field(None, description="Role from public metadata (None if unset)")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    @property
    def initials(self) -> str:
        return "".join(part[0] for part in (self.first_name, self.last_name) if part)


class Caller(BaseModel):
    """The authenticated user making the current request.

    Built fresh for every request and passed explicitly to handlers.
    """
    
    id: str = Field(..., description="Identity provider user ID")
    role: Optional[Role] = Field(None, description="Role at the time of the request")
    email: Optional[str] = Field(None, description="Primary email address")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
