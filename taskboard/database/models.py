"""SQLAlchemy database models for taskboard."""

from datetime import datetime
import uuid
from sqlalchemy import Column, String, DateTime

from taskboard.database.database import Base


class TaskDB(Base):
    """Database model for Task.

    ``user_id`` is the identity provider's user ID. Users are not stored
    locally, so it is an indexed plain column rather than a foreign key.
    """
    
    __tablename__ = "tasks"
    
    # Primary key (store-assigned)
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    
    # Owner
    user_id = Column(String, nullable=False, index=True)
    
    name = Column(String, nullable=False)
    
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    
    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from taskboard.models.task import Task
        return Task(
            id=self.id,
            name=self.name,
            user_id=self.user_id,
            created_at=self.created_at,
        )
