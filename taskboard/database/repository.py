"""Repository layer for database operations."""

import logging
from typing import List
from sqlalchemy.orm import Session

from taskboard.models.task import Task
from taskboard.database.models import TaskDB

logger = logging.getLogger(__name__)


class TaskRepository:
    """Repository for Task database operations.

    Every query is scoped by ``user_id``: a task outside the caller's scope is
    indistinguishable from one that does not exist.
    """
    
    def __init__(self, db: Session):
        self.db = db
    
    def create(self, user_id: str, name: str) -> Task:
        """Insert a task owned by ``user_id`` and return it with its store-assigned id."""
        try:
            task_db = TaskDB(user_id=user_id, name=name)
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created task {task_db.id}: {name[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task for user {user_id}: {type(e).__name__}: {str(e)}")
            raise
    
    def get_all(self, user_id: str) -> List[Task]:
        """Get all tasks for a user in insertion order."""
        tasks_db = self.db.query(TaskDB).filter(
            TaskDB.user_id == user_id,
        ).order_by(TaskDB.created_at).all()
        return [task_db.to_pydantic() for task_db in tasks_db]
    
    def delete(self, user_id: str, task_id: str) -> int:
        """Delete a task by ID for a specific user.

        Single filtered DELETE on both id and owner. A task owned by someone
        else matches zero rows, exactly like a missing one; callers must not
        turn the returned count into a different response.

        Returns:
            Number of rows removed (0 or 1)
        """
        try:
            affected = (
                self.db.query(TaskDB)
                .filter(
                    TaskDB.id == task_id,
                    TaskDB.user_id == user_id,
                )
                .delete(synchronize_session=False)
            )
            self.db.commit()
            logger.debug(f"Deleted {affected} task(s) matching {task_id} for user {user_id}")
            return int(affected)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete task {task_id}: {type(e).__name__}: {str(e)}")
            raise
