"""Data models for taskboard."""

from taskboard.models.task import Task, TaskCreate, DeleteResult
from taskboard.models.user import Role, DirectoryUser, Caller

__all__ = [
    "Task",
    "TaskCreate",
    "DeleteResult",
    "Role",
    "DirectoryUser",
    "Caller",
]
