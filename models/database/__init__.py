"""
Database models package - SQLAlchemy ORM models
"""

from .preference import UserPreference
from .task import Task
from .user import User

__all__ = [
    "Task",
    "User",
    "UserPreference",
]
