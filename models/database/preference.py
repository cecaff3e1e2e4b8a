"""
User preference model - Key/value settings per user
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from database import Base


class UserPreference(Base):
    """Single preference value; at most one row per (user, key)"""

    __tablename__ = "user_preferences"
    __table_args__ = (UniqueConstraint("user_id", "preference_key", name="uq_user_preference_key"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    key = Column("preference_key", String(100), nullable=False)
    value = Column("preference_value", String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
