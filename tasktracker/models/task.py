"""Task model"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from tasktracker.core.database import Base
from tasktracker.util.time import utcnow


class Task(Base):
    __tablename__ = "tasks"
    
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    due_date = Column(DateTime, nullable=True, index=True)
    status = Column(String, nullable=False, default="pending")
    priority = Column(String, nullable=False, default="low")
    recurring = Column(String, nullable=False, default="none")
    
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
