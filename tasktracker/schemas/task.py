"""Pydantic schemas for task request/response validation."""

from pydantic import Field
from datetime import datetime
from typing import Optional, List

from tasktracker.schemas.common import MAX_DB_INT, CamelModel


class TaskCreate(CamelModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    status: str = "pending"
    priority: str = "low"
    recurring: str = "none"
    # par défaut : l'utilisateur authentifié
    user_id: Optional[int] = Field(None, ge=1, le=MAX_DB_INT)


class TaskUpdate(CamelModel):
    """Champs modifiables d'une tâche (id, userId, createdAt... sont ignorés)."""

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    status: Optional[str] = Field(None, min_length=1)
    priority: Optional[str] = Field(None, min_length=1)
    recurring: Optional[str] = Field(None, min_length=1)


class TaskResponse(CamelModel):
    id: int
    user_id: int
    title: str
    description: Optional[str]
    due_date: Optional[datetime]
    status: str
    priority: str
    recurring: str
    created_at: datetime
    updated_at: datetime


class TaskPage(CamelModel):
    tasks: List[TaskResponse]
    page: int
    total_pages: int
    total_tasks: int


class MessageResponse(CamelModel):
    message: str
