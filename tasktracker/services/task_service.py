"""Task service"""

import logging
import math
from typing import Any, Dict, List, Tuple

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from tasktracker.core.errors import InvalidArgument, NotFound
from tasktracker.models.task import Task
from tasktracker.models.user import User
from tasktracker.schemas.task import TaskCreate, TaskUpdate
from tasktracker.services.task_query import (
    CombinedFilter,
    FilterSpec,
    InstantEquals,
    NoFilter,
    SearchClause,
    SearchFilter,
    SortField,
    SortOrder,
    StatusFilter,
    TaskFilter,
    TextContains,
    UserIdEquals,
)
from tasktracker.util.time import to_naive_utc

logger = logging.getLogger(__name__)

COMPLETED = "completed"

SORT_COLUMNS = {
    SortField.DUE_DATE: Task.due_date,
    SortField.CREATED_AT: Task.created_at,
    SortField.STATUS: Task.status,
    SortField.USER_ID: Task.user_id,
    SortField.RECURRING: Task.recurring,
    SortField.PRIORITY: Task.priority,
}

TEXT_COLUMNS = {
    "title": Task.title,
    "description": Task.description,
    "recurring": Task.recurring,
    "priority": Task.priority,
}

# colonnes NOT NULL : un null explicite dans un update est refusé
NON_NULLABLE_FIELDS = ("title", "status", "priority", "recurring")


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_clause(clause: SearchClause):
    if isinstance(clause, TextContains):
        pattern = f"%{_escape_like(clause.needle)}%"
        return TEXT_COLUMNS[clause.field].ilike(pattern, escape="\\")
    if isinstance(clause, UserIdEquals):
        return Task.user_id == clause.user_id
    if isinstance(clause, InstantEquals):
        return or_(Task.due_date == clause.instant, Task.created_at == clause.instant)
    raise TypeError(f"Unsupported search clause: {clause!r}")


def filter_clause(task_filter: TaskFilter):
    """Traduit le filtre en clause WHERE (None = pas de filtre)"""
    if isinstance(task_filter, NoFilter):
        return None
    if isinstance(task_filter, StatusFilter):
        return Task.status == task_filter.status
    if isinstance(task_filter, SearchFilter):
        return or_(*[search_clause(c) for c in task_filter.clauses])
    if isinstance(task_filter, CombinedFilter):
        return and_(
            Task.status == task_filter.status,
            or_(*[search_clause(c) for c in task_filter.clauses]),
        )
    raise TypeError(f"Unsupported task filter: {task_filter!r}")


def list_tasks(db: Session, spec: FilterSpec) -> Tuple[List[Task], int]:
    """Retourne (page de tâches, nombre total de tâches filtrées)"""
    query = db.query(Task)
    where = filter_clause(spec.filter)
    if where is not None:
        query = query.filter(where)

    total = query.count()

    column = SORT_COLUMNS[spec.sort_field]
    ordering = column.desc() if spec.sort_order == SortOrder.DESC else column.asc()
    tasks = (
        query.order_by(ordering, Task.id.asc())
        .offset(spec.skip)
        .limit(spec.page_size)
        .all()
    )
    return tasks, total


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size)


def list_user_tasks(db: Session, user_id: int) -> List[Task]:
    return db.query(Task).filter(
        Task.user_id == user_id
    ).order_by(Task.created_at.asc(), Task.id.asc()).all()


def get_task(db: Session, task_id: int) -> Task:
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        raise NotFound("Task not found")
    return task


def create_task(db: Session, data: TaskCreate, owner_id: int) -> Task:
    if not db.query(User).filter(User.id == owner_id).first():
        raise NotFound("User not found")

    new_task = Task(
        user_id=owner_id,
        title=data.title,
        description=data.description,
        due_date=to_naive_utc(data.due_date),
        status=data.status,
        priority=data.priority,
        recurring=data.recurring,
    )
    db.add(new_task)
    db.commit()
    db.refresh(new_task)
    logger.info(f"Task {new_task.id} created for user {owner_id}")
    return new_task


def update_task(db: Session, task: Task, data: TaskUpdate) -> Task:
    # seuls les champs présents dans la requête sont modifiés
    changes: Dict[str, Any] = data.model_dump(exclude_unset=True)
    for field in NON_NULLABLE_FIELDS:
        if field in changes and changes[field] is None:
            raise InvalidArgument(f"Field '{field}' cannot be null")
    if "due_date" in changes:
        changes["due_date"] = to_naive_utc(changes["due_date"])

    for field, value in changes.items():
        setattr(task, field, value)

    db.commit()
    db.refresh(task)
    return task


def complete_task(db: Session, task: Task) -> Task:
    task.status = COMPLETED
    db.commit()
    db.refresh(task)
    return task


def delete_task(db: Session, task: Task, deleted_by: int) -> None:
    task_id = task.id
    db.delete(task)
    db.commit()
    logger.info(f"Task {task_id} deleted by user {deleted_by}")
