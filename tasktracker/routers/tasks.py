from fastapi import APIRouter, Depends, Path, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from tasktracker.core.database import get_db
from tasktracker.core.deps import get_current_user, require_admin
from tasktracker.schemas.common import MAX_DB_INT
from tasktracker.schemas.task import MessageResponse, TaskCreate, TaskPage, TaskResponse, TaskUpdate
from tasktracker.schemas.user import Principal
from tasktracker.services.task_query import build_filter_spec
from tasktracker.services.task_service import (
    complete_task,
    create_task,
    delete_task,
    get_task,
    list_tasks,
    list_user_tasks,
    total_pages,
    update_task,
)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def post_task(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    owner_id = task_data.user_id if task_data.user_id is not None else current_user.id
    return create_task(db, task_data, owner_id)


@router.get("", response_model=TaskPage)
def get_tasks(
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
    status_: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    order: Optional[str] = Query(None),
    # page/limit en str : la validation est faite par build_filter_spec
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
):
    spec = build_filter_spec(
        status=status_,
        search=search,
        sort_by=sort_by,
        order=order,
        page=page,
        limit=limit,
    )
    tasks, total = list_tasks(db, spec)
    return {
        "tasks": tasks,
        "page": spec.page,
        "total_pages": total_pages(total, spec.page_size),
        "total_tasks": total,
    }


@router.get("/user/{user_id}/tasks", response_model=List[TaskResponse])
def get_user_tasks(
    user_id: int = Path(ge=1, le=MAX_DB_INT),
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    return list_user_tasks(db, user_id)


@router.get("/{task_id}", response_model=TaskResponse)
def get_one_task(
    task_id: int = Path(ge=1, le=MAX_DB_INT),
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    return get_task(db, task_id)


@router.put("/{task_id}", response_model=TaskResponse)
def put_task(
    task_data: TaskUpdate,
    task_id: int = Path(ge=1, le=MAX_DB_INT),
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    task = get_task(db, task_id)
    return update_task(db, task, task_data)


@router.patch("/{task_id}/complete", response_model=TaskResponse)
def patch_complete(
    task_id: int = Path(ge=1, le=MAX_DB_INT),
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    task = get_task(db, task_id)
    return complete_task(db, task)


@router.delete("/{task_id}", response_model=MessageResponse)
def remove_task(
    task_id: int = Path(ge=1, le=MAX_DB_INT),
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    task = get_task(db, task_id)
    delete_task(db, task, deleted_by=admin.id)
    return {"message": "Task deleted successfully"}
