import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import asc
from sqlalchemy.orm import Session

from lexdesk.database import get_db
from lexdesk.models import Task, TaskStatus
from lexdesk.auth.schemas import Identity
from lexdesk.auth.dependencies import get_current_identity
from lexdesk.tasks.schemas import TaskCreate, TaskUpdate, TaskResponse, RelatedTo
from lexdesk.responses import Envelope, envelope
from lexdesk.validators import as_datetime, is_blank, reject_null_fields, to_naive_utc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["Tasks"])


def _get_owned_task(db: Session, task_id: str, identity: Identity, action: str) -> Task:
    """Fetch a task and verify the caller owns it."""
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    if task.user_id != identity.user_id:
        logger.warning("User %s tried to %s task %s", identity.user_id, action, task_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not authorized to {action} this task"
        )
    return task


@router.get("", response_model=Envelope[List[TaskResponse]])
def list_tasks(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """List the caller's own tasks, soonest due first."""
    tasks = db.query(Task).filter(
        Task.user_id == identity.user_id
    ).order_by(asc(Task.due_date)).all()
    return envelope(tasks)


@router.get("/{task_id}", response_model=Envelope[TaskResponse])
def get_task(
    task_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    return envelope(_get_owned_task(db, task_id, identity, "view"))


@router.post("", response_model=Envelope[TaskResponse], status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    if is_blank(task_data.title):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title is required")
    if is_blank(task_data.due_date):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Due date is required")

    due_date = as_datetime(task_data.due_date)
    if due_date is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Due date is in invalid format")

    related_to = task_data.related_to or RelatedTo()
    task = Task(
        title=task_data.title.strip(),
        description=task_data.description or "",
        due_date=due_date,
        start_date=to_naive_utc(task_data.start_date) if task_data.start_date else datetime.utcnow(),
        status=task_data.status,
        priority=task_data.priority,
        completed=task_data.status == TaskStatus.COMPLETED,
        user_id=identity.user_id,
        related_to=related_to.dict(),
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("Task %s created by %s", task.id, identity.user_id)

    return envelope(task, "Task created successfully")


@router.put("/{task_id}", response_model=Envelope[TaskResponse])
def update_task(
    task_id: str,
    task_update: TaskUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    task = _get_owned_task(db, task_id, identity, "update")

    update_data = task_update.dict(exclude_unset=True)
    reject_null_fields(update_data, Task)
    for field in ("due_date", "start_date"):
        if update_data.get(field):
            update_data[field] = to_naive_utc(update_data[field])

    for field, value in update_data.items():
        setattr(task, field, value)

    db.commit()
    db.refresh(task)
    return envelope(task, "Task updated successfully")


@router.delete("/{task_id}", response_model=Envelope[None])
def delete_task(
    task_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    task = _get_owned_task(db, task_id, identity, "delete")
    db.delete(task)
    db.commit()
    return envelope(None, "Task deleted successfully")


@router.patch("/{task_id}/toggle", response_model=Envelope[TaskResponse])
def toggle_task(
    task_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Flip completion; status follows as Completed or In Progress."""
    task = _get_owned_task(db, task_id, identity, "modify")

    task.completed = not task.completed
    task.status = TaskStatus.COMPLETED if task.completed else TaskStatus.IN_PROGRESS
    db.commit()
    db.refresh(task)
    return envelope(task)
