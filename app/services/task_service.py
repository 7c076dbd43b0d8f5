# File: app/services/task_service.py

"""
Task CRUD, always scoped to the calling user.

A task owned by someone else is reported exactly like a missing one, so
ids cannot be probed.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.db.session import storage_errors
from app.models.task import Task
from app.models.user import User
from app.schemas.task import TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)

# request field -> column
_UPDATABLE = {
    "title": "title",
    "description": "description",
    "priority": "priority",
    "status": "status",
    "endDate": "end_date",
}


def create_task(db: Session, *, owner: User, payload: TaskCreate) -> Task:
    task = Task(
        title=payload.title,
        description=payload.description,
        priority=payload.priority,
        status=payload.status,
        end_date=payload.endDate,
        user_id=owner.id,
    )
    with storage_errors(db, "creating task"):
        db.add(task)
        db.commit()
        db.refresh(task)

    logger.info("Task id=%s created by user id=%s", task.id, owner.id)
    return task


def list_tasks(db: Session, *, owner: User) -> list[Task]:
    with storage_errors(db, "listing tasks"):
        return list(
            db.scalars(select(Task).where(Task.user_id == owner.id).order_by(Task.id))
        )


def get_task(db: Session, *, owner: User, task_id: int) -> Task:
    task = db.get(Task, task_id)
    if task is None or task.user_id != owner.id:
        raise NotFoundError("Task not found")
    return task


def update_task(db: Session, *, owner: User, task_id: int, patch: TaskUpdate) -> Task:
    task = get_task(db, owner=owner, task_id=task_id)

    changes = patch.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(task, _UPDATABLE[field], value)

    with storage_errors(db, "updating task"):
        db.commit()
        db.refresh(task)

    logger.info("Task id=%s updated (%s)", task.id, ", ".join(sorted(changes)) or "no changes")
    return task


def delete_task(db: Session, *, owner: User, task_id: int) -> None:
    task = get_task(db, owner=owner, task_id=task_id)
    with storage_errors(db, "deleting task"):
        db.delete(task)
        db.commit()
    logger.info("Task id=%s deleted by user id=%s", task_id, owner.id)
