# app/api/v1/routes_task.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.models.user import User
from app.schemas.task import TaskCreate, TaskRead, TaskUpdate
from app.services import task_service

router = APIRouter(tags=["tasks"])


def _task(task) -> dict:
    return TaskRead.model_validate(task).model_dump(mode="json")


@router.post("/create-task", status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = task_service.create_task(db, owner=current_user, payload=payload)
    return {"success": True, "message": "Task created successfully", "task": _task(task)}


@router.get("/my-tasks")
def my_tasks(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    tasks = task_service.list_tasks(db, owner=current_user)
    return {
        "success": True,
        "message": "Tasks retrieved successfully",
        "tasks": [_task(t) for t in tasks],
    }


@router.get("/get-task/{task_id}")
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = task_service.get_task(db, owner=current_user, task_id=task_id)
    return {"success": True, "message": "Task retrieved successfully", "task": _task(task)}


@router.put("/update-task/{task_id}")
def update_task(
    task_id: int,
    patch: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = task_service.update_task(db, owner=current_user, task_id=task_id, patch=patch)
    return {"success": True, "message": "Task updated successfully", "task": _task(task)}


@router.delete("/delete-task/{task_id}")
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task_service.delete_task(db, owner=current_user, task_id=task_id)
    return {"success": True, "message": "Task deleted successfully"}
