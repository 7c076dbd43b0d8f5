# File: app/schemas/task.py

from datetime import date, datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.models.task import TaskPriority, TaskStatus


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    priority: TaskPriority = TaskPriority.LOW
    status: TaskStatus = TaskStatus.PENDING
    endDate: date


class TaskUpdate(BaseModel):
    """
    Partial update. Unknown keys (including any attempt to set the owner)
    are dropped.
    """

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    endDate: Optional[date] = None


class TaskRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    priority: TaskPriority
    status: TaskStatus
    endDate: date = Field(validation_alias=AliasChoices("endDate", "end_date"))
    userId: int = Field(validation_alias=AliasChoices("userId", "user_id"))
    createdAt: datetime = Field(validation_alias=AliasChoices("createdAt", "created_at"))
