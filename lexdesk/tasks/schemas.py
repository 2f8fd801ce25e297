from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from lexdesk.models import TaskStatus, TaskPriority

class RelatedTo(BaseModel):
    name: str = ""
    case_number: str = ""

class TaskCreate(BaseModel):
    # title and due_date are checked by the route for their own 400 messages
    title: Optional[str] = None
    due_date: Optional[str] = None
    description: Optional[str] = ""
    start_date: Optional[datetime] = None
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    related_to: Optional[RelatedTo] = None

class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    start_date: Optional[datetime] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    completed: Optional[bool] = None
    related_to: Optional[RelatedTo] = None

class TaskResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = ""
    due_date: datetime
    start_date: Optional[datetime] = None
    status: TaskStatus
    priority: TaskPriority
    completed: bool
    user_id: str
    related_to: Optional[RelatedTo] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
