from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Union, Annotated
from datetime import datetime
from lexdesk.models import NotificationType, RecipientKind

# A notification may point at exactly one Case, Appointment or Task
class CaseReference(BaseModel):
    kind: Literal["Case"]
    id: str

class AppointmentReference(BaseModel):
    kind: Literal["Appointment"]
    id: str

class TaskReference(BaseModel):
    kind: Literal["Task"]
    id: str

NotificationReference = Annotated[
    Union[CaseReference, AppointmentReference, TaskReference],
    Field(discriminator="kind"),
]

class NotificationCreate(BaseModel):
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    type: NotificationType
    reference: Optional[NotificationReference] = None

class NotificationResponse(BaseModel):
    id: str
    recipient_id: str
    recipient_kind: RecipientKind
    title: str
    message: str
    type: NotificationType
    is_read: bool
    reference: Optional[NotificationReference] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class NotificationPage(BaseModel):
    notifications: List[NotificationResponse]
    total: int
    unread_count: int
    current_page: int
    total_pages: int

class BulkUpdateResult(BaseModel):
    modified_count: int

class BulkDeleteResult(BaseModel):
    deleted_count: int
