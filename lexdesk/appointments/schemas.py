from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from lexdesk.models import AppointmentStatus
from lexdesk.clients.schemas import ClientBrief

class AppointmentBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    client_id: str
    date_time: datetime
    duration: int = Field(60, gt=0)
    location: Optional[str] = ""
    description: Optional[str] = ""
    status: AppointmentStatus = AppointmentStatus.SCHEDULED

class AppointmentCreate(AppointmentBase):
    pass

class AppointmentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    client_id: Optional[str] = None
    date_time: Optional[datetime] = None
    duration: Optional[int] = Field(None, gt=0)
    location: Optional[str] = None
    description: Optional[str] = None
    status: Optional[AppointmentStatus] = None

class AppointmentStatusUpdate(BaseModel):
    status: Optional[AppointmentStatus] = None

class AppointmentResponse(AppointmentBase):
    id: str
    # Always populated alongside client_id
    client: ClientBrief
    created_by: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
