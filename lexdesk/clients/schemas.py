from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime
from lexdesk.models import CaseStatus
from lexdesk.auth.schemas import UserBasic

class NotificationSettings(BaseModel):
    enable_email_notifications: bool = False
    enable_sms_notifications: bool = False
    email_template: Optional[str] = None
    sms_template: Optional[str] = None
    lawyer_signature: Optional[str] = None

class ClientBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    mobile: Optional[str] = None
    address: Optional[str] = None
    company: Optional[str] = None
    notes: Optional[str] = None
    status: bool = True

class ClientCreate(ClientBase):
    notification_settings: Optional[NotificationSettings] = None

class ClientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    mobile: Optional[str] = None
    address: Optional[str] = None
    company: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[bool] = None

class ClientBrief(BaseModel):
    id: str
    name: str
    email: str

    class Config:
        from_attributes = True

class ClientCaseSummary(BaseModel):
    id: str
    client_no: str
    case_type: str
    status: CaseStatus
    next_date: Optional[datetime] = None

    class Config:
        from_attributes = True

class ClientResponse(ClientBase):
    id: str
    email: str
    cases: List[ClientCaseSummary] = []
    creator: Optional[UserBasic] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ClientPage(BaseModel):
    clients: List[ClientResponse]
    total: int
    page: int
    total_pages: int

class ClientStatusResponse(BaseModel):
    is_approved: bool
    status: str
