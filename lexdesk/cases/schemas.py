from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from lexdesk.models import CaseStatus
from lexdesk.auth.schemas import UserBasic

# Request schemas
class CaseCreate(BaseModel):
    # Required text fields are checked by the service so that every blank
    # field is reported at once
    client_name: Optional[str] = None
    client_no: Optional[str] = None
    case_type: Optional[str] = None
    court: Optional[str] = None
    petitioner: Optional[str] = None
    respondent: Optional[str] = None

    court_no: Optional[str] = None
    magistrate: Optional[str] = None
    next_date: Optional[datetime] = None
    status: CaseStatus = CaseStatus.PENDING
    is_important: bool = False
    assigned_to: Optional[str] = None
    client_id: Optional[str] = None

class TimelineEntryCreate(BaseModel):
    description: str = Field(..., min_length=1)
    date: Optional[datetime] = None

class CaseNoteCreate(BaseModel):
    content: str = Field(..., min_length=1)

class CaseUpdate(BaseModel):
    # Supplied required fields are re-checked for blanks by the service
    client_name: Optional[str] = None
    client_no: Optional[str] = None
    case_type: Optional[str] = None
    court: Optional[str] = None
    petitioner: Optional[str] = None
    respondent: Optional[str] = None
    court_no: Optional[str] = None
    magistrate: Optional[str] = None
    next_date: Optional[datetime] = None
    status: Optional[CaseStatus] = None
    is_important: Optional[bool] = None
    is_archived: Optional[bool] = None
    assigned_to: Optional[str] = None
    client_id: Optional[str] = None

    # Appended rather than merged
    timeline: Optional[TimelineEntryCreate] = None
    notes: Optional[CaseNoteCreate] = None

class CaseDocumentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    file_url: str = Field(..., min_length=1, max_length=500)

# Response schemas
class CaseDocumentResponse(BaseModel):
    id: str
    title: str
    file_url: str
    uploaded_at: Optional[datetime] = None
    uploader: Optional[UserBasic] = None

    class Config:
        from_attributes = True

class TimelineEntryResponse(BaseModel):
    id: str
    date: datetime
    description: str
    author: Optional[UserBasic] = None

    class Config:
        from_attributes = True

class CaseNoteResponse(BaseModel):
    id: str
    content: str
    created_at: Optional[datetime] = None
    author: Optional[UserBasic] = None

    class Config:
        from_attributes = True

class CaseListResponse(BaseModel):
    id: str
    client_name: str
    client_no: str
    client_id: Optional[str] = None
    case_type: str
    court: str
    court_no: Optional[str] = None
    magistrate: Optional[str] = None
    petitioner: str
    respondent: str
    next_date: Optional[datetime] = None
    status: CaseStatus
    is_important: bool
    is_archived: bool
    assignee: Optional[UserBasic] = None
    creator: Optional[UserBasic] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class CaseResponse(CaseListResponse):
    documents: List[CaseDocumentResponse] = []
    timeline: List[TimelineEntryResponse] = []
    notes: List[CaseNoteResponse] = []

class CasePage(BaseModel):
    cases: List[CaseListResponse]
    total: int
    page: int
    total_pages: int
