from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from lexdesk.models import InvoiceStatus, InvoiceClientStatus, ServiceCategory
from lexdesk.auth.schemas import UserBasic
from lexdesk.clients.schemas import ClientBrief

class InvoiceItemIn(BaseModel):
    service_id: Optional[str] = None
    description: str = Field(..., min_length=1, max_length=255)
    quantity: float = Field(..., gt=0, allow_inf_nan=False)
    rate: float = Field(..., ge=0, allow_inf_nan=False)
    amount: float = Field(..., ge=0, allow_inf_nan=False)

class InvoiceUpdate(BaseModel):
    client_id: Optional[str] = None
    client_name: Optional[str] = Field(None, min_length=1)
    issue_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    items: Optional[List[InvoiceItemIn]] = Field(None, min_length=1)
    subtotal: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    tax_rate: Optional[float] = Field(None, ge=0, le=100, allow_inf_nan=False)
    tax_amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    total: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    paid: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    status: Optional[InvoiceStatus] = None
    client_status: Optional[InvoiceClientStatus] = None
    notes: Optional[str] = None

class InvoiceStatusUpdate(BaseModel):
    status: Optional[InvoiceStatus] = None

class ServiceBrief(BaseModel):
    id: str
    name: str
    amount: float
    category: ServiceCategory

    class Config:
        from_attributes = True

class InvoiceItemResponse(BaseModel):
    id: str
    service_id: Optional[str] = None
    service: Optional[ServiceBrief] = None
    description: str
    quantity: float
    rate: float
    amount: float

    class Config:
        from_attributes = True

class InvoiceResponse(BaseModel):
    id: str
    invoice_no: str
    client_id: str
    client_name: str
    client: Optional[ClientBrief] = None
    issue_date: datetime
    due_date: datetime
    items: List[InvoiceItemResponse] = []
    subtotal: float
    tax_rate: float = 0
    tax_amount: float = 0
    total: float
    paid: float
    balance_due: float
    status: InvoiceStatus
    client_status: InvoiceClientStatus
    notes: Optional[str] = None
    creator: Optional[UserBasic] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
