from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from lexdesk.models import ServiceCategory

class ServiceBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    category: ServiceCategory

class ServiceCreate(ServiceBase):
    pass

class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    category: Optional[ServiceCategory] = None

class ServiceResponse(ServiceBase):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
