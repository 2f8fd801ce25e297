from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from lexdesk.models import UserRole, RecipientKind

class RegisterRequest(BaseModel):
    # Presence is checked by the route so missing fields answer 400
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[UserRole] = None
    phone: Optional[str] = None

class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

class Identity(BaseModel):
    """Decoded bearer token attached to every authenticated request."""
    user_id: str
    role: Optional[UserRole] = None
    client_id: Optional[str] = None

    @property
    def recipient_kind(self) -> RecipientKind:
        return RecipientKind.CLIENT if self.role == UserRole.CLIENT else RecipientKind.USER

    @property
    def recipient_id(self) -> str:
        # Client accounts receive notifications addressed to their Client record
        if self.role == UserRole.CLIENT and self.client_id:
            return self.client_id
        return self.user_id

class AuthUser(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole
    client_id: Optional[str] = None

    class Config:
        from_attributes = True

class AuthResponse(BaseModel):
    token: str
    user: AuthUser

class UserResponse(AuthUser):
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class VerifyResponse(BaseModel):
    valid: bool
    user: Identity

class UserBasic(BaseModel):
    id: str
    name: str
    email: str

    class Config:
        from_attributes = True
