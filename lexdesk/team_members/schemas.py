from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from lexdesk.models import TeamMemberRole, TeamMemberStatus

# Request bodies arrive as JSON or multipart form data and are validated in
# the router, so only the response shape is declared here.

class TeamMemberResponse(BaseModel):
    id: str
    name: str
    email: str
    position: str
    role: TeamMemberRole
    phone_number: Optional[str] = None
    date_joined: Optional[datetime] = None
    profile_image_url: Optional[str] = None
    status: TeamMemberStatus
    specializations: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
