import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from lexdesk.database import get_db
from lexdesk.models import TeamMember, TeamMemberRole, TeamMemberStatus
from lexdesk.auth.schemas import Identity
from lexdesk.auth.dependencies import get_current_identity, require_lawyer_or_admin
from lexdesk.team_members.schemas import TeamMemberResponse
from lexdesk.services.file_storage import save_profile_image, delete_upload
from lexdesk.responses import Envelope, envelope
from lexdesk.validators import as_datetime, ensure_valid_id, is_blank

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/team-members", tags=["Team Members"])

REQUIRED_FIELDS = ["name", "email", "position", "role"]
EDITABLE_FIELDS = ["name", "email", "position", "role", "phone_number", "status"]
EMAIL_PATTERN = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")
DUPLICATE_EMAIL = "Email address is already in use by another team member"

# =====================================================
# REQUEST PARSING
# =====================================================

async def read_member_payload(request: Request) -> Tuple[Dict[str, Any], Optional[UploadFile]]:
    """Read a JSON or multipart body; the optional file part is ``profile_image``."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        data, image = {}, None
        for key, value in form.multi_items():
            if key == "profile_image":
                if isinstance(value, UploadFile) and value.filename:
                    image = value
            else:
                data[key] = value
        return data, image

    try:
        data = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid request body")
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Invalid request body")
    return data, None


def parse_specializations(value: Any) -> Optional[List[str]]:
    """Accept a list, a JSON array string or a comma-separated string.

    Returns None when the value cannot be understood.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    if not isinstance(value, str):
        return None
    if value.strip().startswith("["):
        try:
            parsed = json.loads(value)
        except ValueError:
            return None
        return parse_specializations(parsed) if isinstance(parsed, list) else None
    return [part.strip() for part in value.split(",") if part.strip()]


def clean_member_data(data: Dict[str, Any], creating: bool) -> Dict[str, Any]:
    """Validate incoming team member fields and return column values."""
    verb = "creating" if creating else "updating"

    if creating:
        missing = [field for field in REQUIRED_FIELDS if is_blank(data.get(field))]
    else:
        missing = [field for field in REQUIRED_FIELDS if field in data and is_blank(data[field])]
    if missing:
        raise HTTPException(
            status_code=400,
            detail=f"Error {verb} team member: {', '.join(missing)} {'are' if len(missing) > 1 else 'is'} required"
        )

    values = {field: data[field] for field in EDITABLE_FIELDS if field in data}

    if "role" in values:
        valid_roles = [role.value for role in TeamMemberRole]
        if values["role"] not in valid_roles:
            raise HTTPException(
                status_code=400,
                detail=f"Error {verb} team member: role must be one of {', '.join(valid_roles)}"
            )
        values["role"] = TeamMemberRole(values["role"])

    if is_blank(values.get("status")):
        values.pop("status", None)
    else:
        valid_statuses = [s.value for s in TeamMemberStatus]
        if values["status"] not in valid_statuses:
            raise HTTPException(
                status_code=400,
                detail=f"Error {verb} team member: status must be one of {', '.join(valid_statuses)}"
            )
        values["status"] = TeamMemberStatus(values["status"])

    if "specializations" in data:
        specializations = parse_specializations(data["specializations"])
        if specializations is not None:
            values["specializations"] = specializations
        elif creating:
            values["specializations"] = []
        else:
            logger.warning("Ignoring unparseable specializations: %r", data["specializations"])
    elif creating:
        values["specializations"] = []

    if "email" in values:
        values["email"] = str(values["email"]).strip()
        if not EMAIL_PATTERN.match(values["email"]):
            raise HTTPException(status_code=400, detail="Please enter a valid email address")

    if not is_blank(data.get("date_joined")):
        date_joined = as_datetime(data["date_joined"])
        if date_joined is None:
            raise HTTPException(status_code=400, detail="Invalid date format for date joined")
        values["date_joined"] = date_joined

    return values


def _get_member(db: Session, member_id: str) -> TeamMember:
    member = db.query(TeamMember).filter(TeamMember.id == member_id).first()
    if not member:
        raise HTTPException(status_code=404, detail="Team member not found")
    return member

# =====================================================
# ROUTES
# =====================================================

@router.get("", response_model=Envelope[List[TeamMemberResponse]])
def list_team_members(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    return envelope(db.query(TeamMember).order_by(TeamMember.name).all())


@router.get("/role/{role}", response_model=Envelope[List[TeamMemberResponse]])
def list_team_members_by_role(
    role: TeamMemberRole,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    members = db.query(TeamMember).filter(TeamMember.role == role).order_by(TeamMember.name).all()
    return envelope(members)


@router.get("/{member_id}", response_model=Envelope[TeamMemberResponse])
def get_team_member(
    member_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    return envelope(_get_member(db, member_id))


@router.post("", response_model=Envelope[TeamMemberResponse], status_code=status.HTTP_201_CREATED)
async def create_team_member(
    request: Request,
    identity: Identity = Depends(require_lawyer_or_admin()),
    db: Session = Depends(get_db)
):
    """Create a team member from JSON or multipart form data."""
    data, image = await read_member_payload(request)
    values = clean_member_data(data, creating=True)

    # The image is stored before the insert; a failed insert leaves it behind
    if image is not None:
        values["profile_image_url"] = await save_profile_image(image)

    member = TeamMember(**values)
    db.add(member)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_EMAIL)
    db.refresh(member)
    logger.info("Team member %s created by %s", member.id, identity.user_id)

    return envelope(member, "Team member created successfully")


@router.put("/{member_id}", response_model=Envelope[TeamMemberResponse])
async def update_team_member(
    member_id: str,
    request: Request,
    identity: Identity = Depends(require_lawyer_or_admin()),
    db: Session = Depends(get_db)
):
    ensure_valid_id(member_id, "Team Member")
    data, image = await read_member_payload(request)
    values = clean_member_data(data, creating=False)
    member = _get_member(db, member_id)

    if image is not None:
        new_url = await save_profile_image(image)
        await delete_upload(member.profile_image_url)
        values["profile_image_url"] = new_url

    for field, value in values.items():
        setattr(member, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_EMAIL)
    db.refresh(member)

    return envelope(member, "Team member updated successfully")


@router.delete("/{member_id}", response_model=Envelope[None])
async def delete_team_member(
    member_id: str,
    identity: Identity = Depends(require_lawyer_or_admin()),
    db: Session = Depends(get_db)
):
    member = _get_member(db, member_id)

    await delete_upload(member.profile_image_url)
    db.delete(member)
    db.commit()
    logger.info("Team member %s deleted by %s", member_id, identity.user_id)

    return envelope(None, "Team member deleted successfully")
