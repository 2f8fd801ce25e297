from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from lexdesk.database import get_db
from lexdesk.models import CaseStatus
from lexdesk.auth.schemas import Identity
from lexdesk.auth.dependencies import get_current_identity, require_lawyer_or_admin
from lexdesk.cases.schemas import (
    CaseCreate, CaseUpdate, CaseDocumentCreate, CaseResponse, CasePage
)
from lexdesk.services.case_service import CaseService
from lexdesk.responses import Envelope, envelope

router = APIRouter(prefix="/cases", tags=["Cases"])

# =====================================================
# CASE CRUD OPERATIONS
# =====================================================

@router.get("", response_model=Envelope[CasePage])
def list_cases(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[CaseStatus] = None,
    is_important: Optional[bool] = None,
    is_archived: Optional[bool] = None,
    search: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """List cases with filtering and pagination."""
    return envelope(CaseService(db).list_cases(
        page=page,
        limit=limit,
        status=status,
        is_important=is_important,
        is_archived=is_archived,
        search=search,
        start_date=start_date,
        end_date=end_date
    ))


@router.get("/{case_id}", response_model=Envelope[CaseResponse])
def get_case(
    case_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Get a specific case with its documents, timeline and notes."""
    return envelope(CaseService(db).get_case_or_404(case_id))


@router.post("", response_model=Envelope[CaseResponse], status_code=status.HTTP_201_CREATED)
def create_case(
    case_data: CaseCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    case = CaseService(db).create_case(case_data, identity)
    return envelope(case, "Case created successfully")


@router.put("/{case_id}", response_model=Envelope[CaseResponse])
def update_case(
    case_id: str,
    case_update: CaseUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    case = CaseService(db).update_case(case_id, case_update, identity)
    return envelope(case, "Case updated successfully")


@router.post("/{case_id}/documents", response_model=Envelope[CaseResponse])
def add_case_document(
    case_id: str,
    document: CaseDocumentCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    case = CaseService(db).add_document(case_id, document, identity)
    return envelope(case, "Document added successfully")


@router.delete("/{case_id}", response_model=Envelope[None])
def archive_case(
    case_id: str,
    identity: Identity = Depends(require_lawyer_or_admin()),
    db: Session = Depends(get_db)
):
    """Archiving is the delete; the row stays."""
    CaseService(db).archive_case(case_id, identity)
    return envelope(None, "Case archived successfully")
