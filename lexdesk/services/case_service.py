import logging
import math
from datetime import datetime
from typing import Optional, Dict, Any

from sqlalchemy import or_, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from lexdesk.models import Case, CaseDocument, CaseTimelineEntry, CaseNote, Client, User, CaseStatus
from lexdesk.cases.schemas import CaseCreate, CaseUpdate, CaseDocumentCreate
from lexdesk.auth.schemas import Identity
from lexdesk.responses import APIError
from lexdesk.validators import is_blank, null_field_errors, to_naive_utc

logger = logging.getLogger(__name__)

REQUIRED_CASE_FIELDS = {
    "client_name": "Client name is required",
    "client_no": "Client number is required",
    "case_type": "Case type is required",
    "court": "Court is required",
    "petitioner": "Petitioner is required",
    "respondent": "Respondent is required",
}


def validate_case_data(case_data: CaseCreate) -> Optional[Dict[str, str]]:
    """Return a field-keyed map of the blank required fields, or None."""
    errors = {
        field: message
        for field, message in REQUIRED_CASE_FIELDS.items()
        if is_blank(getattr(case_data, field))
    }
    return errors or None


class CaseService:
    def __init__(self, db: Session):
        self.db = db

    def get_case_with_relationships(self, case_id: str) -> Optional[Case]:
        """Get case with people, documents, timeline and notes loaded."""
        return self.db.query(Case).options(
            joinedload(Case.assignee),
            joinedload(Case.creator),
            joinedload(Case.documents).joinedload(CaseDocument.uploader),
            joinedload(Case.timeline).joinedload(CaseTimelineEntry.author),
            joinedload(Case.notes).joinedload(CaseNote.author)
        ).filter(Case.id == case_id).first()

    def get_case_or_404(self, case_id: str) -> Case:
        case = self.get_case_with_relationships(case_id)
        if not case:
            raise APIError(404, "Case not found")
        return case

    def list_cases(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[CaseStatus] = None,
        is_important: Optional[bool] = None,
        is_archived: Optional[bool] = None,
        search: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """List cases with filtering and pagination, newest first."""
        query = self.db.query(Case)

        if status:
            query = query.filter(Case.status == status)
        if is_important is not None:
            query = query.filter(Case.is_important == is_important)
        if is_archived is not None:
            query = query.filter(Case.is_archived == is_archived)
        if start_date:
            query = query.filter(Case.next_date >= to_naive_utc(start_date))
        if end_date:
            query = query.filter(Case.next_date <= to_naive_utc(end_date))
        if search:
            query = query.filter(or_(
                Case.client_name.ilike(f"%{search}%"),
                Case.client_no.ilike(f"%{search}%"),
                Case.case_type.ilike(f"%{search}%")
            ))

        total = query.count()
        cases = query.options(
            joinedload(Case.assignee),
            joinedload(Case.creator)
        ).order_by(desc(Case.created_at)).offset((page - 1) * limit).limit(limit).all()

        return {
            "cases": cases,
            "total": total,
            "page": page,
            "total_pages": math.ceil(total / limit),
        }

    def _check_references(self, client_id: Optional[str], assigned_to: Optional[str]):
        if client_id and not self.db.query(Client).filter(Client.id == client_id).first():
            raise APIError(404, "Client not found")
        if assigned_to and not self.db.query(User).filter(User.id == assigned_to).first():
            raise APIError(400, "Assigned user not found")

    def create_case(self, case_data: CaseCreate, identity: Identity) -> Case:
        """Create a case and its "Case created" timeline entry in one transaction."""
        errors = validate_case_data(case_data)
        if errors:
            raise APIError(422, "Validation Error", errors)

        self._check_references(case_data.client_id, case_data.assigned_to)

        values = case_data.dict()
        for field in REQUIRED_CASE_FIELDS:
            values[field] = values[field].strip()
        if values["next_date"]:
            values["next_date"] = to_naive_utc(values["next_date"])
        values["assigned_to"] = case_data.assigned_to or identity.user_id

        db_case = Case(**values, created_by=identity.user_id)
        db_case.timeline.append(CaseTimelineEntry(
            date=datetime.utcnow(),
            description="Case created",
            added_by=identity.user_id
        ))

        self.db.add(db_case)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise APIError(409, "A case with this client number already exists")
        logger.info("Case %s created by %s", db_case.id, identity.user_id)

        return self.get_case_with_relationships(db_case.id)

    def update_case(self, case_id: str, case_update: CaseUpdate, identity: Identity) -> Case:
        """Merge top-level fields; append any timeline entry or note."""
        case = self.get_case_or_404(case_id)

        update_data = case_update.dict(exclude_unset=True, exclude={"timeline", "notes"})
        errors = null_field_errors(update_data, Case)
        for field, message in REQUIRED_CASE_FIELDS.items():
            if field in update_data and is_blank(update_data[field]):
                errors[field] = message
            elif field in update_data:
                update_data[field] = update_data[field].strip()
        if errors:
            raise APIError(422, "Validation Error", errors)

        self._check_references(update_data.get("client_id"), update_data.get("assigned_to"))
        if update_data.get("next_date"):
            update_data["next_date"] = to_naive_utc(update_data["next_date"])

        for field, value in update_data.items():
            setattr(case, field, value)

        if case_update.timeline:
            entry_date = case_update.timeline.date
            case.timeline.append(CaseTimelineEntry(
                date=to_naive_utc(entry_date) if entry_date else datetime.utcnow(),
                description=case_update.timeline.description,
                added_by=identity.user_id
            ))
        if case_update.notes:
            case.notes.append(CaseNote(
                content=case_update.notes.content,
                created_at=datetime.utcnow(),
                created_by=identity.user_id
            ))

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise APIError(409, "A case with this client number already exists")

        self.db.expire_all()
        return self.get_case_with_relationships(case_id)

    def add_document(self, case_id: str, document: CaseDocumentCreate, identity: Identity) -> Case:
        case = self.get_case_or_404(case_id)

        case.documents.append(CaseDocument(
            title=document.title,
            file_url=document.file_url,
            uploaded_at=datetime.utcnow(),
            uploaded_by=identity.user_id
        ))
        self.db.commit()

        self.db.expire_all()
        return self.get_case_with_relationships(case_id)

    def archive_case(self, case_id: str, identity: Identity) -> None:
        case = self.db.query(Case).filter(Case.id == case_id).first()
        if not case:
            raise APIError(404, "Case not found")

        case.is_archived = True
        self.db.commit()
        logger.info("Case %s archived by %s", case_id, identity.user_id)
