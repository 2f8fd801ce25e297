import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import desc, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from lexdesk.database import get_db
from lexdesk.models import Client, Case, Invoice, Appointment, User
from lexdesk.auth.schemas import Identity
from lexdesk.auth.dependencies import get_current_identity, require_lawyer_or_admin
from lexdesk.clients.schemas import (
    ClientCreate, ClientUpdate, ClientResponse, ClientPage, ClientStatusResponse
)
from lexdesk.services.notification_service import send_client_welcome
from lexdesk.responses import Envelope, envelope
from lexdesk.validators import ensure_valid_id, reject_null_fields

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["Clients"])

# Checked in this order before a hard delete
DEPENDENT_RECORDS = (
    (Case, "cases", "Please remove or reassign all cases first."),
    (Invoice, "invoices", "Please remove all invoices first."),
    (Appointment, "appointments", "Please remove all appointments first."),
)


def _load_client(db: Session, client_id: str) -> Client:
    ensure_valid_id(client_id, "Client")
    client = db.query(Client).options(
        joinedload(Client.cases),
        joinedload(Client.creator)
    ).filter(Client.id == client_id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.get("", response_model=Envelope[ClientPage])
def list_clients(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[bool] = None,
    search: Optional[str] = None,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """List clients with filtering and pagination."""
    query = db.query(Client)

    if status is not None:
        query = query.filter(Client.status == status)
    if search:
        query = query.filter(or_(
            Client.name.ilike(f"%{search}%"),
            Client.email.ilike(f"%{search}%"),
            Client.mobile.ilike(f"%{search}%")
        ))

    total = query.count()
    clients = query.options(
        joinedload(Client.cases),
        joinedload(Client.creator)
    ).order_by(desc(Client.created_at)).offset((page - 1) * limit).limit(limit).all()

    return envelope({
        "clients": clients,
        "total": total,
        "page": page,
        "total_pages": math.ceil(total / limit),
    })


@router.get("/status/{client_id}", response_model=Envelope[ClientStatusResponse])
def get_client_status(
    client_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    ensure_valid_id(client_id, "Client")
    client = db.query(Client).filter(Client.id == client_id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")

    return envelope({
        "is_approved": client.status,
        "status": "active" if client.status else "inactive",
    })


@router.get("/{client_id}", response_model=Envelope[ClientResponse])
def get_client(
    client_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    return envelope(_load_client(db, client_id))


@router.post("", response_model=Envelope[ClientResponse], status_code=status.HTTP_201_CREATED)
def create_client(
    client_data: ClientCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Create a client and optionally send the welcome notification."""
    client = Client(
        **client_data.dict(exclude={"notification_settings"}),
        created_by=identity.user_id
    )
    db.add(client)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already exists")
    db.refresh(client)
    logger.info("Client %s created by %s", client.id, identity.user_id)

    if client_data.notification_settings:
        lawyer = db.query(User).filter(User.id == identity.user_id).first()
        lawyer_details = {
            "name": lawyer.name if lawyer else None,
            "email": lawyer.email if lawyer else None,
            "phone": lawyer.phone if lawyer else None,
        }
        send_client_welcome(db, client, lawyer_details, client_data.notification_settings)

    return envelope(_load_client(db, client.id), "Client created successfully")


@router.put("/{client_id}", response_model=Envelope[ClientResponse])
def update_client(
    client_id: str,
    client_update: ClientUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    client = _load_client(db, client_id)

    update_data = client_update.dict(exclude_unset=True)
    reject_null_fields(update_data, Client)
    for field, value in update_data.items():
        setattr(client, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already exists")

    return envelope(_load_client(db, client_id), "Client updated successfully")


@router.delete("/{client_id}", response_model=Envelope[None])
def delete_client(
    client_id: str,
    soft: bool = False,
    identity: Identity = Depends(require_lawyer_or_admin()),
    db: Session = Depends(get_db)
):
    """Deactivate (``?soft=true``) or permanently delete a client."""
    client = _load_client(db, client_id)

    if soft:
        client.status = False
        db.commit()
        return envelope(None, "Client deactivated successfully")

    for model, label, hint in DEPENDENT_RECORDS:
        count = db.query(model).filter(model.client_id == client_id).count()
        if count > 0:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Cannot delete client with {count} related {label}. {hint}"
            )

    # Users linked to this client lose the link rather than dangling
    db.query(User).filter(User.client_id == client_id).update(
        {User.client_id: None}, synchronize_session=False
    )
    db.delete(client)
    db.commit()
    logger.info("Client %s deleted by %s", client_id, identity.user_id)

    return envelope(None, "Client deleted successfully")
