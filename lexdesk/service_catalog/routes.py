import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lexdesk.database import get_db
from lexdesk.models import Service, InvoiceItem
from lexdesk.auth.schemas import Identity
from lexdesk.auth.dependencies import get_current_identity, require_lawyer_or_admin
from lexdesk.service_catalog.schemas import ServiceCreate, ServiceUpdate, ServiceResponse
from lexdesk.responses import Envelope, envelope
from lexdesk.validators import reject_null_fields

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/services", tags=["Services"])

DUPLICATE_NAME = "A service with this name already exists"


def _get_service(db: Session, service_id: str) -> Service:
    service = db.query(Service).filter(Service.id == service_id).first()
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


@router.get("", response_model=Envelope[List[ServiceResponse]])
def list_services(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    return envelope(db.query(Service).order_by(Service.name).all())


@router.get("/{service_id}", response_model=Envelope[ServiceResponse])
def get_service(
    service_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    return envelope(_get_service(db, service_id))


@router.post("", response_model=Envelope[ServiceResponse], status_code=status.HTTP_201_CREATED)
def create_service(
    service_data: ServiceCreate,
    identity: Identity = Depends(require_lawyer_or_admin()),
    db: Session = Depends(get_db)
):
    service = Service(**service_data.dict())
    db.add(service)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_NAME)
    db.refresh(service)
    return envelope(service, "Service created successfully")


@router.put("/{service_id}", response_model=Envelope[ServiceResponse])
def update_service(
    service_id: str,
    service_update: ServiceUpdate,
    identity: Identity = Depends(require_lawyer_or_admin()),
    db: Session = Depends(get_db)
):
    service = _get_service(db, service_id)

    update_data = service_update.dict(exclude_unset=True)
    reject_null_fields(update_data, Service)
    for field, value in update_data.items():
        setattr(service, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_NAME)
    db.refresh(service)
    return envelope(service, "Service updated successfully")


@router.delete("/{service_id}", response_model=Envelope[None])
def delete_service(
    service_id: str,
    identity: Identity = Depends(require_lawyer_or_admin()),
    db: Session = Depends(get_db)
):
    service = _get_service(db, service_id)

    # Invoice lines keep their description, rate and amount
    db.query(InvoiceItem).filter(InvoiceItem.service_id == service_id).update(
        {InvoiceItem.service_id: None}, synchronize_session=False
    )
    db.delete(service)
    db.commit()
    logger.info("Service %s deleted by %s", service_id, identity.user_id)

    return envelope(None, "Service deleted successfully")
