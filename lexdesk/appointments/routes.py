import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import asc
from sqlalchemy.orm import Session, joinedload

from lexdesk.database import get_db
from lexdesk.models import Appointment, Client
from lexdesk.auth.schemas import Identity
from lexdesk.auth.dependencies import get_current_identity
from lexdesk.appointments.schemas import (
    AppointmentCreate, AppointmentUpdate, AppointmentStatusUpdate, AppointmentResponse
)
from lexdesk.responses import Envelope, envelope
from lexdesk.validators import reject_null_fields, to_naive_utc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def _appointment_query(db: Session):
    return db.query(Appointment).options(joinedload(Appointment.client))


def _get_appointment(db: Session, appointment_id: str) -> Appointment:
    appointment = _appointment_query(db).filter(Appointment.id == appointment_id).first()
    if not appointment:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return appointment


def _ensure_client(db: Session, client_id: str):
    if not db.query(Client).filter(Client.id == client_id).first():
        raise HTTPException(status_code=404, detail="Client not found")


@router.get("", response_model=Envelope[List[AppointmentResponse]])
def list_appointments(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    appointments = _appointment_query(db).order_by(asc(Appointment.date_time)).all()
    return envelope(appointments)


@router.get("/client/{client_id}", response_model=Envelope[List[AppointmentResponse]])
def list_client_appointments(
    client_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    appointments = _appointment_query(db).filter(
        Appointment.client_id == client_id
    ).order_by(asc(Appointment.date_time)).all()
    return envelope(appointments)


@router.get("/{appointment_id}", response_model=Envelope[AppointmentResponse])
def get_appointment(
    appointment_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    return envelope(_get_appointment(db, appointment_id))


@router.post("", response_model=Envelope[AppointmentResponse], status_code=status.HTTP_201_CREATED)
def create_appointment(
    appointment_data: AppointmentCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    _ensure_client(db, appointment_data.client_id)

    values = appointment_data.dict()
    values["date_time"] = to_naive_utc(values["date_time"])
    appointment = Appointment(**values, created_by=identity.user_id)
    db.add(appointment)
    db.commit()
    logger.info("Appointment %s created by %s", appointment.id, identity.user_id)

    return envelope(_get_appointment(db, appointment.id), "Appointment created successfully")


@router.put("/{appointment_id}", response_model=Envelope[AppointmentResponse])
def update_appointment(
    appointment_id: str,
    appointment_update: AppointmentUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    appointment = _get_appointment(db, appointment_id)

    update_data = appointment_update.dict(exclude_unset=True)
    reject_null_fields(update_data, Appointment)
    if update_data.get("client_id"):
        _ensure_client(db, update_data["client_id"])
    if update_data.get("date_time"):
        update_data["date_time"] = to_naive_utc(update_data["date_time"])

    for field, value in update_data.items():
        setattr(appointment, field, value)

    db.commit()
    db.expire_all()
    return envelope(_get_appointment(db, appointment_id), "Appointment updated successfully")


@router.delete("/{appointment_id}", response_model=Envelope[None])
def delete_appointment(
    appointment_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    appointment = _get_appointment(db, appointment_id)
    db.delete(appointment)
    db.commit()
    return envelope(None, "Appointment deleted successfully")


@router.patch("/{appointment_id}/status", response_model=Envelope[AppointmentResponse])
def update_appointment_status(
    appointment_id: str,
    status_update: AppointmentStatusUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    if status_update.status is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Status is required")

    appointment = _get_appointment(db, appointment_id)
    appointment.status = status_update.status
    db.commit()
    db.expire_all()
    return envelope(_get_appointment(db, appointment_id), "Appointment status updated successfully")
