import logging
from typing import List

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from lexdesk.database import get_db
from lexdesk.models import Invoice, InvoiceItem, InvoiceClientStatus, Client
from lexdesk.auth.schemas import Identity
from lexdesk.auth.dependencies import get_current_identity, require_lawyer_or_admin
from lexdesk.invoices.schemas import InvoiceUpdate, InvoiceStatusUpdate, InvoiceResponse
from lexdesk.services.invoice_service import (
    validate_invoice_payload, next_invoice_number, build_items, parse_payment_amount, record_payment
)
from lexdesk.responses import Envelope, envelope
from lexdesk.validators import reject_null_fields, to_naive_utc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["Invoices"])


def _invoice_query(db: Session):
    return db.query(Invoice).options(
        joinedload(Invoice.client),
        joinedload(Invoice.items).joinedload(InvoiceItem.service),
        joinedload(Invoice.creator)
    )


def _get_invoice(db: Session, invoice_id: str) -> Invoice:
    invoice = _invoice_query(db).filter(Invoice.id == invoice_id).first()
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice


def _ensure_client(db: Session, client_id: str):
    if not db.query(Client).filter(Client.id == client_id).first():
        raise HTTPException(status_code=404, detail="Client not found")


# =====================================================
# QUERIES
# =====================================================

@router.get("", response_model=Envelope[List[InvoiceResponse]])
def list_invoices(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    invoices = _invoice_query(db).order_by(desc(Invoice.created_at)).all()
    return envelope(invoices)


@router.get("/client/{client_id}", response_model=Envelope[List[InvoiceResponse]])
def list_client_invoices(
    client_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    invoices = _invoice_query(db).filter(
        Invoice.client_id == client_id
    ).order_by(desc(Invoice.issue_date)).all()
    return envelope(invoices)


@router.get("/{invoice_id}", response_model=Envelope[InvoiceResponse])
def get_invoice(
    invoice_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    return envelope(_get_invoice(db, invoice_id))


# =====================================================
# MUTATIONS
# =====================================================

@router.post("", response_model=Envelope[InvoiceResponse], status_code=status.HTTP_201_CREATED)
def create_invoice(
    payload: dict = Body(...),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Create an invoice numbered INV-NNNNNN."""
    values = validate_invoice_payload(payload)
    _ensure_client(db, values["client_id"])
    items = build_items(db, values.pop("items"))

    invoice = Invoice(
        invoice_no=next_invoice_number(db),
        items=items,
        created_by=identity.user_id,
        **values
    )
    db.add(invoice)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Invoice number %s already taken", invoice.invoice_no)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Invoice number already taken, please retry"
        )
    logger.info("Invoice %s created by %s", invoice.invoice_no, identity.user_id)

    return envelope(_get_invoice(db, invoice.id), "Invoice created successfully")


@router.put("/{invoice_id}", response_model=Envelope[InvoiceResponse])
def update_invoice(
    invoice_id: str,
    invoice_update: InvoiceUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Merge the supplied fields; a supplied item list replaces the old one."""
    invoice = _get_invoice(db, invoice_id)

    update_data = invoice_update.dict(exclude_unset=True, exclude={"items"})
    reject_null_fields(update_data, Invoice)
    if update_data.get("client_id"):
        _ensure_client(db, update_data["client_id"])
    for field in ("issue_date", "due_date"):
        if update_data.get(field):
            update_data[field] = to_naive_utc(update_data[field])

    for field, value in update_data.items():
        setattr(invoice, field, value)

    if invoice_update.items is not None:
        invoice.items = build_items(db, [item.dict() for item in invoice_update.items])

    db.commit()
    db.expire_all()
    return envelope(_get_invoice(db, invoice_id), "Invoice updated successfully")


@router.delete("/{invoice_id}", response_model=Envelope[None])
def delete_invoice(
    invoice_id: str,
    identity: Identity = Depends(require_lawyer_or_admin()),
    db: Session = Depends(get_db)
):
    invoice = _get_invoice(db, invoice_id)
    db.delete(invoice)
    db.commit()
    logger.info("Invoice %s deleted by %s", invoice.invoice_no, identity.user_id)
    return envelope(None, "Invoice deleted successfully")


@router.patch("/{invoice_id}/status", response_model=Envelope[InvoiceResponse])
def update_invoice_status(
    invoice_id: str,
    status_update: InvoiceStatusUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Set any status, including Overdue."""
    if status_update.status is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Status is required")

    invoice = _get_invoice(db, invoice_id)
    invoice.status = status_update.status
    db.commit()
    db.refresh(invoice)
    return envelope(invoice, "Invoice status updated successfully")


@router.patch("/{invoice_id}/mark-viewed", response_model=Envelope[InvoiceResponse])
def mark_invoice_viewed(
    invoice_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    invoice = _get_invoice(db, invoice_id)
    invoice.client_status = InvoiceClientStatus.VIEWED
    db.commit()
    db.refresh(invoice)
    return envelope(invoice, "Invoice marked as viewed")


@router.post("/{invoice_id}/payments", response_model=Envelope[InvoiceResponse])
def record_invoice_payment(
    invoice_id: str,
    payload: dict = Body(...),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Add a payment to the running paid total and re-derive the status."""
    amount = parse_payment_amount(payload.get("amount"))
    invoice = _get_invoice(db, invoice_id)
    record_payment(invoice, amount)
    db.commit()
    db.refresh(invoice)
    return envelope(invoice, "Payment recorded successfully")
