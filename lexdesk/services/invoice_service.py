"""Invoice numbering, payload validation and payment status derivation.

The validation here runs over the raw JSON body so that each problem is
reported with its own 400 message, in a fixed order, before anything touches
the database.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from lexdesk.models import Invoice, InvoiceItem, InvoiceStatus, Service
from lexdesk.responses import APIError
from lexdesk.validators import as_datetime, as_number, is_blank

logger = logging.getLogger(__name__)

INVOICE_PREFIX = "INV-"


def next_invoice_number(db: Session) -> str:
    # Count-based numbering is not atomic; a concurrent insert can take the
    # same number and the unique constraint rejects the loser.
    count = db.query(Invoice).count()
    return f"{INVOICE_PREFIX}{count + 1:06d}"


def derive_payment_status(paid: float, total: float) -> InvoiceStatus:
    """Map a running paid total onto Paid, Partially Paid or Unpaid.

    Overdue is never derived; it is only set explicitly.
    """
    if paid >= total:
        return InvoiceStatus.PAID
    if paid > 0:
        return InvoiceStatus.PARTIALLY_PAID
    return InvoiceStatus.UNPAID


def parse_payment_amount(amount: Any) -> float:
    value = as_number(amount)
    if value is None or value <= 0:
        raise APIError(400, "Valid payment amount is required")
    return value


def record_payment(invoice: Invoice, value: float) -> Invoice:
    invoice.paid = (invoice.paid or 0) + value
    invoice.status = derive_payment_status(invoice.paid, invoice.total)
    logger.info("Payment of %s recorded on invoice %s (%s)", value, invoice.invoice_no, invoice.status.value)
    return invoice


def _validate_item(item: Any) -> Dict[str, Any]:
    if not isinstance(item, dict) or is_blank(item.get("description")):
        raise APIError(400, "Item description is required")

    quantity = as_number(item.get("quantity"))
    if quantity is None or quantity <= 0:
        raise APIError(400, "Item quantity must be a positive number")

    rate = as_number(item.get("rate"))
    if rate is None or rate < 0:
        raise APIError(400, "Item rate must be a non-negative number")

    amount = as_number(item.get("amount"))
    if amount is None or amount < 0:
        raise APIError(400, "Item amount must be a non-negative number")

    return {
        "service_id": item.get("service_id") or None,
        "description": str(item["description"]).strip(),
        "quantity": quantity,
        "rate": rate,
        "amount": amount,
    }


def validate_invoice_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a create-invoice body and return the cleaned values.

    Raises APIError(400) for the first problem found.
    """
    if is_blank(payload.get("client_id")):
        raise APIError(400, "Client ID is required")
    if is_blank(payload.get("client_name")):
        raise APIError(400, "Client name is required")

    issue_date = as_datetime(payload.get("issue_date"))
    if issue_date is None:
        raise APIError(400, "Invalid issue date format")
    due_date = as_datetime(payload.get("due_date"))
    if due_date is None:
        raise APIError(400, "Invalid due date format")

    items = payload.get("items")
    if not isinstance(items, list) or not items:
        raise APIError(400, "At least one invoice item is required")
    cleaned_items = [_validate_item(item) for item in items]

    subtotal = as_number(payload.get("subtotal"))
    if subtotal is None or subtotal < 0:
        raise APIError(400, "Subtotal must be a non-negative number")

    total = as_number(payload.get("total"))
    if total is None or total < 0:
        raise APIError(400, "Total must be a non-negative number")

    tax_rate = as_number(payload.get("tax_rate") or 0)
    if tax_rate is None or not 0 <= tax_rate <= 100:
        raise APIError(400, "Tax rate must be between 0 and 100")

    tax_amount = as_number(payload.get("tax_amount") or 0)
    if tax_amount is None or tax_amount < 0:
        raise APIError(400, "Tax amount must be a non-negative number")

    return {
        "client_id": str(payload["client_id"]),
        "client_name": str(payload["client_name"]).strip(),
        "issue_date": issue_date,
        "due_date": due_date,
        "items": cleaned_items,
        "subtotal": subtotal,
        "tax_rate": tax_rate,
        "tax_amount": tax_amount,
        "total": total,
        "notes": payload.get("notes"),
    }


def build_items(db: Session, items: List[Dict[str, Any]]) -> List[InvoiceItem]:
    """Turn validated item dicts into rows, checking any service references."""
    rows = []
    for position, item in enumerate(items):
        service_id = item.get("service_id")
        if service_id and not db.query(Service).filter(Service.id == service_id).first():
            raise APIError(400, f"Service not found: {service_id}")
        rows.append(InvoiceItem(position=position, **item))
    return rows
