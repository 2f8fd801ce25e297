import pytest

from lexdesk.models import Invoice, InvoiceStatus
from lexdesk.responses import APIError
from lexdesk.services.invoice_service import (
    derive_payment_status, parse_payment_amount, record_payment, validate_invoice_payload
)

VALID = {
    "client_id": "c1",
    "client_name": "  Acme Ltd ",
    "issue_date": "2030-01-01T00:00:00Z",
    "due_date": "2030-01-31T00:00:00+03:00",
    "items": [{"description": " Drafting ", "quantity": "2", "rate": 50, "amount": 100}],
    "subtotal": 100,
    "total": 100,
}


@pytest.mark.parametrize("paid, total, expected", [
    (0, 100, InvoiceStatus.UNPAID),
    (40, 100, InvoiceStatus.PARTIALLY_PAID),
    (100, 100, InvoiceStatus.PAID),
    (120, 100, InvoiceStatus.PAID),
])
def test_derive_payment_status(paid, total, expected):
    assert derive_payment_status(paid, total) == expected


def test_record_payment_accumulates_without_clamping():
    invoice = Invoice(invoice_no="INV-000001", total=100, paid=80, status=InvoiceStatus.PARTIALLY_PAID)
    record_payment(invoice, 50)
    assert invoice.paid == 130
    assert invoice.status == InvoiceStatus.PAID
    assert invoice.balance_due == -30


def test_parse_payment_amount():
    assert parse_payment_amount("12.5") == 12.5
    for bad in (0, -1, "", "nan", True, "inf"):
        with pytest.raises(APIError) as exc:
            parse_payment_amount(bad)
        assert exc.value.status_code == 400


def test_validate_invoice_payload_cleans_values():
    values = validate_invoice_payload(VALID)
    assert values["client_name"] == "Acme Ltd"
    assert values["items"][0]["description"] == "Drafting"
    assert values["items"][0]["quantity"] == 2.0
    assert values["items"][0]["service_id"] is None
    assert values["tax_rate"] == 0
    # Offsets are normalised to naive UTC
    assert values["due_date"].tzinfo is None
    assert values["due_date"].hour == 21


def test_validation_reports_first_problem_only():
    with pytest.raises(APIError) as exc:
        validate_invoice_payload({**VALID, "client_name": "", "items": []})
    assert exc.value.detail == "Client name is required"


def test_item_validation_order():
    item = {"description": "x", "quantity": 1, "rate": -1, "amount": -1}
    with pytest.raises(APIError) as exc:
        validate_invoice_payload({**VALID, "items": [item]})
    assert exc.value.detail == "Item rate must be a non-negative number"
