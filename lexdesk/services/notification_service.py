"""Notification side-channel.

Persists in-app notifications and renders the welcome email/SMS templates
sent when a client is created. Delivery itself is not wired to a provider:
rendered messages are logged.
"""
import logging
import re
import time
from typing import Mapping, Optional

from sqlalchemy.orm import Session

from lexdesk.models import Notification, NotificationType, RecipientKind, ReferenceModel, Client

logger = logging.getLogger(__name__)

LAW_FIRM_NAME = "Legal CMS"

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def render_template(template: Optional[str], variables: Mapping[str, object]) -> str:
    """Replace ``{name}`` placeholders; unknown placeholders are left as-is."""
    if not template:
        return ""

    def substitute(match):
        key = match.group(1)
        if key in variables and variables[key] is not None:
            return str(variables[key])
        return match.group(0)

    return _PLACEHOLDER.sub(substitute, template)


def create_notification(
    db: Session,
    recipient_id: str,
    recipient_kind: RecipientKind,
    title: str,
    message: str,
    type: NotificationType = NotificationType.SYSTEM,
    reference_model: Optional[ReferenceModel] = None,
    reference_id: Optional[str] = None,
    commit: bool = True,
) -> Notification:
    notification = Notification(
        recipient_id=recipient_id,
        recipient_kind=recipient_kind,
        title=title.strip(),
        message=message.strip(),
        type=type,
        reference_model=reference_model,
        reference_id=reference_id,
    )
    db.add(notification)
    if commit:
        db.commit()
        db.refresh(notification)
    return notification


def unread_count(db: Session, recipient_id: str, recipient_kind: RecipientKind) -> int:
    return db.query(Notification).filter(
        Notification.recipient_id == recipient_id,
        Notification.recipient_kind == recipient_kind,
        Notification.is_read == False,  # noqa: E712
    ).count()


def deliver_email(to: str, body: str) -> None:
    logger.info("Email notification to %s: %s", to, body)


def deliver_sms(to: str, body: str) -> None:
    logger.info("SMS notification to %s: %s", to, body)


def send_client_welcome(db: Session, client: Client, lawyer: Mapping[str, object], settings) -> bool:
    """Create the welcome notification and send templated email/SMS.

    ``settings`` is a ``NotificationSettings``. Failures are logged and
    reported as False so client creation is never rolled back by them.
    """
    try:
        create_notification(
            db,
            recipient_id=client.id,
            recipient_kind=RecipientKind.CLIENT,
            title=f"Welcome to {LAW_FIRM_NAME}",
            message=(
                f"Welcome {client.name}! Your account has been created successfully. "
                f"Your lawyer {lawyer.get('name') or ''} will handle your cases."
            ),
            type=NotificationType.SYSTEM,
        )

        if settings.enable_email_notifications and client.email:
            deliver_email(client.email, render_template(settings.email_template, {
                "clientName": client.name,
                "clientEmail": client.email,
                "lawyerName": lawyer.get("name"),
                "lawyerEmail": lawyer.get("email"),
                "lawyerPhone": lawyer.get("phone"),
                "lawFirm": LAW_FIRM_NAME,
                "caseReference": f"REF-{int(time.time() * 1000)}",
                "lawyerSignature": settings.lawyer_signature or lawyer.get("name"),
            }))

        if settings.enable_sms_notifications and client.mobile:
            deliver_sms(client.mobile, render_template(settings.sms_template, {
                "clientName": client.name,
                "lawyerName": lawyer.get("name"),
                "lawyerPhone": lawyer.get("phone"),
                "lawFirm": LAW_FIRM_NAME,
            }))

        return True
    except Exception:
        logger.exception("Error sending client notification")
        db.rollback()
        return False
