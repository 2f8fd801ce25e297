import math

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import desc
from sqlalchemy.orm import Session

from lexdesk.database import get_db
from lexdesk.models import Notification, ReferenceModel
from lexdesk.auth.schemas import Identity
from lexdesk.auth.dependencies import get_current_identity
from lexdesk.notifications.schemas import (
    NotificationCreate, NotificationResponse, NotificationPage, BulkUpdateResult, BulkDeleteResult
)
from lexdesk.services.notification_service import create_notification, unread_count
from lexdesk.responses import Envelope, envelope

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def _owned(db: Session, identity: Identity):
    return db.query(Notification).filter(
        Notification.recipient_id == identity.recipient_id,
        Notification.recipient_kind == identity.recipient_kind,
    )


@router.get("", response_model=Envelope[NotificationPage])
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """List the caller's notifications, newest first."""
    query = _owned(db, identity)
    total = query.count()
    notifications = query.order_by(desc(Notification.created_at)).offset((page - 1) * limit).limit(limit).all()

    return envelope({
        "notifications": notifications,
        "total": total,
        "unread_count": unread_count(db, identity.recipient_id, identity.recipient_kind),
        "current_page": page,
        "total_pages": math.ceil(total / limit),
    })


@router.post("", response_model=Envelope[NotificationResponse], status_code=status.HTTP_201_CREATED)
def create_own_notification(
    notification_data: NotificationCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    reference = notification_data.reference
    notification = create_notification(
        db,
        recipient_id=identity.recipient_id,
        recipient_kind=identity.recipient_kind,
        title=notification_data.title,
        message=notification_data.message,
        type=notification_data.type,
        reference_model=ReferenceModel(reference.kind) if reference else None,
        reference_id=reference.id if reference else None,
    )
    return envelope(notification, "Notification created successfully")


@router.patch("/read-all", response_model=Envelope[BulkUpdateResult])
def mark_all_read(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    modified = _owned(db, identity).filter(Notification.is_read == False).update(  # noqa: E712
        {Notification.is_read: True}, synchronize_session=False
    )
    db.commit()
    return envelope({"modified_count": modified}, "All notifications marked as read")


@router.patch("/{notification_id}/read", response_model=Envelope[NotificationResponse])
def mark_read(
    notification_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    notification = _owned(db, identity).filter(Notification.id == notification_id).first()
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return envelope(notification)


@router.delete("/clear/read", response_model=Envelope[BulkDeleteResult])
def delete_read(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    deleted = _owned(db, identity).filter(Notification.is_read == True).delete(  # noqa: E712
        synchronize_session=False
    )
    db.commit()
    return envelope({"deleted_count": deleted}, "All read notifications deleted")


@router.delete("/{notification_id}", response_model=Envelope[None])
def delete_notification(
    notification_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    notification = _owned(db, identity).filter(Notification.id == notification_id).first()
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    db.delete(notification)
    db.commit()
    return envelope(None, "Notification deleted successfully")
