"""
Follow-up notifications.

GET   /api/notifications?username=  — active notifications for a user
POST  /api/notifications/generate    — create followup_due notifications for due leads
PATCH /api/notifications/{id}        — mark seen / completed, or snooze
"""

import logging
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..notifications import FOLLOWUP_DUE, due_follow_ups, follow_up_notification, is_active

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/", response_model=List[schemas.Notification])
def list_notifications(username: str, db: Session = Depends(get_db)):
    rows = db.query(models.Notification).filter(
        models.Notification.user_id == username,
        models.Notification.notification_type == FOLLOWUP_DUE,
        models.Notification.is_completed == False,  # noqa: E712
        models.Notification.is_seen == False,  # noqa: E712
    ).order_by(models.Notification.created_at.desc()).all()
    now = datetime.utcnow()
    return [n for n in rows if is_active(n, now)]


@router.post("/generate")
def generate_notifications(today: Optional[date] = None, db: Session = Depends(get_db)):
    """
    One open followup_due notification per due lead. Leads that already
    have an uncompleted one are skipped.
    """
    today = today or date.today()
    leads = db.query(models.Lead).filter(models.Lead.follow_up_date.isnot(None)).all()
    created = []
    for lead in due_follow_ups(leads, today):
        existing = db.query(models.Notification).filter(
            models.Notification.lead_id == lead.id,
            models.Notification.notification_type == FOLLOWUP_DUE,
            models.Notification.is_completed == False,  # noqa: E712
        ).first()
        if existing:
            continue
        notification = models.Notification(**follow_up_notification(lead))
        db.add(notification)
        created.append(lead.id)
    db.commit()
    if created:
        logger.info("Created %d follow-up notifications", len(created))
    return {"created": len(created), "lead_ids": created}


@router.patch("/{notification_id}", response_model=schemas.Notification)
def update_notification(notification_id: int, update: schemas.NotificationUpdate,
                        db: Session = Depends(get_db)):
    notification = db.query(models.Notification).filter(
        models.Notification.id == notification_id
    ).first()
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    changes = update.model_dump(exclude_unset=True)
    if "is_seen" in changes and changes["is_seen"] is not None:
        notification.is_seen = changes["is_seen"]
    if "is_completed" in changes and changes["is_completed"] is not None:
        notification.is_completed = changes["is_completed"]
    if "snooze_until" in changes:
        notification.snooze_until = changes["snooze_until"]
        notification.is_snoozed = changes["snooze_until"] is not None
    db.commit()
    db.refresh(notification)
    return notification
