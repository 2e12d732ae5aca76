"""
Leads API.

Every change to a lead is written as structured events (with event_kind)
to lead_activities, and mirrored to the account timeline in activities
when the lead belongs to an account.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import models, schemas
from ..activity_history import build_lead_history
from ..database import get_db
from ..leads import LEAD_STATUSES, build_change_events, is_valid_status, normalize_priority, note_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/leads", tags=["leads"])

_SNAPSHOT_FIELDS = (
    "lead_name", "contact_person", "phone", "email", "requirements", "lead_source",
    "status", "priority", "assigned_employee", "account_id", "contact_id", "follow_up_date",
)


def _get_lead(lead_id: int, db: Session) -> models.Lead:
    lead = db.query(models.Lead).filter(models.Lead.id == lead_id).first()
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")
    return lead


def _snapshot(lead: models.Lead) -> dict:
    return {field: getattr(lead, field) for field in _SNAPSHOT_FIELDS}


def _check_status(status: str):
    if not is_valid_status(status):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid lead status: {status}. Valid: {LEAD_STATUSES}",
        )


def log_lead_event(db: Session, lead: models.Lead, event: dict, employee_id: Optional[str]):
    """Write one event to the lead timeline, and to the account timeline if linked."""
    db.add(models.LeadActivity(
        lead_id=lead.id,
        employee_id=employee_id,
        activity_type=event["activity_type"],
        event_kind=event["event_kind"],
        description=event["description"],
        metadata_json=event["metadata"],
    ))
    if lead.account_id:
        db.add(models.Activity(
            account_id=lead.account_id,
            lead_id=lead.id,
            employee_id=employee_id,
            activity_type=event["activity_type"],
            event_kind=event["event_kind"],
            description=event["description"],
            metadata_json=event["metadata"],
        ))


def _activity_row(activity) -> dict:
    return {
        "id": activity.id,
        "activity_type": activity.activity_type,
        "event_kind": activity.event_kind,
        "description": activity.description,
        "metadata": activity.metadata_json or {},
        "employee_id": activity.employee_id,
        "created_at": activity.created_at,
    }


@router.post("/", response_model=schemas.Lead)
def create_lead(lead: schemas.LeadCreate, db: Session = Depends(get_db)):
    _check_status(lead.status)
    data = lead.model_dump()
    data["priority"] = normalize_priority(data.get("priority"))
    db_lead = models.Lead(**data)
    db.add(db_lead)
    db.flush()
    if db_lead.follow_up_date:
        before = {"lead_name": db_lead.lead_name}
        after = {"lead_name": db_lead.lead_name, "follow_up_date": db_lead.follow_up_date}
        for event in build_change_events(before, after):
            log_lead_event(db, db_lead, event, db_lead.created_by)
    db.commit()
    db.refresh(db_lead)
    logger.info("Created lead %s (%s)", db_lead.id, db_lead.lead_name)
    return db_lead


@router.get("/", response_model=List[schemas.Lead])
def list_leads(
    status: Optional[str] = None,
    assigned_employee: Optional[str] = None,
    account_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    query = db.query(models.Lead)
    if status:
        query = query.filter(models.Lead.status == status)
    if assigned_employee:
        query = query.filter(models.Lead.assigned_employee == assigned_employee)
    if account_id:
        query = query.filter(models.Lead.account_id == account_id)
    return query.order_by(models.Lead.created_at.desc()).offset(skip).limit(limit).all()


@router.get("/{lead_id}", response_model=schemas.Lead)
def get_lead(lead_id: int, db: Session = Depends(get_db)):
    return _get_lead(lead_id, db)


@router.patch("/{lead_id}", response_model=schemas.Lead)
def update_lead(lead_id: int, update: schemas.LeadUpdate, db: Session = Depends(get_db)):
    """
    Partial update. Only fields present in the request change; an explicit
    null priority clears it.
    """
    lead = _get_lead(lead_id, db)
    changes = update.model_dump(exclude_unset=True)
    updated_by = changes.pop("updated_by", None)

    if "status" in changes:
        if changes["status"] is None:
            raise HTTPException(status_code=400, detail="Lead status cannot be empty")
        _check_status(changes["status"])
    if "priority" in changes:
        changes["priority"] = normalize_priority(changes["priority"])
    if "lead_name" in changes and not changes["lead_name"]:
        raise HTTPException(status_code=400, detail="Lead name cannot be empty")

    before = _snapshot(lead)
    for field, value in changes.items():
        setattr(lead, field, value)
    after = _snapshot(lead)

    for event in build_change_events(before, after):
        log_lead_event(db, lead, event, updated_by)
    db.commit()
    db.refresh(lead)
    return lead


@router.post("/{lead_id}/notes")
def add_note(lead_id: int, note: schemas.LeadNote, db: Session = Depends(get_db)):
    lead = _get_lead(lead_id, db)
    text = note.text.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Note text is required")
    log_lead_event(db, lead, note_event(text), note.employee_id)
    db.commit()
    return {"lead_id": lead.id, "note": text}


@router.post("/{lead_id}/follow-up", response_model=schemas.Lead)
def set_follow_up(lead_id: int, request: schemas.FollowUpRequest, db: Session = Depends(get_db)):
    """Schedule a follow-up. Moves a New or In Progress lead to Follow-up."""
    lead = _get_lead(lead_id, db)
    before = _snapshot(lead)
    lead.follow_up_date = request.follow_up_date
    if lead.status in ("New", "In Progress"):
        lead.status = "Follow-up"
    for event in build_change_events(before, _snapshot(lead)):
        log_lead_event(db, lead, event, request.employee_id)
    if request.note and request.note.strip():
        log_lead_event(db, lead, note_event(request.note.strip()), request.employee_id)
    db.commit()
    db.refresh(lead)
    return lead


@router.get("/{lead_id}/history")
def lead_history(lead_id: int, db: Session = Depends(get_db)):
    lead = _get_lead(lead_id, db)
    activities = db.query(models.Activity).filter(models.Activity.lead_id == lead_id).all()
    lead_activities = db.query(models.LeadActivity).filter(
        models.LeadActivity.lead_id == lead_id
    ).all()
    history = build_lead_history(
        {"id": lead.id, "lead_name": lead.lead_name, "created_by": lead.created_by,
         "created_at": lead.created_at},
        [_activity_row(a) for a in activities],
        [_activity_row(a) for a in lead_activities],
    )
    return {"lead_id": lead.id, "history": history}
