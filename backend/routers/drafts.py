"""
Quote Draft API — step-gated quotation forms.

POST /api/drafts/start                    — Start a draft for a section
GET  /api/drafts/{id}                     — Step states + calculation over confirmed steps
POST /api/drafts/{id}/steps/{step}        — Enter or change a step's fields
POST /api/drafts/{id}/steps/{step}/confirm — Confirm a step (validated by the calculator)
POST /api/drafts/{id}/steps/{step}/edit   — Re-open a confirmed step
POST /api/drafts/{id}/save                — Create a Quote once every required step is confirmed
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from .. import models, schemas, workflow
from ..calculators.registry import get_calculator, has_calculator, list_calculators
from ..database import get_db
from ..pricing_engine import PricingEngine
from .quotes import create_quote_record

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/drafts", tags=["quote-drafts"])

engine = PricingEngine()


def _get_draft(draft_id: str, db: Session) -> models.QuoteDraft:
    draft = db.query(models.QuoteDraft).filter(models.QuoteDraft.id == draft_id).first()
    if not draft:
        raise HTTPException(status_code=404, detail="Draft not found")
    return draft


def _get_active_draft(draft_id: str, db: Session) -> models.QuoteDraft:
    draft = _get_draft(draft_id, db)
    if draft.status != "active":
        raise HTTPException(status_code=400, detail=f"Draft is {draft.status}, not active")
    return draft


def _apply(draft: models.QuoteDraft, step: str, event: str):
    calculator = get_calculator(draft.section_key)
    try:
        draft.steps_json = workflow.apply_event(
            draft.steps_json or {}, calculator.STEPS, step, event
        )
    except workflow.InvalidTransition as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    flag_modified(draft, "steps_json")


def _draft_status(draft: models.QuoteDraft) -> dict:
    calculator = get_calculator(draft.section_key)
    steps = draft.steps_json or {}
    fields = draft.fields_json or {}
    calculation = calculator.calculate(fields, confirmed_steps=workflow.confirmed_steps(steps))
    return {
        "draft_id": draft.id,
        "section_key": draft.section_key,
        "section": calculator.SECTION,
        "status": draft.status,
        "quote_id": draft.quote_id,
        "steps": [{"step": name, "state": steps.get(name, workflow.EMPTY),
                   "optional": name in calculator.OPTIONAL_STEPS}
                  for name in calculator.STEPS],
        "fields": fields,
        "calculation": calculation,
        "ready_to_save": workflow.is_ready_to_save(steps, calculator.required_steps),
        "pending_steps": workflow.pending_steps(steps, calculator.required_steps),
    }


@router.post("/start")
def start_draft(request: schemas.DraftStart, db: Session = Depends(get_db)):
    if not has_calculator(request.section_key):
        raise HTTPException(
            status_code=400,
            detail=f"No calculator for section: {request.section_key}. Available: {list_calculators()}",
        )
    calculator = get_calculator(request.section_key)
    draft = models.QuoteDraft(
        id=str(uuid.uuid4()),
        section_key=request.section_key,
        fields_json=dict(request.fields),
        steps_json=workflow.initial_steps(calculator.STEPS),
        status="active",
        created_by=request.created_by,
    )
    db.add(draft)
    db.commit()
    db.refresh(draft)
    return _draft_status(draft)


@router.get("/{draft_id}")
def get_draft(draft_id: str, db: Session = Depends(get_db)):
    return _draft_status(_get_draft(draft_id, db))


@router.post("/{draft_id}/steps/{step}")
def enter_step(draft_id: str, step: str, request: schemas.DraftStepInput,
               db: Session = Depends(get_db)):
    """Merge the step's fields into the draft. A confirmed step becomes edited."""
    draft = _get_active_draft(draft_id, db)
    _apply(draft, step, "enter")
    fields = dict(draft.fields_json or {})
    fields.update(request.fields)
    draft.fields_json = fields
    flag_modified(draft, "fields_json")
    db.commit()
    db.refresh(draft)
    return _draft_status(draft)


@router.post("/{draft_id}/steps/{step}/confirm")
def confirm_step(draft_id: str, step: str, db: Session = Depends(get_db)):
    draft = _get_active_draft(draft_id, db)
    calculator = get_calculator(draft.section_key)
    if step in calculator.STEPS:
        error = calculator.validate_step(step, draft.fields_json or {})
        if error:
            raise HTTPException(status_code=400, detail=error)
    _apply(draft, step, "confirm")
    db.commit()
    db.refresh(draft)
    return _draft_status(draft)


@router.post("/{draft_id}/steps/{step}/edit")
def edit_step(draft_id: str, step: str, db: Session = Depends(get_db)):
    draft = _get_active_draft(draft_id, db)
    _apply(draft, step, "edit")
    db.commit()
    db.refresh(draft)
    return _draft_status(draft)


@router.post("/{draft_id}/save")
def save_draft(draft_id: str, request: schemas.DraftSaveRequest, db: Session = Depends(get_db)):
    """
    Build the quotation payload from the confirmed steps and persist it.
    Requires every required step confirmed and no optional step mid-edit.
    """
    draft = _get_active_draft(draft_id, db)
    calculator = get_calculator(draft.section_key)
    steps = draft.steps_json or {}
    if not workflow.is_ready_to_save(steps, calculator.required_steps):
        pending = workflow.pending_steps(steps, calculator.required_steps)
        raise HTTPException(
            status_code=400,
            detail=f"Confirm these steps before saving: {', '.join(pending)}",
        )

    fields = draft.fields_json or {}
    calculation = calculator.calculate(fields, confirmed_steps=workflow.confirmed_steps(steps))
    if not calculation["is_complete"]:
        raise HTTPException(
            status_code=400,
            detail="; ".join(calculation["errors"]) or "Quotation is incomplete",
        )

    payload = engine.build_payload(calculation, fields)
    quote = create_quote_record(db, payload, request.model_dump())
    draft.status = "saved"
    draft.quote_id = quote.id
    db.commit()
    logger.info("Draft %s saved as quote %s", draft.id, quote.quote_number)

    return {
        "draft_id": draft.id,
        "quote_id": quote.id,
        "quote_number": quote.quote_number,
        "payload": {k: v for k, v in payload.items() if k != "raw_payload"},
    }
