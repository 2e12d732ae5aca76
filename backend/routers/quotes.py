import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified
from typing import Optional
from datetime import datetime
from .. import models, schemas
from ..database import get_db
from ..pricing_engine import product_for_section

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quotes", tags=["quotes"])


def generate_quote_number(db: Session) -> str:
    # Max id rather than count so numbers stay unique after deletes
    last_id = db.query(func.max(models.Quote.id)).scalar() or 0
    year = datetime.utcnow().year
    return f"EST-{year}-{str(last_id + 1).zfill(4)}"


def create_quote_record(db: Session, payload: dict, header: dict) -> models.Quote:
    """
    Persist a quotation payload with its header fields.

    payload: {section, quantity_rm, total_weight_per_rm, total_cost_per_rm,
              final_total_cost, raw_payload}
    header: {date, account_id | customer_name, contact_id, state_id, city_id,
             purpose, created_by}
    """
    section = (payload.get("section") or "").strip()
    if not section:
        raise HTTPException(status_code=400, detail="Section is required")
    if not header.get("account_id") and not (header.get("customer_name") or "").strip():
        raise HTTPException(status_code=400, detail="An account or customer name is required")
    if header.get("account_id"):
        account = db.query(models.Account).filter(models.Account.id == header["account_id"]).first()
        if not account:
            raise HTTPException(status_code=404, detail="Account not found")

    created_by = header.get("created_by")
    quote = models.Quote(
        quote_number=generate_quote_number(db),
        section=section,
        product=product_for_section(section),
        account_id=header.get("account_id"),
        contact_id=header.get("contact_id"),
        customer_name=header.get("customer_name"),
        state_id=header.get("state_id"),
        city_id=header.get("city_id"),
        purpose=header.get("purpose"),
        date=header.get("date"),
        status=models.QuoteStatus.DRAFT,
        status_history=[{
            "status": models.QuoteStatus.DRAFT.value,
            "changed_by": created_by,
            "changed_at": datetime.utcnow().isoformat(),
        }],
        quantity_rm=payload.get("quantity_rm"),
        total_weight_per_rm=payload.get("total_weight_per_rm"),
        total_cost_per_rm=payload.get("total_cost_per_rm"),
        final_total_cost=payload.get("final_total_cost"),
        raw_payload=payload.get("raw_payload") or {},
        created_by=created_by,
    )
    db.add(quote)
    db.commit()
    db.refresh(quote)
    logger.info("Saved quote %s (%s) for %s", quote.quote_number, section,
                quote.account_id or quote.customer_name)
    return quote


def _get_quote(quote_id: int, db: Session) -> models.Quote:
    quote = db.query(models.Quote).filter(models.Quote.id == quote_id).first()
    if not quote:
        raise HTTPException(status_code=404, detail="Quote not found")
    return quote


def _quote_to_dict(quote: models.Quote) -> dict:
    return {
        "id": quote.id,
        "quote_number": quote.quote_number,
        "section": quote.section,
        "product": quote.product,
        "account_id": quote.account_id,
        "account_name": quote.account.account_name if quote.account else quote.customer_name,
        "contact_id": quote.contact_id,
        "customer_name": quote.customer_name,
        "state_id": quote.state_id,
        "city_id": quote.city_id,
        "purpose": quote.purpose,
        "date": quote.date.isoformat() if quote.date else None,
        "status": quote.status.value if quote.status else None,
        "status_history": quote.status_history or [],
        "comments": quote.comments,
        "quantity_rm": quote.quantity_rm,
        "total_weight_per_rm": quote.total_weight_per_rm,
        "total_cost_per_rm": quote.total_cost_per_rm,
        "final_total_cost": quote.final_total_cost,
        "raw_payload": quote.raw_payload or {},
        "created_by": quote.created_by,
        "created_at": quote.created_at.isoformat() if quote.created_at else None,
        "updated_at": quote.updated_at.isoformat() if quote.updated_at else None,
    }


@router.post("/")
def create_quote(request: schemas.QuoteCreate, db: Session = Depends(get_db)):
    data = request.model_dump()
    payload = {k: data.pop(k) for k in (
        "section", "quantity_rm", "total_weight_per_rm",
        "total_cost_per_rm", "final_total_cost", "raw_payload",
    )}
    quote = create_quote_record(db, payload, data)
    return _quote_to_dict(quote)


@router.get("/")
def list_quotes(
    product: Optional[str] = None,
    section: Optional[str] = None,
    account_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    query = db.query(models.Quote)
    if product:
        query = query.filter(models.Quote.product == product)
    if section:
        query = query.filter(models.Quote.section == section)
    if account_id:
        query = query.filter(models.Quote.account_id == account_id)
    quotes = query.order_by(models.Quote.created_at.desc(), models.Quote.id.desc()).offset(skip).limit(limit).all()
    return [_quote_to_dict(q) for q in quotes]


@router.get("/{quote_id}")
def get_quote(quote_id: int, db: Session = Depends(get_db)):
    return _quote_to_dict(_get_quote(quote_id, db))


@router.patch("/{quote_id}/status")
def update_status(quote_id: int, update: schemas.QuoteStatusUpdate, db: Session = Depends(get_db)):
    """Change the quote status and append it to the status history."""
    quote = _get_quote(quote_id, db)
    if quote.status == update.status:
        return _quote_to_dict(quote)

    history = list(quote.status_history or [])
    history.append({
        "status": update.status.value,
        "changed_by": update.changed_by,
        "changed_at": datetime.utcnow().isoformat(),
    })
    quote.status = update.status
    quote.status_history = history
    flag_modified(quote, "status_history")
    db.commit()
    db.refresh(quote)
    logger.info("Quote %s moved to %s", quote.quote_number, update.status.value)
    return _quote_to_dict(quote)


@router.patch("/{quote_id}/comments")
def update_comments(quote_id: int, update: schemas.QuoteComments, db: Session = Depends(get_db)):
    quote = _get_quote(quote_id, db)
    quote.comments = update.comments
    db.commit()
    db.refresh(quote)
    return _quote_to_dict(quote)


@router.delete("/{quote_id}")
def delete_quote(quote_id: int, db: Session = Depends(get_db)):
    quote = _get_quote(quote_id, db)
    db.query(models.QuoteDraft).filter(models.QuoteDraft.quote_id == quote_id).update(
        {"quote_id": None}
    )
    db.delete(quote)
    db.commit()
    return {"deleted": quote_id}
