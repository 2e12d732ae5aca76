from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..database import get_db

router = APIRouter(prefix="/accounts", tags=["accounts"])


def _get_account(account_id: int, db: Session) -> models.Account:
    account = db.query(models.Account).filter(models.Account.id == account_id).first()
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")
    return account

@router.post("/", response_model=schemas.Account)
def create_account(account: schemas.AccountCreate, db: Session = Depends(get_db)):
    db_account = models.Account(**account.model_dump())
    db.add(db_account)
    db.commit()
    db.refresh(db_account)
    return db_account

@router.get("/", response_model=List[schemas.Account])
def list_accounts(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return db.query(models.Account).order_by(models.Account.account_name).offset(skip).limit(limit).all()

@router.get("/{account_id}", response_model=schemas.Account)
def get_account(account_id: int, db: Session = Depends(get_db)):
    return _get_account(account_id, db)

@router.patch("/{account_id}", response_model=schemas.Account)
def update_account(account_id: int, update: schemas.AccountUpdate, db: Session = Depends(get_db)):
    account = _get_account(account_id, db)
    for field, value in update.model_dump(exclude_unset=True).items():
        setattr(account, field, value)
    db.commit()
    db.refresh(account)
    return account

@router.post("/{account_id}/contacts", response_model=schemas.Contact)
def create_contact(account_id: int, contact: schemas.ContactCreate, db: Session = Depends(get_db)):
    _get_account(account_id, db)
    db_contact = models.Contact(account_id=account_id, **contact.model_dump())
    db.add(db_contact)
    db.commit()
    db.refresh(db_contact)
    return db_contact

@router.get("/{account_id}/contacts", response_model=List[schemas.Contact])
def list_contacts(account_id: int, db: Session = Depends(get_db)):
    _get_account(account_id, db)
    return db.query(models.Contact).filter(
        models.Contact.account_id == account_id
    ).order_by(models.Contact.name).all()
