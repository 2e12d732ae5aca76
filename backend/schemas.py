from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime
from .models import QuoteStatus


class AccountBase(BaseModel):
    account_name: str
    industry: Optional[str] = None
    assigned_employee: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

class AccountCreate(AccountBase):
    pass

class AccountUpdate(BaseModel):
    account_name: Optional[str] = None
    industry: Optional[str] = None
    assigned_employee: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

class Account(AccountBase):
    id: int
    created_at: datetime
    class Config:
        from_attributes = True

class ContactBase(BaseModel):
    name: str
    designation: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

class ContactCreate(ContactBase):
    pass

class Contact(ContactBase):
    id: int
    account_id: int
    created_at: datetime
    class Config:
        from_attributes = True

class LeadBase(BaseModel):
    lead_name: str
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    requirements: Optional[str] = None
    lead_source: Optional[str] = None
    assigned_employee: Optional[str] = None
    account_id: Optional[int] = None
    contact_id: Optional[int] = None
    follow_up_date: Optional[date] = None

class LeadCreate(LeadBase):
    status: str = "New"
    priority: Optional[str] = None  # normalised on write
    created_by: Optional[str] = None

class LeadUpdate(BaseModel):
    lead_name: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    requirements: Optional[str] = None
    lead_source: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    assigned_employee: Optional[str] = None
    account_id: Optional[int] = None
    contact_id: Optional[int] = None
    follow_up_date: Optional[date] = None
    updated_by: Optional[str] = None

class Lead(LeadBase):
    id: int
    status: str
    priority: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    class Config:
        from_attributes = True

class LeadNote(BaseModel):
    text: str
    employee_id: Optional[str] = None

class FollowUpRequest(BaseModel):
    follow_up_date: date
    employee_id: Optional[str] = None
    note: Optional[str] = None

class Notification(BaseModel):
    id: int
    user_id: str
    notification_type: str
    title: str
    message: Optional[str] = None
    lead_id: Optional[int] = None
    account_id: Optional[int] = None
    is_seen: bool
    is_completed: bool
    is_snoozed: bool
    snooze_until: Optional[datetime] = None
    created_at: datetime
    class Config:
        from_attributes = True

class NotificationUpdate(BaseModel):
    is_seen: Optional[bool] = None
    is_completed: Optional[bool] = None
    snooze_until: Optional[datetime] = None  # sets is_snoozed

class QuotePayload(BaseModel):
    """Quotation payload produced by PricingEngine.build_payload."""
    section: str
    quantity_rm: Optional[float] = None
    total_weight_per_rm: Optional[float] = None
    total_cost_per_rm: Optional[float] = None
    final_total_cost: Optional[float] = None
    raw_payload: dict = {}

class QuoteCreate(QuotePayload):
    date: date
    account_id: Optional[int] = None
    customer_name: Optional[str] = None
    contact_id: Optional[int] = None
    state_id: Optional[int] = None
    city_id: Optional[int] = None
    purpose: Optional[str] = None
    created_by: Optional[str] = None

class QuoteStatusUpdate(BaseModel):
    status: QuoteStatus
    changed_by: Optional[str] = None

class QuoteComments(BaseModel):
    comments: str

class AreaRequest(BaseModel):
    shape: str
    size: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    apply_wastage: bool = True

class CalculateRequest(BaseModel):
    fields: dict

class DraftStart(BaseModel):
    section_key: str
    fields: dict = {}
    created_by: Optional[str] = None

class DraftStepInput(BaseModel):
    fields: dict

class DraftSaveRequest(BaseModel):
    """Quote header fields supplied when a draft is saved."""
    date: date
    account_id: Optional[int] = None
    customer_name: Optional[str] = None
    contact_id: Optional[int] = None
    state_id: Optional[int] = None
    city_id: Optional[int] = None
    purpose: Optional[str] = None
    created_by: Optional[str] = None
