from sqlalchemy import Column, Integer, String, Float, DateTime, Date, Text, ForeignKey, Enum, Boolean, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from .database import Base
import enum


class QuoteStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    NEGOTIATION = "negotiation"
    ON_HOLD = "on_hold"
    CLOSED_WON = "closed_won"
    CLOSED_LOST = "closed_lost"


# Lead status and priority are stored as VARCHAR; valid values live in
# leads.LEAD_STATUSES / leads.PRIORITIES so the lists can change without a migration.


# --- CRM ---

class Account(Base):
    """Customer organisation (contractor, authority, consultant)."""
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    account_name = Column(String, nullable=False)
    industry = Column(String, nullable=True)
    assigned_employee = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    contacts = relationship("Contact", back_populates="account", cascade="all, delete-orphan")
    leads = relationship("Lead", back_populates="account")
    quotes = relationship("Quote", back_populates="account")


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    name = Column(String, nullable=False)
    designation = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    account = relationship("Account", back_populates="contacts")


class Lead(Base):
    __tablename__ = "leads"

    id = Column(Integer, primary_key=True, index=True)
    lead_name = Column(String, nullable=False)
    contact_person = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    requirements = Column(Text, nullable=True)
    lead_source = Column(String, nullable=True)
    status = Column(String, default="New")
    priority = Column(String, nullable=True)  # 'High Priority' | 'Medium Priority' | 'Low Priority'
    assigned_employee = Column(String, nullable=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    contact_id = Column(Integer, ForeignKey("contacts.id"), nullable=True)
    follow_up_date = Column(Date, nullable=True)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    account = relationship("Account", back_populates="leads")
    lead_activities = relationship("LeadActivity", back_populates="lead", cascade="all, delete-orphan")


class Activity(Base):
    """Account timeline. Lead events with an account are mirrored here."""
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    lead_id = Column(Integer, ForeignKey("leads.id"), nullable=True)
    employee_id = Column(String, nullable=True)
    activity_type = Column(String, nullable=False)
    event_kind = Column(String, nullable=True)  # NULL on rows written before event kinds
    description = Column(Text, nullable=True)
    metadata_json = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)


class LeadActivity(Base):
    """Lead timeline."""
    __tablename__ = "lead_activities"

    id = Column(Integer, primary_key=True, index=True)
    lead_id = Column(Integer, ForeignKey("leads.id"), nullable=False)
    employee_id = Column(String, nullable=True)
    activity_type = Column(String, nullable=False)
    event_kind = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    metadata_json = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)

    lead = relationship("Lead", back_populates="lead_activities")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    notification_type = Column(String, default="followup_due")
    title = Column(String, nullable=False)
    message = Column(Text, nullable=True)
    lead_id = Column(Integer, ForeignKey("leads.id"), nullable=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    is_seen = Column(Boolean, default=False)
    is_completed = Column(Boolean, default=False)
    is_snoozed = Column(Boolean, default=False)
    snooze_until = Column(DateTime, nullable=True)
    metadata_json = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)


# --- Quotations ---

class Quote(Base):
    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True, index=True)
    quote_number = Column(String, unique=True, nullable=False)
    section = Column(String, nullable=False)  # 'Thrie' | 'Double W-Beam' | 'Signages - Reflective'
    product = Column(String, nullable=False)  # 'mbcb' | 'signages'
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    contact_id = Column(Integer, ForeignKey("contacts.id"), nullable=True)
    customer_name = Column(String, nullable=True)  # sub-account name when no account row exists
    state_id = Column(Integer, nullable=True)
    city_id = Column(Integer, nullable=True)
    purpose = Column(Text, nullable=True)
    date = Column(Date, nullable=True)
    status = Column(Enum(QuoteStatus), default=QuoteStatus.DRAFT)
    status_history = Column(JSON, default=list)  # [{status, changed_by, changed_at}]
    comments = Column(Text, nullable=True)
    # Barrier sections: per running metre. Signage: cost per piece in total_cost_per_rm.
    quantity_rm = Column(Float, nullable=True)
    total_weight_per_rm = Column(Float, nullable=True)
    total_cost_per_rm = Column(Float, nullable=True)
    final_total_cost = Column(Float, nullable=True)
    raw_payload = Column(JSON, nullable=True)  # Every intermediate from the calculator
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    account = relationship("Account", back_populates="quotes")


class QuoteDraft(Base):
    """Step-gated quotation form state."""
    __tablename__ = "quote_drafts"

    id = Column(String, primary_key=True)  # UUID
    section_key = Column(String, nullable=False)  # calculator registry key
    fields_json = Column(JSON, default=dict)  # Accumulated form fields
    steps_json = Column(JSON, default=dict)  # {step: state}
    status = Column(String, default="active")  # 'active' | 'saved'
    quote_id = Column(Integer, ForeignKey("quotes.id"), nullable=True)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
