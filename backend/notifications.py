"""
Follow-up reminders for leads.

A lead with a follow-up date on or before today (and not closed) gets one
"followup_due" notification for its assignee. A notification is shown
until it is seen or completed; snoozing hides it until snooze_until.
"""

import logging
from datetime import date, datetime
from typing import Optional

from .config import settings
from .leads import CLOSED_STATUSES

logger = logging.getLogger(__name__)

FOLLOWUP_DUE = "followup_due"


def _as_date(value) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        logger.warning("Unparseable follow-up date: %r", value)
        return None


def due_follow_ups(leads: list, today: date) -> list:
    """Leads whose follow-up is due on or before `today`, skipping closed ones."""
    due = []
    for lead in leads:
        follow_up = _as_date(lead.follow_up_date)
        if follow_up is None or follow_up > today:
            continue
        if lead.status in CLOSED_STATUSES:
            continue
        due.append(lead)
    return due


def is_active(notification, now: datetime) -> bool:
    """Not completed, not seen, and not snoozed past `now`."""
    if notification.is_completed or notification.is_seen:
        return False
    if notification.is_snoozed and notification.snooze_until and notification.snooze_until > now:
        return False
    return True


def follow_up_notification(lead) -> dict:
    """Column values for a followup_due notification about `lead`."""
    follow_up = _as_date(lead.follow_up_date)
    when = follow_up.strftime("%d/%m/%Y") if follow_up else "today"
    return {
        "user_id": lead.assigned_employee or settings.DEFAULT_FOLLOW_UP_USER,
        "notification_type": FOLLOWUP_DUE,
        "title": f"Follow-up due: {lead.lead_name}",
        "message": f"Follow-up with {lead.contact_person or lead.lead_name} was due on {when}.",
        "lead_id": lead.id,
        "account_id": lead.account_id,
        "metadata_json": {"follow_up_date": follow_up.isoformat() if follow_up else None},
    }
