"""
Lead rules: priority normalisation, status validation, and the structured
change events written to the activity tables when a lead is updated.
"""

import logging
from datetime import date, datetime
from typing import Optional

from . import activity_history as ah

logger = logging.getLogger(__name__)

LEAD_STATUSES = ["New", "In Progress", "Quotation Sent", "Follow-up", "Closed", "Lost"]
CLOSED_STATUSES = {"Closed", "Lost"}

PRIORITIES = ["High Priority", "Medium Priority", "Low Priority"]

_PRIORITY_ALIASES = {
    "high": "High Priority",
    "medium": "Medium Priority",
    "low": "Low Priority",
}
_EMPTY_PRIORITY = {"", "none", "null"}

# Lead fields reported in an "edit" event, with their display names
EDITABLE_FIELDS = {
    "lead_name": "Lead Name",
    "contact_person": "Contact Person",
    "phone": "Phone",
    "email": "Email",
    "requirements": "Requirements",
    "lead_source": "Lead Source",
    "account_id": "Account",
    "contact_id": "Contact",
}


def normalize_priority(value) -> Optional[str]:
    """
    Canonical lead priority, or None.

    "High", "high priority", " HIGH " -> "High Priority". Empty values and
    the strings "none"/"null" mean no priority. Anything else is dropped
    with a warning rather than stored.
    """
    if value is None:
        return None
    text = str(value).strip()
    lowered = text.lower()
    if lowered in _EMPTY_PRIORITY:
        return None
    if lowered.endswith(" priority"):
        lowered = lowered[: -len(" priority")].strip()
    normalized = _PRIORITY_ALIASES.get(lowered)
    if normalized is None:
        logger.warning("Ignoring invalid lead priority: %r", value)
    return normalized


def is_valid_status(status: str) -> bool:
    return status in LEAD_STATUSES


def _display(value) -> str:
    if value is None or value == "":
        return "None"
    if isinstance(value, (date, datetime)):
        return value.strftime("%d/%m/%Y")
    return str(value)


def describe_change(label: str, old, new) -> str:
    """Change string in the activity-log format: Label: "old" → "new"."""
    return f'{label}: "{_display(old)}" → "{_display(new)}"'


def _event(kind: str, activity_type: str, description: str, metadata: dict) -> dict:
    return {
        "event_kind": kind,
        "activity_type": activity_type,
        "description": description,
        "metadata": metadata,
    }


def build_change_events(old: dict, new: dict) -> list:
    """
    Compare two lead snapshots and return one event per kind of change.

    Status, priority, reassignment and follow-up each get their own event
    with old/new values; any other edited fields are grouped in one edit event.
    """
    events = []
    lead_name = new.get("lead_name") or old.get("lead_name") or ""

    if old.get("status") != new.get("status"):
        change = describe_change("Status", old.get("status"), new.get("status"))
        events.append(_event(ah.STATUS_CHANGE, "status_change",
                             f"Status changed for {lead_name}: {_display(old.get('status'))} → {_display(new.get('status'))}",
                             {"old_value": old.get("status"), "new_value": new.get("status"),
                              "changes": [change]}))

    if old.get("priority") != new.get("priority"):
        change = describe_change("Priority", old.get("priority"), new.get("priority"))
        events.append(_event(ah.PRIORITY_CHANGE, "lead_updated", change,
                             {"old_value": old.get("priority"), "new_value": new.get("priority"),
                              "changes": [change]}))

    if old.get("assigned_employee") != new.get("assigned_employee"):
        change = describe_change("Assigned To", old.get("assigned_employee"), new.get("assigned_employee"))
        events.append(_event(ah.EMPLOYEE_REASSIGNED, "employee_reassigned",
                             f"Lead reassigned from {_display(old.get('assigned_employee'))} "
                             f"to {_display(new.get('assigned_employee'))}",
                             {"old_value": old.get("assigned_employee"),
                              "new_value": new.get("assigned_employee"),
                              "changes": [change]}))

    if old.get("follow_up_date") != new.get("follow_up_date") and new.get("follow_up_date"):
        change = describe_change("Follow-up Date", old.get("follow_up_date"), new.get("follow_up_date"))
        events.append(_event(ah.FOLLOW_UP, "follow_up_set",
                             f"Follow-up scheduled for {_display(new.get('follow_up_date'))}",
                             {"old_value": _iso(old.get("follow_up_date")),
                              "new_value": _iso(new.get("follow_up_date")),
                              "follow_up_date": _iso(new.get("follow_up_date")),
                              "changes": [change]}))

    edits = [
        describe_change(label, old.get(field), new.get(field))
        for field, label in EDITABLE_FIELDS.items()
        if old.get(field) != new.get(field)
    ]
    if edits:
        events.append(_event(ah.EDIT, "lead_updated",
                             f"Lead updated: {'; '.join(edits)}",
                             {"changes": edits}))
    return events


def note_event(text: str) -> dict:
    return _event(ah.NOTE, "note", text, {})


def _iso(value) -> Optional[str]:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value
