"""
Lead activity history.

Lead events are stored in two tables: `activities` (the account timeline)
and `lead_activities` (the lead timeline). The same event is often written
to both, so reading a lead's history merges them and drops the duplicates.

New rows carry an explicit `event_kind`. Rows written before that column
existed are classified from their activity_type, metadata and change
strings, in a fixed precedence order (see infer_event_kind).
"""

import logging
import re
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)

STATUS_CHANGE = "status_change"
PRIORITY_CHANGE = "priority_change"
EMPLOYEE_REASSIGNED = "employee_reassigned"
NOTE = "note"
FOLLOW_UP = "follow_up"
EDIT = "edit"
CREATED = "created"

EVENT_KINDS = (STATUS_CHANGE, PRIORITY_CHANGE, EMPLOYEE_REASSIGNED, NOTE, FOLLOW_UP, EDIT)

ACTIONS = {
    STATUS_CHANGE: "Status changed",
    PRIORITY_CHANGE: "Priority changed",
    EMPLOYEE_REASSIGNED: "Lead reassigned",
    NOTE: "Note added",
    FOLLOW_UP: "Follow-up scheduled",
    EDIT: "Lead updated",
    CREATED: "Lead created",
}

# Rows with equal descriptions closer than this are the same event
DEDUPE_WINDOW_SECONDS = 1.0

PRIORITY_CHANGE_RE = re.compile(r'Priority: "?([^"]*)"? → "?([^"]*)"?')
FOLLOW_UP_DATE_RE = re.compile(r"(\d{1,2}/\d{1,2}/\d{4})|(\d{1,2}-\w{3}-\d{4})")


def _as_datetime(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        logger.warning("Unparseable activity timestamp: %r", value)
        return None


def _changes(row: dict) -> list:
    metadata = row.get("metadata") or {}
    changes = metadata.get("changes") or []
    if isinstance(changes, str):
        return [changes]
    return [str(c) for c in changes]


def _change_containing(row: dict, needle: str) -> Optional[str]:
    for change in _changes(row):
        if needle in change:
            return change
    return None


def merge_activities(activities: list, lead_activities: list) -> list:
    """
    Union of both tables, oldest first.

    A lead_activities row is dropped when an activities row has the same
    description less than DEDUPE_WINDOW_SECONDS apart.
    """
    merged = list(activities)
    for row in lead_activities:
        row_time = _as_datetime(row.get("created_at"))
        duplicate = False
        for existing in activities:
            if existing.get("description") != row.get("description"):
                continue
            existing_time = _as_datetime(existing.get("created_at"))
            if row_time is None or existing_time is None:
                continue
            if abs((existing_time - row_time).total_seconds()) < DEDUPE_WINDOW_SECONDS:
                duplicate = True
                break
        if not duplicate:
            merged.append(row)

    return sorted(merged, key=lambda r: _as_datetime(r.get("created_at")) or datetime.min)


def infer_event_kind(row: dict) -> str:
    """
    Classify a row that has no stored event_kind.
    Precedence: status > priority > reassignment > note > follow-up > edit.
    """
    activity_type = row.get("activity_type") or ""
    metadata = row.get("metadata") or {}
    old_data = metadata.get("old_data") or {}
    new_data = metadata.get("new_data") or {}

    if activity_type == "status_change" or (old_data.get("status") and new_data.get("status")):
        return STATUS_CHANGE
    if _change_containing(row, "Priority"):
        return PRIORITY_CHANGE
    if activity_type == "employee_reassigned" or _change_containing(row, "Assigned"):
        return EMPLOYEE_REASSIGNED
    if activity_type == "note":
        return NOTE
    if (activity_type in ("follow_up_set", "followup")
            or _change_containing(row, "Follow-up")
            or metadata.get("follow_up_date")):
        return FOLLOW_UP
    return EDIT


def classify(row: dict) -> str:
    """Stored event_kind when present and known, else inferred."""
    kind = row.get("event_kind")
    if kind in EVENT_KINDS:
        return kind
    if kind:
        logger.warning("Unknown event_kind %r on activity %s, inferring", kind, row.get("id"))
    return infer_event_kind(row)


def _old_new(row: dict, kind: str) -> tuple:
    metadata = row.get("metadata") or {}
    if "old_value" in metadata or "new_value" in metadata:
        return metadata.get("old_value"), metadata.get("new_value")

    if kind == STATUS_CHANGE:
        old_data = metadata.get("old_data") or {}
        new_data = metadata.get("new_data") or {}
        return (old_data.get("status") or metadata.get("old_status"),
                new_data.get("status") or metadata.get("new_status"))
    if kind == PRIORITY_CHANGE:
        change = _change_containing(row, "Priority")
        match = PRIORITY_CHANGE_RE.search(change or "")
        if match:
            return match.group(1) or None, match.group(2) or None
    if kind == EMPLOYEE_REASSIGNED:
        return metadata.get("old_employee"), metadata.get("new_employee")
    return None, None


def _follow_up_date(row: dict) -> Optional[str]:
    metadata = row.get("metadata") or {}
    if metadata.get("follow_up_date"):
        return str(metadata["follow_up_date"])
    text = " ".join([_change_containing(row, "Follow-up") or "", row.get("description") or ""])
    match = FOLLOW_UP_DATE_RE.search(text)
    return match.group(0) if match else None


def build_history_entry(row: dict) -> dict:
    kind = classify(row)
    old_value, new_value = _old_new(row, kind)
    changed_at = _as_datetime(row.get("created_at"))
    return {
        "id": row.get("id"),
        "type": kind,
        "action": ACTIONS[kind],
        "description": row.get("description") or "",
        "changed_by": row.get("employee_id"),
        "changed_at": changed_at.isoformat() if changed_at else None,
        "old_value": old_value,
        "new_value": new_value,
        "follow_up_date": _follow_up_date(row) if kind == FOLLOW_UP else None,
        "metadata": row.get("metadata") or {},
    }


def build_lead_history(lead: dict, activities: list, lead_activities: list) -> list:
    """
    Full history for a lead, newest first, ending with its creation.

    Args:
        lead: {id, lead_name, created_by, created_at}
        activities / lead_activities: row dicts with id, activity_type,
            event_kind, description, metadata, employee_id, created_at
    """
    merged = merge_activities(activities, lead_activities)
    created_at = _as_datetime(lead.get("created_at"))
    history = [{
        "id": None,
        "type": CREATED,
        "action": ACTIONS[CREATED],
        "description": f"Lead created: {lead.get('lead_name', '')}",
        "changed_by": lead.get("created_by"),
        "changed_at": created_at.isoformat() if created_at else None,
        "old_value": None,
        "new_value": None,
        "follow_up_date": None,
        "metadata": {},
    }]
    history.extend(build_history_entry(row) for row in merged)
    history.reverse()
    return history
