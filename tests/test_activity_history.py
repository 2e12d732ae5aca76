"""
Activity reconciliation tests.

Tests:
1-3. Merge and 1-second dedupe window
4-9. Legacy classification precedence
10.  Stored event_kind wins over inference
11.  Full lead history ordering
"""

from datetime import datetime, timedelta

from backend.activity_history import (
    build_history_entry, build_lead_history, classify, infer_event_kind, merge_activities,
)

T0 = datetime(2025, 3, 1, 10, 0, 0)


def _row(id, description, at, activity_type="lead_updated", metadata=None, event_kind=None):
    return {
        "id": id,
        "activity_type": activity_type,
        "event_kind": event_kind,
        "description": description,
        "metadata": metadata or {},
        "employee_id": "ravi",
        "created_at": at,
    }


# ============================================================
# 1-3. Merge
# ============================================================

def test_duplicate_within_window_is_dropped():
    activities = [_row(1, "Status changed", T0)]
    lead_activities = [
        _row(10, "Status changed", T0 + timedelta(milliseconds=400)),
        _row(11, "Status changed", T0 + timedelta(seconds=5)),
        _row(12, "Note: call back", T0 + timedelta(milliseconds=100), activity_type="note"),
    ]
    merged = merge_activities(activities, lead_activities)
    assert [r["id"] for r in merged] == [1, 12, 11]


def test_rows_exactly_one_second_apart_are_kept():
    activities = [_row(1, "Status changed", T0)]
    lead_activities = [
        _row(2, "Status changed", T0 + timedelta(seconds=1)),
        _row(3, "Status changed", T0 + timedelta(milliseconds=999)),
    ]
    assert [r["id"] for r in merge_activities(activities, lead_activities)] == [1, 2]


def test_merge_accepts_iso_strings():
    activities = [_row(1, "Edited", "2025-03-01T10:00:00Z")]
    lead_activities = [_row(2, "Edited", "2025-03-01T10:00:00.900000")]
    assert [r["id"] for r in merge_activities(activities, lead_activities)] == [1]


# ============================================================
# 4-9. Legacy inference
# ============================================================

def test_status_change_from_type_or_metadata():
    assert infer_event_kind(_row(1, "x", T0, activity_type="status_change")) == "status_change"
    row = _row(2, "x", T0, metadata={
        "old_data": {"status": "New"}, "new_data": {"status": "Closed"},
        "changes": ['Priority: "Low Priority" → "High Priority"'],
    })
    # Status wins over a priority change in the same row
    assert infer_event_kind(row) == "status_change"


def test_priority_change_and_values():
    row = _row(1, "Lead updated", T0, metadata={
        "changes": ['Priority: "Low Priority" → "High Priority"', 'Assigned To: "a" → "b"'],
    })
    assert infer_event_kind(row) == "priority_change"
    entry = build_history_entry(row)
    assert entry["old_value"] == "Low Priority"
    assert entry["new_value"] == "High Priority"


def test_reassignment():
    assert infer_event_kind(_row(1, "x", T0, activity_type="employee_reassigned")) == "employee_reassigned"
    row = _row(2, "x", T0, metadata={"changes": ['Assigned To: "ravi" → "meena"']})
    assert infer_event_kind(row) == "employee_reassigned"


def test_note():
    assert infer_event_kind(_row(1, "Call back Monday", T0, activity_type="note")) == "note"


def test_follow_up_and_date_extraction():
    row = _row(1, "x", T0, metadata={"changes": ['Follow-up Date: "None" → "12/04/2025"']})
    assert infer_event_kind(row) == "follow_up"
    assert build_history_entry(row)["follow_up_date"] == "12/04/2025"
    row = _row(2, "Follow-up set for 5-Apr-2025", T0, activity_type="followup")
    assert build_history_entry(row)["follow_up_date"] == "5-Apr-2025"
    row = _row(3, "x", T0, metadata={"follow_up_date": "2025-04-12"})
    assert infer_event_kind(row) == "follow_up"


def test_everything_else_is_edit():
    assert infer_event_kind(_row(1, "Phone updated", T0, metadata={"changes": ['Phone: "1" → "2"']})) == "edit"


# ============================================================
# 10. Stored kind
# ============================================================

def test_stored_kind_wins():
    row = _row(1, "x", T0, activity_type="status_change", event_kind="note")
    assert classify(row) == "note"
    # Unknown stored kinds fall back to inference
    row = _row(2, "x", T0, activity_type="status_change", event_kind="mystery")
    assert classify(row) == "status_change"


# ============================================================
# 11. Lead history
# ============================================================

def test_lead_history_newest_first_with_created_entry():
    lead = {"id": 7, "lead_name": "NH-44 widening", "created_by": "ravi", "created_at": T0}
    activities = [_row(1, "Status changed", T0 + timedelta(hours=1), activity_type="status_change",
                       metadata={"old_value": "New", "new_value": "In Progress"}, event_kind="status_change")]
    lead_activities = [
        _row(2, "Status changed", T0 + timedelta(hours=1, milliseconds=200), activity_type="status_change",
             event_kind="status_change"),
        _row(3, "Site visit done", T0 + timedelta(hours=2), activity_type="note", event_kind="note"),
    ]
    history = build_lead_history(lead, activities, lead_activities)
    assert [h["type"] for h in history] == ["note", "status_change", "created"]
    assert history[1]["old_value"] == "New"
    assert history[1]["new_value"] == "In Progress"
    assert history[-1]["description"] == "Lead created: NH-44 widening"
    assert history[0]["changed_at"] == (T0 + timedelta(hours=2)).isoformat()
