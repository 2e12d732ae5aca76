"""
Lead tests — priority normalisation, change events, leads API.

Tests:
1-2.  normalize_priority table
3-4.  build_change_events
5-9.  Leads API (create, update, notes, follow-up, history)
"""

import logging
from datetime import date

import pytest

from backend.leads import build_change_events, describe_change, normalize_priority


# ============================================================
# 1-2. Priority normalisation
# ============================================================

@pytest.mark.parametrize("value,expected", [
    ("High Priority", "High Priority"),
    ("Medium Priority", "Medium Priority"),
    ("Low Priority", "Low Priority"),
    ("High", "High Priority"),
    ("medium", "Medium Priority"),
    ("  LOW ", "Low Priority"),
    ("low priority", "Low Priority"),
    (None, None),
    ("", None),
    ("null", None),
    ("None", None),
])
def test_normalize_priority(value, expected):
    assert normalize_priority(value) == expected


def test_invalid_priority_is_dropped_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="backend.leads"):
        assert normalize_priority("Urgent") is None
    assert "Urgent" in caplog.text


# ============================================================
# 3-4. Change events
# ============================================================

def test_change_events_one_per_kind():
    old = {"lead_name": "NH-44", "status": "New", "priority": "Low Priority",
           "assigned_employee": "ravi", "phone": "111", "follow_up_date": None}
    new = dict(old, status="In Progress", priority="High Priority",
               assigned_employee="meena", phone="222", follow_up_date=date(2025, 4, 12))
    events = build_change_events(old, new)
    kinds = [e["event_kind"] for e in events]
    assert kinds == ["status_change", "priority_change", "employee_reassigned", "follow_up", "edit"]

    priority = events[1]
    assert priority["description"] == 'Priority: "Low Priority" → "High Priority"'
    assert priority["metadata"]["old_value"] == "Low Priority"
    follow_up = events[3]
    assert follow_up["metadata"]["follow_up_date"] == "2025-04-12"
    assert follow_up["description"] == "Follow-up scheduled for 12/04/2025"
    assert events[4]["metadata"]["changes"] == ['Phone: "111" → "222"']


def test_no_changes_no_events():
    snapshot = {"lead_name": "NH-44", "status": "New", "priority": None}
    assert build_change_events(snapshot, dict(snapshot)) == []
    assert describe_change("Priority", None, "High Priority") == 'Priority: "None" → "High Priority"'


# ============================================================
# 5-9. API
# ============================================================

def _create_lead(client, **overrides):
    body = {
        "lead_name": "NH-44 widening package 3",
        "contact_person": "S. Kumar",
        "phone": "9876543210",
        "requirements": "Thrie beam, 2 km",
        "assigned_employee": "ravi",
        "priority": "High",
        "created_by": "ravi",
    }
    body.update(overrides)
    return client.post("/api/leads/", json=body)


def test_create_lead_normalises_priority(client):
    response = _create_lead(client)
    assert response.status_code == 200
    data = response.json()
    assert data["priority"] == "High Priority"
    assert data["status"] == "New"


def test_create_lead_rejects_bad_status(client):
    response = _create_lead(client, status="Won")
    assert response.status_code == 400


def test_update_lead_logs_structured_events(client, account):
    lead = _create_lead(client, account_id=account["id"]).json()
    response = client.patch(f"/api/leads/{lead['id']}", json={
        "status": "In Progress", "priority": "low", "updated_by": "meena",
    })
    assert response.status_code == 200
    assert response.json()["priority"] == "Low Priority"

    history = client.get(f"/api/leads/{lead['id']}/history").json()["history"]
    types = [h["type"] for h in history]
    # Mirrored rows in both tables appear once
    assert types.count("status_change") == 1
    assert types.count("priority_change") == 1
    assert types[-1] == "created"
    priority = next(h for h in history if h["type"] == "priority_change")
    assert priority["old_value"] == "High Priority"
    assert priority["new_value"] == "Low Priority"
    assert priority["changed_by"] == "meena"


def test_clearing_priority(client):
    lead = _create_lead(client).json()
    response = client.patch(f"/api/leads/{lead['id']}", json={"priority": None})
    assert response.status_code == 200
    assert response.json()["priority"] is None
    # Omitting the field leaves it alone
    client.patch(f"/api/leads/{lead['id']}", json={"priority": "Medium"})
    response = client.patch(f"/api/leads/{lead['id']}", json={"phone": "000"})
    assert response.json()["priority"] == "Medium Priority"


def test_notes_and_follow_up(client):
    lead = _create_lead(client).json()
    assert client.post(f"/api/leads/{lead['id']}/notes", json={"text": "  "}).status_code == 400
    client.post(f"/api/leads/{lead['id']}/notes", json={"text": "Sent catalogue", "employee_id": "ravi"})
    response = client.post(f"/api/leads/{lead['id']}/follow-up", json={
        "follow_up_date": "2025-04-12", "employee_id": "ravi",
    })
    assert response.status_code == 200
    assert response.json()["status"] == "Follow-up"
    assert response.json()["follow_up_date"] == "2025-04-12"

    history = client.get(f"/api/leads/{lead['id']}/history").json()["history"]
    types = {h["type"] for h in history}
    assert {"note", "follow_up", "status_change", "created"} <= types
    follow_up = next(h for h in history if h["type"] == "follow_up")
    assert follow_up["follow_up_date"] == "2025-04-12"


def test_missing_lead_404(client):
    assert client.get("/api/leads/999").status_code == 404
    assert client.get("/api/leads/999/history").status_code == 404
