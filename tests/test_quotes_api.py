"""
Quotes and quote drafts API tests.

Tests:
1-6.   Quote CRUD, numbering, status history, validation
7-12.  Draft workflow (enter, confirm, edit demotion, save)
"""

from datetime import datetime

from backend.calculators.barrier import BarrierCalculator
from backend.pricing_engine import PricingEngine


def _thrie_payload():
    fields = {
        "thrie_beam_thickness": "3.0", "thrie_beam_coating_gsm": "550",
        "post_thickness": "5.0", "post_length": "1800", "post_coating_gsm": "550",
        "spacer_thickness": "4.5", "spacer_length": "530", "spacer_coating_gsm": "550",
        "rate_per_kg": "75", "quantity_rm": "400",
    }
    return PricingEngine().build_payload(BarrierCalculator("thrie").calculate(fields), fields)


def _create_quote(client, **overrides):
    body = dict(_thrie_payload(), date="2025-03-14", customer_name="PWD Division 2",
                created_by="ravi")
    body.update(overrides)
    return client.post("/api/quotes/", json=body)


# ============================================================
# 1-6. Quotes
# ============================================================

def test_create_quote(client):
    response = _create_quote(client)
    assert response.status_code == 200
    quote = response.json()
    year = datetime.utcnow().year
    assert quote["quote_number"] == f"EST-{year}-0001"
    assert quote["product"] == "mbcb"
    assert quote["status"] == "draft"
    assert quote["date"] == "2025-03-14"
    assert quote["account_name"] == "PWD Division 2"
    assert quote["raw_payload"]["parts"]["post"]["multiplier"] == 2
    assert len(quote["status_history"]) == 1


def test_quote_numbers_stay_unique_after_delete(client):
    first = _create_quote(client).json()
    second = _create_quote(client).json()
    client.delete(f"/api/quotes/{first['id']}")
    third = _create_quote(client).json()
    numbers = {second["quote_number"], third["quote_number"]}
    assert len(numbers) == 2
    assert third["quote_number"].endswith("0003")


def test_quote_requires_section_and_customer(client):
    assert _create_quote(client, section="  ").status_code == 400
    response = _create_quote(client, customer_name=None)
    assert response.status_code == 400
    assert response.json()["detail"] == "An account or customer name is required"
    assert _create_quote(client, account_id=999).status_code == 404
    # Missing date fails request validation
    body = dict(_thrie_payload(), customer_name="PWD")
    assert client.post("/api/quotes/", json=body).status_code == 422


def test_quote_for_account_and_filters(client, account):
    _create_quote(client, account_id=account["id"], customer_name=None)
    _create_quote(client, section="Signages - Reflective")
    by_account = client.get(f"/api/quotes/?account_id={account['id']}").json()
    assert len(by_account) == 1
    assert by_account[0]["account_name"] == "Highway Builders Ltd"
    signages = client.get("/api/quotes/?product=signages").json()
    assert [q["section"] for q in signages] == ["Signages - Reflective"]


def test_status_history_appends(client):
    quote = _create_quote(client).json()
    client.patch(f"/api/quotes/{quote['id']}/status", json={"status": "sent", "changed_by": "ravi"})
    response = client.patch(f"/api/quotes/{quote['id']}/status",
                            json={"status": "negotiation", "changed_by": "meena"})
    data = response.json()
    assert data["status"] == "negotiation"
    assert [h["status"] for h in data["status_history"]] == ["draft", "sent", "negotiation"]
    assert data["status_history"][-1]["changed_by"] == "meena"
    assert client.patch(f"/api/quotes/{quote['id']}/status", json={"status": "won"}).status_code == 422


def test_comments_and_missing_quote(client):
    quote = _create_quote(client).json()
    response = client.patch(f"/api/quotes/{quote['id']}/comments", json={"comments": "Revise rates"})
    assert response.json()["comments"] == "Revise rates"
    assert client.get("/api/quotes/999").status_code == 404
    assert client.delete("/api/quotes/999").status_code == 404


# ============================================================
# 7-12. Drafts
# ============================================================

THRIE_STEPS = {
    "parts": {
        "thrie_beam_thickness": "3.0", "thrie_beam_coating_gsm": "550",
        "post_thickness": "5.0", "post_length": "1800", "post_coating_gsm": "550",
        "spacer_thickness": "4.5", "spacer_length": "530", "spacer_coating_gsm": "550",
    },
    "fasteners": {"fastener_mode": "default"},
    "rates": {"rate_per_kg": "75"},
    "quantity": {"quantity_rm": "400"},
}

SAVE_HEADER = {"date": "2025-03-14", "customer_name": "NHAI PIU Salem", "created_by": "ravi"}


def _start(client, section_key="thrie"):
    response = client.post("/api/drafts/start", json={"section_key": section_key, "created_by": "ravi"})
    assert response.status_code == 200
    return response.json()["draft_id"]


def _enter_and_confirm(client, draft_id, step, fields):
    response = client.post(f"/api/drafts/{draft_id}/steps/{step}", json={"fields": fields})
    assert response.status_code == 200
    response = client.post(f"/api/drafts/{draft_id}/steps/{step}/confirm")
    assert response.status_code == 200, response.json()
    return response.json()


def _states(status):
    return {s["step"]: s["state"] for s in status["steps"]}


def test_start_draft(client):
    draft_id = _start(client)
    status = client.get(f"/api/drafts/{draft_id}").json()
    assert status["section"] == "Thrie"
    assert set(_states(status).values()) == {"empty"}
    assert status["pending_steps"] == ["parts", "fasteners", "rates", "quantity"]
    assert client.post("/api/drafts/start", json={"section_key": "paint"}).status_code == 400
    assert client.get("/api/drafts/nope").status_code == 404


def test_confirm_requires_entry_and_valid_fields(client):
    draft_id = _start(client)
    # Nothing entered yet
    assert client.post(f"/api/drafts/{draft_id}/steps/fasteners/confirm").status_code == 400
    client.post(f"/api/drafts/{draft_id}/steps/rates", json={"fields": {"rate_per_kg": ""}})
    response = client.post(f"/api/drafts/{draft_id}/steps/rates/confirm")
    assert response.status_code == 400
    assert response.json()["detail"] == "Enter the material rate per kg"
    assert client.post(f"/api/drafts/{draft_id}/steps/paint", json={"fields": {}}).status_code == 404


def test_calculation_covers_confirmed_steps_only(client):
    draft_id = _start(client)
    client.post(f"/api/drafts/{draft_id}/steps/parts", json={"fields": THRIE_STEPS["parts"]})
    status = _enter_and_confirm(client, draft_id, "fasteners", THRIE_STEPS["fasteners"])
    # Parts entered but unconfirmed: only the default fastener weight counts
    assert status["calculation"]["details"]["total_set_weight_kg"] == 3.0
    status = client.post(f"/api/drafts/{draft_id}/steps/parts/confirm").json()
    assert status["calculation"]["details"]["total_set_weight_kg"] > 3.0


def test_full_flow_saves_quote(client):
    draft_id = _start(client)
    for step, fields in THRIE_STEPS.items():
        status = _enter_and_confirm(client, draft_id, step, fields)
    assert status["ready_to_save"] is True
    assert status["calculation"]["is_complete"] is True

    response = client.post(f"/api/drafts/{draft_id}/save", json=SAVE_HEADER)
    assert response.status_code == 200
    saved = response.json()
    assert saved["payload"]["section"] == "Thrie"
    assert saved["payload"]["final_total_cost"] == _thrie_payload()["final_total_cost"]

    quote = client.get(f"/api/quotes/{saved['quote_id']}").json()
    assert quote["customer_name"] == "NHAI PIU Salem"
    assert quote["raw_payload"]["fields"]["quantity_rm"] == "400"

    draft = client.get(f"/api/drafts/{draft_id}").json()
    assert draft["status"] == "saved"
    assert draft["quote_id"] == saved["quote_id"]
    # A saved draft can't be changed or saved again
    assert client.post(f"/api/drafts/{draft_id}/save", json=SAVE_HEADER).status_code == 400


def test_editing_upstream_blocks_save(client):
    draft_id = _start(client)
    for step, fields in THRIE_STEPS.items():
        _enter_and_confirm(client, draft_id, step, fields)

    status = client.post(f"/api/drafts/{draft_id}/steps/parts/edit").json()
    assert _states(status) == {
        "parts": "edited", "fasteners": "edited", "rates": "edited", "quantity": "edited",
    }
    assert status["ready_to_save"] is False
    response = client.post(f"/api/drafts/{draft_id}/save", json=SAVE_HEADER)
    assert response.status_code == 400
    assert response.json()["detail"] == "Confirm these steps before saving: parts, fasteners, rates, quantity"

    for step in THRIE_STEPS:
        client.post(f"/api/drafts/{draft_id}/steps/{step}/confirm")
    assert client.post(f"/api/drafts/{draft_id}/save", json=SAVE_HEADER).status_code == 200


def test_signage_draft_optional_ms_structure(client):
    draft_id = _start(client, "signage")
    _enter_and_confirm(client, draft_id, "board_specs", {
        "board_type": "Informatory Sign Boards", "shape": "Rectangular", "width": 1000, "height": 950,
    })
    status = _enter_and_confirm(client, draft_id, "pricing", {
        "sheeting_type": "Type 1", "acp_thickness": "3",
        "printing_type": "Digital Printing with Lamination", "quantity": 4,
    })
    assert status["ready_to_save"] is True

    # Half-entered MS structure blocks the save until confirmed
    client.post(f"/api/drafts/{draft_id}/steps/ms_structure",
                json={"fields": {"include_ms_structure": True}})
    response = client.post(f"/api/drafts/{draft_id}/save", json=SAVE_HEADER)
    assert response.status_code == 400
    assert "ms_structure" in response.json()["detail"]

    client.post(f"/api/drafts/{draft_id}/steps/ms_structure",
                json={"fields": {"include_ms_structure": False}})
    client.post(f"/api/drafts/{draft_id}/steps/ms_structure/confirm")
    saved = client.post(f"/api/drafts/{draft_id}/save", json=SAVE_HEADER).json()
    assert saved["payload"]["final_total_cost"] == 6006.0
    quote = client.get(f"/api/quotes/{saved['quote_id']}").json()
    assert quote["product"] == "signages"
