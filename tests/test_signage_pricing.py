"""
Reflective signage cost tests.

Tests:
1-3.  Base rate table and rate breakdown
4-5.  Board cost example (143/ft² x 10.5 ft² x 4)
6-8.  Incomplete selections
9-11. MS structure costing
12-13. Signage payload shape, product routing
"""

import pytest

from backend.calculators.material_lookup import MaterialLookup
from backend.calculators.signage import SignageCalculator, board_costs, ms_structure_costs
from backend.pricing_engine import PricingEngine, product_for_section


def _sample_signage_fields(**overrides):
    """Informatory board, 1000 x 950 mm (rounds to 10.5 ft²), 4 pieces."""
    fields = {
        "board_type": "Informatory Sign Boards",
        "shape": "Rectangular",
        "width": 1000,
        "height": 950,
        "sheeting_type": "Type 1",
        "acp_thickness": "3",
        "printing_type": "Digital Printing with Lamination",
        "quantity": 4,
    }
    fields.update(overrides)
    return fields


# ============================================================
# 1-3. Rates
# ============================================================

def test_base_rate_lookup():
    lookup = MaterialLookup()
    assert lookup.get_base_rate("Type 1", 3, "Digital Printing with Lamination") == 110
    assert lookup.get_base_rate("Type 11", "4mm", "Vinyl / EC (Electrocut)") == 150
    assert lookup.get_base_rate("Type 4", "4", "Digital Printing with Lamination") == 150


def test_unknown_rate_is_zero():
    lookup = MaterialLookup()
    assert lookup.get_base_rate("Type 9", 3, "Digital Printing with Lamination") == 0.0
    assert lookup.get_base_rate("Type 1", 5, "Digital Printing with Lamination") == 0.0


def test_rate_breakdown():
    rates = MaterialLookup().get_rate_breakdown(110)
    assert rates["subtotal"] == 130
    assert rates["profit"] == pytest.approx(13.0)
    assert rates["final_rate"] == pytest.approx(143.0)


# ============================================================
# 4-5. Board cost example
# ============================================================

def test_board_cost_example():
    costs = board_costs(10.5, 143.0, 4)
    assert costs.total_cost_per_unit == pytest.approx(1501.5)
    assert costs.final_total == pytest.approx(6006.0)


def test_signage_calculator_example():
    result = SignageCalculator().calculate(_sample_signage_fields())
    details = result["details"]
    assert details["area_sq_ft"] == 10.5
    assert details["final_rate_per_sq_ft"] == pytest.approx(143.0)
    assert details["cost_per_piece"] == pytest.approx(1501.5)
    assert result["costs"]["final_total"] == pytest.approx(6006.0)
    assert details["combined_total"] == pytest.approx(6006.0)
    assert result["is_complete"]


# ============================================================
# 6-8. Incomplete selections
# ============================================================

def test_unknown_rate_leaves_costs_null():
    result = SignageCalculator().calculate(_sample_signage_fields(sheeting_type="Type 7"))
    assert result["costs"]["total_cost_per_unit"] is None
    assert result["costs"]["final_total"] is None
    assert "No rate found for the selected sheeting, ACP and printing" in result["errors"]


def test_shape_not_allowed_for_board_type():
    calc = SignageCalculator()
    fields = _sample_signage_fields(board_type="Mandatory Sign Boards")
    result = calc.calculate(fields)
    assert result["details"]["area_sq_ft"] is None
    assert result["errors"][0] == "Mandatory Sign Boards must be Circular or Octagonal"
    assert calc.validate_step("board_specs", fields) == "Mandatory Sign Boards must be Circular or Octagonal"


def test_zero_quantity_gives_no_total():
    result = SignageCalculator().calculate(_sample_signage_fields(quantity=0))
    assert result["costs"]["total_cost_per_unit"] == pytest.approx(1501.5)
    assert result["costs"]["final_total"] is None


# ============================================================
# 9-11. MS structure
# ============================================================

def test_ms_structure_standard_board():
    """Standard boards charge post + frame at 110/kg."""
    ms = ms_structure_costs("Informatory Sign Boards", 5.03, 3.0, 3.0, 4.0, 4)
    assert ms["post_weight_kg"] == pytest.approx(15.09)
    assert ms["frame_weight_kg"] == pytest.approx(12.0)
    assert ms["ms_rate_per_kg"] == 110
    assert ms["ms_cost_per_structure"] == pytest.approx(27.09 * 110)
    assert ms["total_ms_cost"] == pytest.approx(27.09 * 110 * 4)


def test_ms_structure_overhead_charges_post_only():
    ms = ms_structure_costs("Overhead Gantry", 12.2, 7.0, 5.8, 10.0, 2)
    assert ms["ms_rate_per_kg"] == 100
    assert ms["cost_weight_kg"] == pytest.approx(85.4)
    assert ms["total_ms_weight_kg"] == pytest.approx(85.4 + 58.0)
    assert ms["total_ms_cost"] == pytest.approx(85.4 * 100 * 2)


def test_ms_structure_added_to_board_total():
    fields = _sample_signage_fields(
        include_ms_structure=True,
        ms_post_spec="pipe_50nb",
        ms_post_length_m=3.0,
        ms_frame_spec="ISA 40 x 40 x 5",
        ms_frame_length_m=4.0,
    )
    calc = SignageCalculator()
    assert calc.validate_step("ms_structure", fields) is None
    result = calc.calculate(fields)
    ms_total = (3.0 * 5.03 + 4.0 * 3.0) * 110 * 4
    assert result["details"]["ms_structure"]["total_ms_cost"] == pytest.approx(ms_total)
    assert result["details"]["combined_total"] == pytest.approx(6006.0 + ms_total)
    # Board cost itself is not blended with the MS cost
    assert result["costs"]["final_total"] == pytest.approx(6006.0)


# ============================================================
# 12-13. Payload
# ============================================================

def test_signage_payload():
    fields = _sample_signage_fields(
        include_ms_structure=True, ms_post_spec="pipe_50nb", ms_post_length_m=3.0,
    )
    calculation = SignageCalculator().calculate(fields)
    payload = PricingEngine().build_payload(calculation, fields)
    assert payload["section"] == "Signages - Reflective"
    assert payload["quantity_rm"] is None
    assert payload["total_weight_per_rm"] is None
    assert payload["total_cost_per_rm"] == 1501.5
    assert payload["final_total_cost"] == round(6006.0 + 3.0 * 5.03 * 110 * 4, 2)
    raw = payload["raw_payload"]
    assert raw["area_sq_ft"] == 10.5
    assert raw["base_rate"] == 110
    assert raw["ms_structure"]["post_weight_kg"] == pytest.approx(15.09)


def test_product_routing():
    assert product_for_section("Signages - Reflective") == "signages"
    assert product_for_section("Thrie") == "mbcb"
    assert product_for_section("Double W-Beam") == "mbcb"
    # Sections without a calculator of their own are filed as MBCB
    assert product_for_section("Road Marking Paint") == "mbcb"
