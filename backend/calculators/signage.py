"""
Reflective sign board calculator, with optional MS support structure.

Board cost = rounded area (ft²) × final rate, where the final rate is the
catalog base rate plus riveting/packaging and overhead, plus 10% profit.
The MS structure is priced by weight and added on top.
"""

import logging
from typing import Optional

from .area import compute_area
from .base import BaseCalculator
from .material_lookup import MaterialLookup
from .records import CostBreakdown, ShapeSpec

logger = logging.getLogger(__name__)

_lookup = MaterialLookup()


def board_costs(area_sq_ft: Optional[float], final_rate: float,
                quantity: Optional[float]) -> CostBreakdown:
    """Cost per piece and total for a board. None where area, rate or quantity are missing."""
    cost_per_piece = final = None
    if area_sq_ft and area_sq_ft > 0 and final_rate > 0:
        cost_per_piece = area_sq_ft * final_rate
    if cost_per_piece is not None and quantity and quantity > 0:
        final = cost_per_piece * quantity
    return CostBreakdown(
        material_cost_per_unit=cost_per_piece,
        total_cost_per_unit=cost_per_piece,
        final_total=final,
    )


def ms_structure_costs(board_type: str, post_weight_per_m: float, post_length_m: float,
                       frame_weight_per_m: float, frame_length_m: float,
                       quantity: Optional[float]) -> dict:
    """
    Weight and cost of the MS structure behind one board, and for the order.

    Advance direction and overhead structures are charged on post weight
    only, at the lower rate.
    """
    post_weight = max(post_length_m or 0.0, 0.0) * post_weight_per_m
    frame_weight = max(frame_length_m or 0.0, 0.0) * frame_weight_per_m
    rate = _lookup.get_ms_rate(board_type)
    if _lookup.charges_post_only(board_type):
        cost_weight = post_weight
    else:
        cost_weight = post_weight + frame_weight

    cost_per_structure = cost_weight * rate if cost_weight > 0 else None
    total = None
    if cost_per_structure is not None and quantity and quantity > 0:
        total = cost_per_structure * quantity
    return {
        "post_weight_kg": post_weight,
        "frame_weight_kg": frame_weight,
        "total_ms_weight_kg": post_weight + frame_weight,
        "cost_weight_kg": cost_weight,
        "ms_rate_per_kg": rate,
        "ms_cost_per_structure": cost_per_structure,
        "total_ms_cost": total,
    }


class SignageCalculator(BaseCalculator):
    """
    Fields:
        board_type, shape, size (mm) or width/height (mm)
        sheeting_type, acp_thickness, printing_type, quantity
        include_ms_structure, ms_post_spec, ms_post_length_m,
        ms_frame_spec, ms_frame_length_m
    """

    SECTION = "Signages - Reflective"
    STEPS = ["board_specs", "pricing", "ms_structure"]
    OPTIONAL_STEPS = {"ms_structure"}

    def calculate(self, fields: dict, confirmed_steps=None) -> dict:
        errors = []
        board_type = fields.get("board_type") or ""
        shape_spec = self._shape_spec(fields)

        area = None
        if self.step_counts("board_specs", confirmed_steps):
            shape_error = self._shape_error(board_type, shape_spec)
            if shape_error:
                errors.append(shape_error)
            else:
                area = compute_area(shape_spec)
                if area is None:
                    errors.append("Enter the board dimensions")

        sheeting = fields.get("sheeting_type")
        acp = fields.get("acp_thickness")
        printing = fields.get("printing_type")
        base_rate = 0.0
        quantity = None
        if self.step_counts("pricing", confirmed_steps):
            base_rate = _lookup.get_base_rate(sheeting, acp, printing)
            if base_rate <= 0:
                errors.append("No rate found for the selected sheeting, ACP and printing")
            quantity = self.parse_number(fields.get("quantity"), None)
        rates = _lookup.get_rate_breakdown(base_rate)
        final_rate = rates["final_rate"] if base_rate > 0 else 0.0

        costs = board_costs(area.area_sq_ft if area else None, final_rate, quantity)

        include_ms = self.parse_bool(fields.get("include_ms_structure"))
        ms = None
        if include_ms and self.step_counts("ms_structure", confirmed_steps):
            ms = ms_structure_costs(
                board_type,
                _lookup.get_pipe_weight_per_m(fields.get("ms_post_spec")),
                self.parse_number(fields.get("ms_post_length_m")),
                _lookup.get_angle_weight_per_m(fields.get("ms_frame_spec")),
                self.parse_number(fields.get("ms_frame_length_m")),
                quantity,
            )

        combined = costs.final_total
        if combined is not None and ms and ms["total_ms_cost"] is not None:
            combined += ms["total_ms_cost"]

        details = {
            "board_type": board_type,
            "shape": shape_spec.shape,
            "size": shape_spec.size,
            "width": shape_spec.width,
            "height": shape_spec.height,
            "area_sq_mm": area.area_sq_mm if area else None,
            "area_sq_m": area.area_sq_m if area else None,
            "area_sq_ft": area.area_sq_ft if area else None,
            "sheeting_type": sheeting,
            "acp_thickness": acp,
            "printing_type": printing,
            "base_rate": rates["base_rate"],
            "riveting_packaging_rate": rates["riveting_packaging"],
            "overhead_rate": rates["overhead"],
            "total_cost_per_sq_ft": rates["subtotal"],
            "profit": rates["profit"],
            "final_rate_per_sq_ft": final_rate,
            "quantity": quantity,
            "cost_per_piece": costs.total_cost_per_unit,
            "final_total": costs.final_total,
            "include_ms_structure": include_ms,
            "ms_post_spec": fields.get("ms_post_spec"),
            "ms_post_length_m": self.parse_number(fields.get("ms_post_length_m"), None),
            "ms_frame_spec": fields.get("ms_frame_spec"),
            "ms_frame_length_m": self.parse_number(fields.get("ms_frame_length_m"), None),
            "ms_structure": ms,
            "combined_total": combined,
        }
        logger.debug("%s calculation: %s ft² at %s/ft²", self.SECTION,
                     details["area_sq_ft"], final_rate)
        return self.make_calculation(self.SECTION, costs, details, errors)

    def validate_step(self, step: str, fields: dict) -> Optional[str]:
        if step == "board_specs":
            board_type = fields.get("board_type") or ""
            if not _lookup.allowed_shapes(board_type):
                return "Select a board type"
            shape_spec = self._shape_spec(fields)
            shape_error = self._shape_error(board_type, shape_spec)
            if shape_error:
                return shape_error
            if compute_area(shape_spec) is None:
                return "Enter the board dimensions"
            return None
        if step == "pricing":
            base_rate = _lookup.get_base_rate(
                fields.get("sheeting_type"), fields.get("acp_thickness"), fields.get("printing_type")
            )
            if base_rate <= 0:
                return "No rate found for the selected sheeting, ACP and printing"
            if not self.positive(self.parse_number(fields.get("quantity"), None)):
                return "Enter the quantity"
            return None
        if step == "ms_structure":
            if not self.parse_bool(fields.get("include_ms_structure")):
                return None
            if _lookup.get_pipe_weight_per_m(fields.get("ms_post_spec")) <= 0:
                return "Select the MS post section"
            if not self.positive(self.parse_number(fields.get("ms_post_length_m"), None)):
                return "Enter the MS post length"
            if (fields.get("ms_frame_spec")
                    and _lookup.get_angle_weight_per_m(fields.get("ms_frame_spec")) <= 0):
                return "Select the MS frame section"
            return None
        raise ValueError(f"Unknown step for {self.SECTION}: {step}")

    # --- internals ---

    def _shape_spec(self, fields: dict) -> ShapeSpec:
        return ShapeSpec(
            shape=fields.get("shape") or "",
            size=self.parse_number(fields.get("size"), None),
            width=self.parse_number(fields.get("width"), None),
            height=self.parse_number(fields.get("height"), None),
        )

    def _shape_error(self, board_type: str, spec: ShapeSpec) -> Optional[str]:
        allowed = _lookup.allowed_shapes(board_type)
        if allowed and spec.shape not in allowed:
            return f"{board_type} must be {' or '.join(allowed)}"
        return None
