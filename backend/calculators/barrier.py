"""
Metal beam crash barrier calculator — Thrie and Double W-Beam assemblies.

One set covers 4 running metres and is made of beams, posts, spacers and a
fastener kit. Weight per running metre drives material and transport cost.
"""

import logging
from typing import Optional

from .base import BaseCalculator
from .records import CostBreakdown
from ..weights import COMPONENT_LABELS, resolve_part

logger = logging.getLogger(__name__)

RUNNING_METRES_PER_SET = 4.0

HEX_BOLT_WEIGHT_KG = 0.135
BUTTON_BOLT_WEIGHT_KG = 0.145

# Pieces of each component per set
ASSEMBLY_MULTIPLIERS = {
    "thrie": {"thrie_beam": 1, "post": 2, "spacer": 2},
    "double_w_beam": {"w_beam": 2, "post": 2, "spacer": 4},
}

# Default fastener kit weight per set (kg)
DEFAULT_FASTENER_WEIGHT_KG = {
    "thrie": 3.0,
    "double_w_beam": 4.0,
}

SYSTEM_SECTIONS = {
    "thrie": "Thrie",
    "double_w_beam": "Double W-Beam",
}


def fastener_weight(manual: bool, hex_bolt_qty: int = 0, button_bolt_qty: int = 0,
                    system: str = "thrie") -> float:
    """Fastener kit weight: the system's standard kit, or counted bolts in manual mode."""
    if not manual:
        return DEFAULT_FASTENER_WEIGHT_KG[system]
    return hex_bolt_qty * HEX_BOLT_WEIGHT_KG + button_bolt_qty * BUTTON_BOLT_WEIGHT_KG


def barrier_costs(set_weight_kg: float, rate_per_kg: Optional[float],
                  transport_rate_per_kg: Optional[float] = None,
                  installation_rate_per_rm: Optional[float] = None,
                  quantity_rm: Optional[float] = None) -> CostBreakdown:
    """
    Per running metre costs for a full assembly.

    Pass transport/installation rates only when they are enabled on the form.
    """
    kg_per_rm = set_weight_kg / RUNNING_METRES_PER_SET
    material = transport = installation = total = final = None

    if kg_per_rm > 0 and rate_per_kg and rate_per_kg > 0:
        material = kg_per_rm * rate_per_kg
    if kg_per_rm > 0 and transport_rate_per_kg and transport_rate_per_kg > 0:
        transport = kg_per_rm * transport_rate_per_kg
    if installation_rate_per_rm and installation_rate_per_rm > 0:
        installation = installation_rate_per_rm

    if material is not None:
        total = material + (transport or 0.0) + (installation or 0.0)
    if total is not None and quantity_rm and quantity_rm > 0:
        final = total * quantity_rm

    return CostBreakdown(
        material_cost_per_unit=material,
        transport_cost_per_unit=transport,
        installation_cost_per_unit=installation,
        total_cost_per_unit=total,
        final_total=final,
    )


def manual_fastener_costs(fastener_weight_kg: float, rate_per_kg: Optional[float],
                          transport_rate_per_kg: Optional[float] = None) -> CostBreakdown:
    """
    Costs for a fasteners-only order. The total is absolute, not per metre,
    and is not multiplied by a quantity.
    """
    material = transport = final = None
    if fastener_weight_kg > 0 and rate_per_kg and rate_per_kg > 0:
        material = fastener_weight_kg * rate_per_kg
    if fastener_weight_kg > 0 and transport_rate_per_kg and transport_rate_per_kg > 0:
        transport = fastener_weight_kg * transport_rate_per_kg
    if material is not None:
        final = material + (transport or 0.0)
    return CostBreakdown(
        material_cost_per_unit=material,
        transport_cost_per_unit=transport,
        total_cost_per_unit=final,
        final_total=final,
    )


class BarrierCalculator(BaseCalculator):
    """
    Fields:
        {component}_thickness, {component}_length, {component}_coating_gsm,
        include_{component} — per component of the system
        fastener_mode — "default" or "manual"; hex_bolt_qty, button_bolt_qty
        rate_per_kg, include_transport, transport_rate_per_kg,
        include_installation, installation_rate_per_rm, quantity_rm
    """

    STEPS = ["parts", "fasteners", "rates", "quantity"]

    def __init__(self, system: str = "thrie"):
        if system not in ASSEMBLY_MULTIPLIERS:
            raise ValueError(f"Unknown barrier system: {system}")
        self.system = system
        self.SECTION = SYSTEM_SECTIONS[system]
        self.multipliers = ASSEMBLY_MULTIPLIERS[system]

    def calculate(self, fields: dict, confirmed_steps=None) -> dict:
        manual = self._is_manual(fields)
        parts = self._resolve_parts(fields)
        errors = [f"{COMPONENT_LABELS[c]}: {p['error']}"
                  for c, p in parts.items() if p["included"] and not p["found"]]

        hex_qty = self.parse_int(fields.get("hex_bolt_qty"))
        button_qty = self.parse_int(fields.get("button_bolt_qty"))
        fasteners_kg = 0.0
        if self.step_counts("fasteners", confirmed_steps):
            fasteners_kg = fastener_weight(manual, hex_qty, button_qty, self.system)

        # Parts only contribute once the parts step is confirmed, and never in
        # manual mode where only the counted bolts are priced
        parts_count = not manual and self.step_counts("parts", confirmed_steps)
        total_black = total_zinc = parts_weight = 0.0
        for component, part in parts.items():
            weight_in_set = 0.0
            if parts_count and part["included"] and part["found"]:
                multiplier = part["multiplier"]
                total_black += part["weights"]["black_material_weight_kg"] * multiplier
                total_zinc += part["weights"]["zinc_weight_kg"] * multiplier
                weight_in_set = part["weights"]["total_weight_kg"] * multiplier
                parts_weight += weight_in_set
            part["weight_in_set_kg"] = weight_in_set

        set_weight = parts_weight + fasteners_kg

        rate = transport_rate = installation_rate = quantity = None
        include_transport = self.parse_bool(fields.get("include_transport"))
        include_installation = self.parse_bool(fields.get("include_installation"))
        if self.step_counts("rates", confirmed_steps):
            rate = self.parse_number(fields.get("rate_per_kg"), None)
            if include_transport:
                transport_rate = self.parse_number(fields.get("transport_rate_per_kg"), None)
            if include_installation and not manual:
                installation_rate = self.parse_number(fields.get("installation_rate_per_rm"), None)
        if self.step_counts("quantity", confirmed_steps):
            quantity = self.parse_number(fields.get("quantity_rm"), None)

        if manual:
            costs = manual_fastener_costs(set_weight, rate, transport_rate)
        else:
            costs = barrier_costs(set_weight, rate, transport_rate, installation_rate, quantity)

        if set_weight <= 0 and not errors:
            errors.append("No components selected")
        if costs.material_cost_per_unit is None and set_weight > 0:
            errors.append("Enter the material rate per kg")

        details = {
            "system": self.system,
            "parts": parts,
            "fastener_mode": "manual" if manual else "default",
            "hex_bolt_qty": hex_qty,
            "button_bolt_qty": button_qty,
            "fastener_weight_kg": fasteners_kg,
            "total_black_material_weight_kg": 0.0 if manual else total_black,
            "total_zinc_weight_kg": 0.0 if manual else total_zinc,
            "total_set_weight_kg": set_weight,
            "running_metres_per_set": RUNNING_METRES_PER_SET,
            "weight_per_rm_kg": set_weight / RUNNING_METRES_PER_SET,
            "rate_per_kg": rate,
            "include_transport": include_transport,
            "transport_rate_per_kg": transport_rate,
            "include_installation": include_installation,
            "installation_rate_per_rm": installation_rate,
            "quantity_rm": None if manual else quantity,
        }
        logger.debug("%s calculation: set weight %.3f kg", self.SECTION, set_weight)
        return self.make_calculation(self.SECTION, costs, details, errors)

    def validate_step(self, step: str, fields: dict) -> Optional[str]:
        manual = self._is_manual(fields)
        if step == "parts":
            if manual:
                return None
            parts = self._resolve_parts(fields)
            included = [p for p in parts.values() if p["included"]]
            if not included:
                return "Select at least one component"
            for component, part in parts.items():
                if part["included"] and not part["found"]:
                    return f"{COMPONENT_LABELS[component]}: {part['error']}"
            return None
        if step == "fasteners":
            if not manual:
                return None
            hex_qty = self.parse_int(fields.get("hex_bolt_qty"))
            button_qty = self.parse_int(fields.get("button_bolt_qty"))
            if hex_qty < 0 or button_qty < 0 or hex_qty + button_qty == 0:
                return "Enter hex or button bolt quantities"
            return None
        if step == "rates":
            if not self.positive(self.parse_number(fields.get("rate_per_kg"), None)):
                return "Enter the material rate per kg"
            if (self.parse_bool(fields.get("include_transport"))
                    and not self.positive(self.parse_number(fields.get("transport_rate_per_kg"), None))):
                return "Enter the transport rate per kg"
            if (not manual and self.parse_bool(fields.get("include_installation"))
                    and not self.positive(self.parse_number(fields.get("installation_rate_per_rm"), None))):
                return "Enter the installation rate per running metre"
            return None
        if step == "quantity":
            if manual:
                return None
            if not self.positive(self.parse_number(fields.get("quantity_rm"), None)):
                return "Enter the quantity in running metres"
            return None
        raise ValueError(f"Unknown step for {self.SECTION}: {step}")

    # --- internals ---

    def _is_manual(self, fields: dict) -> bool:
        return str(fields.get("fastener_mode") or "default").strip().lower() == "manual"

    def _resolve_parts(self, fields: dict) -> dict:
        parts = {}
        for component, multiplier in self.multipliers.items():
            result = resolve_part(
                component,
                self.parse_number(fields.get(f"{component}_thickness"), None),
                self.parse_number(fields.get(f"{component}_length"), None),
                self.parse_number(fields.get(f"{component}_coating_gsm"), None),
            )
            entry = result.model_dump()
            entry["included"] = self.parse_bool(fields.get(f"include_{component}"), default=True)
            entry["multiplier"] = multiplier
            parts[component] = entry
        return parts
