"""
Quotation assembler.

Turns a calculator's calculation dict into the quotation payload persisted
on a Quote:

    {section, quantity_rm, total_weight_per_rm, total_cost_per_rm,
     final_total_cost, raw_payload}

Top-level money fields are rounded to 2 decimals; raw_payload keeps every
unrounded intermediate so a quote can be recomputed later.
"""

from datetime import datetime
from typing import Optional

# Product family a section is filed under
PRODUCT_MBCB = "mbcb"
PRODUCT_SIGNAGES = "signages"


def product_for_section(section: str) -> str:
    """Route a section to its product family: signages, else MBCB."""
    lowered = (section or "").lower()
    if "signages" in lowered or "reflective" in lowered:
        return PRODUCT_SIGNAGES
    return PRODUCT_MBCB


def _money(value: Optional[float]) -> Optional[float]:
    return round(value, 2) if value is not None else None


def _weight(value: Optional[float]) -> Optional[float]:
    return round(value, 3) if value is not None else None


class PricingEngine:
    """
    Assembles the quotation payload from a calculation.
    Pure — no database access.
    """

    def build_payload(self, calculation: dict, fields: dict = None) -> dict:
        """
        Args:
            calculation: dict from BaseCalculator.calculate
            fields: the raw form fields, kept in raw_payload for audit

        Returns:
            quotation payload dict
        """
        section = calculation["section"]
        if product_for_section(section) == PRODUCT_SIGNAGES:
            payload = self._signage_payload(calculation)
        else:
            payload = self._barrier_payload(calculation)

        payload["raw_payload"] = {
            **calculation["details"],
            "costs": calculation["costs"],
            "fields": dict(fields or {}),
            "calculated_at": datetime.utcnow().isoformat(),
        }
        return payload

    def _barrier_payload(self, calculation: dict) -> dict:
        details = calculation["details"]
        costs = calculation["costs"]
        return {
            "section": calculation["section"],
            "quantity_rm": details.get("quantity_rm"),
            "total_weight_per_rm": _weight(details.get("weight_per_rm_kg")),
            "total_cost_per_rm": _money(costs["total_cost_per_unit"]),
            "final_total_cost": _money(costs["final_total"]),
        }

    def _signage_payload(self, calculation: dict) -> dict:
        details = calculation["details"]
        costs = calculation["costs"]
        return {
            "section": calculation["section"],
            "quantity_rm": None,
            "total_weight_per_rm": None,
            "total_cost_per_rm": _money(costs["total_cost_per_unit"]),
            "final_total_cost": _money(details.get("combined_total")),
        }

    def build_line_items(self, payload: dict) -> list:
        """
        Line items for the quotation PDF.
        Each: {description, quantity, unit, rate, amount}
        """
        raw = payload.get("raw_payload") or {}
        section = payload.get("section", "")
        items = []

        if product_for_section(section) == PRODUCT_SIGNAGES:
            shape = raw.get("shape") or ""
            if raw.get("shape") == "Rectangular":
                dims = f"{_fmt_dim(raw.get('width'))} x {_fmt_dim(raw.get('height'))} mm"
            else:
                dims = f"{_fmt_dim(raw.get('size'))} mm"
            items.append({
                "description": (
                    f"{raw.get('board_type', 'Sign board')} - {shape} {dims}, "
                    f"{raw.get('sheeting_type', '')} sheeting, {raw.get('acp_thickness', '')} ACP, "
                    f"{raw.get('printing_type', '')} ({raw.get('area_sq_ft') or 0:g} sq ft)"
                ),
                "quantity": raw.get("quantity") or 0,
                "unit": "nos",
                "rate": _money(raw.get("cost_per_piece")) or 0.0,
                "amount": _money(raw.get("final_total")) or 0.0,
            })
            ms = raw.get("ms_structure")
            if ms and ms.get("total_ms_cost") is not None:
                items.append({
                    "description": (
                        f"MS structure - post {raw.get('ms_post_spec', '')}"
                        + (f", frame {raw['ms_frame_spec']}" if raw.get("ms_frame_spec") else "")
                        + f" ({ms['cost_weight_kg']:.2f} kg @ Rs {ms['ms_rate_per_kg']:.0f}/kg)"
                    ),
                    "quantity": raw.get("quantity") or 0,
                    "unit": "nos",
                    "rate": _money(ms["ms_cost_per_structure"]) or 0.0,
                    "amount": _money(ms["total_ms_cost"]) or 0.0,
                })
            return items

        if raw.get("fastener_mode") == "manual":
            items.append({
                "description": (
                    f"Fasteners - {raw.get('hex_bolt_qty', 0)} hex bolts, "
                    f"{raw.get('button_bolt_qty', 0)} button bolts "
                    f"({raw.get('fastener_weight_kg', 0):.3f} kg)"
                ),
                "quantity": 1,
                "unit": "lot",
                "rate": _money(payload.get("final_total_cost")) or 0.0,
                "amount": _money(payload.get("final_total_cost")) or 0.0,
            })
            return items

        items.append({
            "description": (
                f"{section} metal beam crash barrier, hot-dip galvanized "
                f"({payload.get('total_weight_per_rm') or 0:.3f} kg/rm)"
            ),
            "quantity": payload.get("quantity_rm") or 0,
            "unit": "rm",
            "rate": payload.get("total_cost_per_rm") or 0.0,
            "amount": payload.get("final_total_cost") or 0.0,
        })
        return items

    def build_assumptions(self, payload: dict) -> list:
        """Notes printed under the line items."""
        raw = payload.get("raw_payload") or {}
        notes = []
        if product_for_section(payload.get("section", "")) == PRODUCT_SIGNAGES:
            notes.append("Area rounded up to the next half square foot to cover cutting wastage.")
            notes.append("Rates include riveting, packaging, overhead and 10% profit.")
            return notes
        if raw.get("include_transport"):
            notes.append("Transport included at Rs {:.2f}/kg.".format(raw.get("transport_rate_per_kg") or 0))
        else:
            notes.append("Transport extra at actuals.")
        if raw.get("include_installation") and raw.get("installation_rate_per_rm"):
            notes.append("Installation included at Rs {:.2f}/rm.".format(raw["installation_rate_per_rm"]))
        elif raw.get("fastener_mode") != "manual":
            notes.append("Installation not included.")
        notes.append("Weights are theoretical; invoicing on actual weight.")
        return notes


def _fmt_dim(value) -> str:
    if value is None:
        return "-"
    return f"{value:g}"
