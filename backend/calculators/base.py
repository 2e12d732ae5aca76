"""
Abstract base class for all section calculators.

Input: form fields dict (posted directly or accumulated in a quote draft)
Output: calculation dict consumed by PricingEngine.build_payload
"""

from abc import ABC, abstractmethod
from typing import Optional

from .records import CostBreakdown


class BaseCalculator(ABC):
    """All section calculators inherit from this."""

    # Quotation section tag stored on the quote
    SECTION = ""
    # Draft workflow steps, in order; dependent steps come later
    STEPS: list = []
    OPTIONAL_STEPS: set = set()

    @abstractmethod
    def calculate(self, fields: dict, confirmed_steps=None) -> dict:
        """
        Takes the form fields. `confirmed_steps` limits the calculation to
        steps the user has confirmed; None means every step counts.
        Returns a calculation dict with a "costs" CostBreakdown dump.
        """
        pass

    @abstractmethod
    def validate_step(self, step: str, fields: dict) -> Optional[str]:
        """Returns an error message if `step` can't be confirmed yet, else None."""
        pass

    @property
    def required_steps(self) -> list:
        return [s for s in self.STEPS if s not in self.OPTIONAL_STEPS]

    # --- Helper methods for all calculators ---

    def step_counts(self, step: str, confirmed_steps) -> bool:
        """True if outputs depending on `step` may be computed."""
        return confirmed_steps is None or step in confirmed_steps

    def parse_number(self, value, default: Optional[float] = 0.0) -> Optional[float]:
        """Parse a numeric value from user input. Handles '4.5', '4.5mm', ' 200 '."""
        if value is None or value == "":
            return default
        try:
            return float(str(value).strip().rstrip("mm").strip())
        except (ValueError, TypeError):
            return default

    def parse_int(self, value, default: int = 0) -> int:
        """Parse an integer from user input."""
        if value is None or value == "":
            return default
        try:
            return int(float(str(value).strip()))
        except (ValueError, TypeError):
            return default

    def parse_bool(self, value, default: bool = False) -> bool:
        """Parse a checkbox value: true/false, yes/no, 1/0."""
        if value is None or value == "":
            return default
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in ("true", "yes", "1", "on")

    def positive(self, value: Optional[float]) -> bool:
        return value is not None and value > 0

    def make_costs(self, material=None, transport=None, installation=None,
                   total=None, final=None) -> CostBreakdown:
        return CostBreakdown(
            material_cost_per_unit=material,
            transport_cost_per_unit=transport,
            installation_cost_per_unit=installation,
            total_cost_per_unit=total,
            final_total=final,
        )

    def make_calculation(self, section: str, costs: CostBreakdown,
                         details: dict, errors: list = None) -> dict:
        """Build the calculation dict shared by every section."""
        return {
            "section": section,
            "costs": costs.model_dump(),
            "details": details,
            "errors": errors or [],
            "is_complete": costs.final_total is not None,
        }
