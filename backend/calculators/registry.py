"""
Calculator registry — maps section keys to calculator instances.

Section keys are URL-safe; each calculator carries the display section
name stored on quotes (Calculator.SECTION).
"""

from .barrier import BarrierCalculator
from .signage import SignageCalculator
from .base import BaseCalculator

CALCULATOR_REGISTRY: dict[str, tuple] = {
    "thrie": (BarrierCalculator, {"system": "thrie"}),
    "double_w_beam": (BarrierCalculator, {"system": "double_w_beam"}),
    "signage": (SignageCalculator, {}),
}


def get_calculator(section_key: str) -> BaseCalculator:
    """Returns an instance of the calculator for a section key, or raises ValueError."""
    if section_key not in CALCULATOR_REGISTRY:
        raise ValueError(
            f"No calculator registered for section: {section_key}. "
            f"Available: {list(CALCULATOR_REGISTRY.keys())}"
        )
    calculator_class, kwargs = CALCULATOR_REGISTRY[section_key]
    return calculator_class(**kwargs)


def has_calculator(section_key: str) -> bool:
    """Check if a calculator exists for a section key."""
    return section_key in CALCULATOR_REGISTRY


def list_calculators() -> list[str]:
    """List all registered section keys."""
    return list(CALCULATOR_REGISTRY.keys())
