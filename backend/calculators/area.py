"""
Board area calculator.

Converts a shape and its dimensions (mm) to mm², m² and ft², then applies
the wastage rounding used when pricing sign boards: the ft² figure is
rounded up to the next half square foot, and m²/mm² are recomputed from it.
"""

import math
from typing import Optional

from .records import AreaResult, ShapeSpec

SQ_MM_PER_SQ_M = 1_000_000.0
SQ_FT_PER_SQ_MM = 0.0000107639
SQ_FT_PER_SQ_M = 10.7639

SHAPES = ["Circular", "Rectangular", "Triangle", "Octagonal"]

# Standard board sizes (mm): diameter, side, or width/height
SIZE_OPTIONS = [300, 600, 750, 900, 1200, 1500]


def _circle(size: float) -> float:
    return math.pi * (size / 2.0) ** 2


def _triangle(size: float) -> float:
    return (math.sqrt(3) / 4.0) * size ** 2


def _octagon(size: float) -> float:
    return 2.0 * (1.0 + math.sqrt(2)) * size ** 2


# Single-dimension shapes; Rectangular is handled separately
SHAPE_FORMULAS = {
    "Circular": _circle,
    "Triangle": _triangle,
    "Octagonal": _octagon,
}


def raw_area_sq_mm(spec: ShapeSpec) -> Optional[float]:
    """Unrounded area in mm², or None when dimensions are missing or not positive."""
    if spec.shape == "Rectangular":
        if not spec.width or not spec.height or spec.width <= 0 or spec.height <= 0:
            return None
        return spec.width * spec.height

    formula = SHAPE_FORMULAS.get(spec.shape)
    if formula is None or not spec.size or spec.size <= 0:
        return None
    return formula(spec.size)


def round_with_wastage(area_sq_ft: float) -> float:
    """
    Round ft² up to the next half foot.

    10.0 -> 10.0, 10.5 -> 10.5, 10.51 -> 11.0, 10.49 -> 10.5, 10.0001 -> 10.5
    """
    whole = math.floor(area_sq_ft)
    fraction = area_sq_ft - whole
    if fraction == 0 or fraction == 0.5:
        return area_sq_ft
    if fraction > 0.5:
        return whole + 1.0
    return whole + 0.5


def compute_area(spec: ShapeSpec, apply_wastage: bool = True) -> Optional[AreaResult]:
    """
    Area of a board in all three units.

    With wastage applied (the default) ft² is a multiple of 0.5 and the other
    two units are derived back from it, so all three agree.
    """
    area_sq_mm = raw_area_sq_mm(spec)
    if area_sq_mm is None:
        return None

    area_sq_ft = area_sq_mm * SQ_FT_PER_SQ_MM
    if not apply_wastage:
        return AreaResult(
            area_sq_mm=area_sq_mm,
            area_sq_m=area_sq_mm / SQ_MM_PER_SQ_M,
            area_sq_ft=area_sq_ft,
        )

    rounded_sq_ft = round_with_wastage(area_sq_ft)
    area_sq_m = rounded_sq_ft / SQ_FT_PER_SQ_M
    return AreaResult(
        area_sq_mm=area_sq_m * SQ_MM_PER_SQ_M,
        area_sq_m=area_sq_m,
        area_sq_ft=rounded_sq_ft,
    )


def calculate_area(shape: str, size: Optional[float] = None,
                   width: Optional[float] = None,
                   height: Optional[float] = None) -> Optional[AreaResult]:
    """Convenience wrapper taking loose dimensions."""
    return compute_area(ShapeSpec(shape=shape, size=size, width=width, height=height))
