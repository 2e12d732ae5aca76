"""
Immutable value records passed between the calculators.

Every recalculation builds new instances; nothing here is mutated after
creation. Validation of user input happens where the records are built
(resolve_part, ShapeSpec construction in area.py), not inside the formulas.
"""

from typing import Optional

from pydantic import BaseModel


class PartSpec(BaseModel):
    """Thickness, optional length and zinc coating of one steel component."""
    thickness_mm: float
    length_mm: Optional[float] = None
    coating_gsm: float

    class Config:
        frozen = True


class WeightResult(BaseModel):
    """Per-piece weights in kg. total == black + zinc."""
    black_material_weight_kg: float
    zinc_weight_kg: float
    total_weight_kg: float

    class Config:
        frozen = True


class PartResult(BaseModel):
    """Outcome of resolving a part selection from the form."""
    component: str
    found: bool
    error: Optional[str] = None
    weights: Optional[WeightResult] = None
    inputs: dict = {}

    class Config:
        frozen = True


class ShapeSpec(BaseModel):
    shape: str
    size: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None

    class Config:
        frozen = True


class AreaResult(BaseModel):
    area_sq_mm: float
    area_sq_m: float
    area_sq_ft: float

    class Config:
        frozen = True


class CostBreakdown(BaseModel):
    """
    Cost fields for one quotation line. Each stays None until its inputs
    are present: a rate, a positive weight or area, a positive quantity.
    """
    material_cost_per_unit: Optional[float] = None
    transport_cost_per_unit: Optional[float] = None
    installation_cost_per_unit: Optional[float] = None
    total_cost_per_unit: Optional[float] = None
    final_total: Optional[float] = None

    class Config:
        frozen = True
