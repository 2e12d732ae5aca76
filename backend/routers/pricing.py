"""
Stateless pricing endpoints.

POST /api/pricing/area           — area of a board shape, with wastage rounding
GET  /api/pricing/catalog        — dropdown options for every section
POST /api/pricing/{section_key}  — run a calculator on posted fields, return
                                   the calculation and the quotation payload
"""

from fastapi import APIRouter, HTTPException

from .. import schemas
from ..calculators.area import SHAPES, SIZE_OPTIONS, compute_area
from ..calculators.material_lookup import (
    ACP_THICKNESS_OPTIONS, BOARD_TYPE_SHAPES, MS_ANGLE_WEIGHTS, MS_PIPE_WEIGHTS,
    PRINTING_TYPES, SHEETING_TYPES,
)
from ..calculators.records import ShapeSpec
from ..calculators.registry import get_calculator, has_calculator, list_calculators
from ..pricing_engine import PricingEngine
from ..weights import COATING_OPTIONS, LENGTH_OPTIONS, THICKNESS_OPTIONS

router = APIRouter(prefix="/pricing", tags=["pricing"])

engine = PricingEngine()


@router.post("/area")
def calculate_area(request: schemas.AreaRequest):
    spec = ShapeSpec(shape=request.shape, size=request.size,
                     width=request.width, height=request.height)
    area = compute_area(spec, apply_wastage=request.apply_wastage)
    if area is None:
        raise HTTPException(status_code=400, detail="Enter a valid shape and positive dimensions")
    return area.model_dump()


@router.get("/catalog")
def get_catalog():
    return {
        "sections": list_calculators(),
        "barrier": {
            "thickness": THICKNESS_OPTIONS,
            "length": LENGTH_OPTIONS,
            "coating_gsm": COATING_OPTIONS,
        },
        "signage": {
            "board_types": BOARD_TYPE_SHAPES,
            "shapes": SHAPES,
            "sizes": SIZE_OPTIONS,
            "sheeting_types": SHEETING_TYPES,
            "acp_thickness": ACP_THICKNESS_OPTIONS,
            "printing_types": PRINTING_TYPES,
            "ms_pipes": {k: v["label"] for k, v in MS_PIPE_WEIGHTS.items()},
            "ms_angles": {k: v["label"] for k, v in MS_ANGLE_WEIGHTS.items()},
        },
    }


@router.post("/{section_key}")
def calculate_section(section_key: str, request: schemas.CalculateRequest):
    if not has_calculator(section_key):
        raise HTTPException(
            status_code=400,
            detail=f"No calculator for section: {section_key}. Available: {list_calculators()}",
        )
    calculator = get_calculator(section_key)
    calculation = calculator.calculate(request.fields)
    return {
        "calculation": calculation,
        "payload": engine.build_payload(calculation, request.fields),
    }
