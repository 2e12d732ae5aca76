# Steel component weights for metal beam crash barrier assemblies
# Coefficients: IRC:119 / MoRTH 800 profiles, hot-dip galvanized per IS 4759

from typing import Optional

from .calculators.records import PartSpec, PartResult, WeightResult

# Mild steel density in kg/mm³ (7850 kg/m³)
STEEL_DENSITY_KG_PER_MM3 = 7.85e-6

# Galvanizing is applied to both faces of the developed sheet
COATED_FACES = 2

# Developed (flat blank) width and, for fixed-length profiles, the standard
# panel length. Post and spacer lengths come from the selection.
COMPONENT_GEOMETRY = {
    "thrie_beam": {"developed_width_mm": 750.0, "standard_length_mm": 4318.0},
    "w_beam": {"developed_width_mm": 483.0, "standard_length_mm": 4318.0},
    "post": {"developed_width_mm": 350.0, "standard_length_mm": None},
    "spacer": {"developed_width_mm": 300.0, "standard_length_mm": None},
}

COMPONENT_LABELS = {
    "thrie_beam": "Thrie Beam",
    "w_beam": "W-Beam",
    "post": "Post",
    "spacer": "Spacer",
}


def _steps(start: float, stop: float, step: float) -> list:
    count = int(round((stop - start) / step)) + 1
    return [round(start + i * step, 2) for i in range(count)]


COATING_OPTIONS = [350, 400, 450, 500, 550]

# Dropdown options per assembly and component
THICKNESS_OPTIONS = {
    "thrie_beam": _steps(2.0, 3.0, 0.05),
    "w_beam": _steps(2.0, 3.0, 0.05),
    "post": _steps(4.0, 5.0, 0.05),
    "spacer": _steps(4.0, 5.0, 0.05),
}

LENGTH_OPTIONS = {
    "post": _steps(1100, 3000, 100),
    "spacer": {"thrie": [530, 550], "double_w_beam": [330, 360]},
}


def black_weight_kg(developed_width_mm: float, thickness_mm: float, length_mm: float) -> float:
    """Uncoated steel weight of a formed section, from its flat blank."""
    return developed_width_mm * thickness_mm * length_mm * STEEL_DENSITY_KG_PER_MM3


def zinc_weight_kg(developed_width_mm: float, length_mm: float, coating_gsm: float) -> float:
    """Zinc mass for a coating of `coating_gsm` grams per m² on each face."""
    area_sq_m = (developed_width_mm / 1000.0) * (length_mm / 1000.0)
    return COATED_FACES * area_sq_m * coating_gsm / 1000.0


def component_weight(component: str, spec: PartSpec) -> WeightResult:
    """
    Weight of one piece of `component`.

    Pure: the same spec always gives the same result. Expects a validated
    spec (see resolve_part); fixed-length profiles ignore spec.length_mm.
    """
    geometry = COMPONENT_GEOMETRY[component]
    length = geometry["standard_length_mm"] or spec.length_mm
    width = geometry["developed_width_mm"]
    black = black_weight_kg(width, spec.thickness_mm, length)
    zinc = zinc_weight_kg(width, length, spec.coating_gsm)
    return WeightResult(
        black_material_weight_kg=black,
        zinc_weight_kg=zinc,
        total_weight_kg=black + zinc,
    )


def thrie_beam_weight(spec: PartSpec) -> WeightResult:
    return component_weight("thrie_beam", spec)


def w_beam_weight(spec: PartSpec) -> WeightResult:
    return component_weight("w_beam", spec)


def post_weight(spec: PartSpec) -> WeightResult:
    return component_weight("post", spec)


def spacer_weight(spec: PartSpec) -> WeightResult:
    return component_weight("spacer", spec)


def needs_length(component: str) -> bool:
    return COMPONENT_GEOMETRY[component]["standard_length_mm"] is None


def resolve_part(component: str, thickness_mm: Optional[float],
                 length_mm: Optional[float], coating_gsm: Optional[float]) -> PartResult:
    """
    Validate a part selection and compute its weights.

    Missing or non-positive inputs give found=False with a message for the
    form; the weight formula is never called with an incomplete spec.
    """
    inputs = {"thickness": thickness_mm, "length": length_mm, "coating_gsm": coating_gsm}
    if component not in COMPONENT_GEOMETRY:
        return PartResult(component=component, found=False,
                          error=f"Unknown component: {component}", inputs=inputs)

    length_required = needs_length(component)
    missing = (
        not thickness_mm or thickness_mm <= 0
        or not coating_gsm or coating_gsm <= 0
        or (length_required and (not length_mm or length_mm <= 0))
    )
    if missing:
        if length_required:
            message = "Please select thickness, length, and coating GSM"
        else:
            message = "Please select thickness and coating GSM"
        return PartResult(component=component, found=False, error=message, inputs=inputs)

    spec = PartSpec(
        thickness_mm=thickness_mm,
        length_mm=length_mm if length_required else None,
        coating_gsm=coating_gsm,
    )
    return PartResult(
        component=component,
        found=True,
        weights=component_weight(component, spec),
        inputs=inputs,
    )
