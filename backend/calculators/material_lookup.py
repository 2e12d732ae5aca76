"""
Catalog tables for quotation pricing:
1. Reflective sheeting base rates (₹/ft²) by sheeting type, ACP thickness, printing
2. Sign board categories and the shapes each one allows
3. MS pipe and angle section weights (kg/m) for sign support structures
4. MS fabrication rates (₹/kg) per board category

Everything here is declarative data; calculators read it through MaterialLookup
so they don't depend on the table layout.
"""

import logging

logger = logging.getLogger(__name__)

SHEETING_TYPES = ["Type 1", "Type 4", "Type 11"]
ACP_THICKNESS_OPTIONS = [3, 4]
PRINTING_TYPES = ["Digital Printing with Lamination", "Vinyl / EC (Electrocut)"]

# Base rate ₹/ft², keyed [sheeting][acp][printing]
BASE_RATES_PER_SQFT = {
    "Type 1": {
        "3mm": {"Digital Printing with Lamination": 110, "Vinyl / EC (Electrocut)": 60},
        "4mm": {"Digital Printing with Lamination": 120, "Vinyl / EC (Electrocut)": 70},
    },
    "Type 4": {
        "3mm": {"Digital Printing with Lamination": 130, "Vinyl / EC (Electrocut)": 80},
        "4mm": {"Digital Printing with Lamination": 150, "Vinyl / EC (Electrocut)": 90},
    },
    "Type 11": {
        "3mm": {"Digital Printing with Lamination": 180, "Vinyl / EC (Electrocut)": 120},
        "4mm": {"Digital Printing with Lamination": 210, "Vinyl / EC (Electrocut)": 150},
    },
}

# Fixed add-ons per ft² and profit margin
RIVETING_PACKAGING_PER_SQFT = 5.0
OVERHEAD_PER_SQFT = 15.0
PROFIT_MARGIN = 0.10

BOARD_TYPE_SHAPES = {
    "Mandatory Sign Boards": ["Circular", "Octagonal"],
    "Cautionary Sign Boards": ["Triangle"],
    "Informatory Sign Boards": ["Rectangular"],
    "Place Identification Boards": ["Rectangular"],
    "Advance Direction Boards": ["Rectangular"],
    "Overhead Cantilever": ["Rectangular"],
    "Overhead Gantry": ["Rectangular"],
    "Toll Boards & Facia": ["Rectangular"],
}

# Large overhead/direction structures: lower fabrication rate, and only the
# post weight is charged (the frame is built into the post fabrication)
HEAVY_STRUCTURE_BOARD_TYPES = {
    "Advance Direction Boards",
    "Overhead Cantilever",
    "Overhead Gantry",
}
MS_RATE_HEAVY = 100.0
MS_RATE_STANDARD = 110.0

# MS ERW pipes, IS 1239 medium class, kg per metre
MS_PIPE_WEIGHTS = {
    "pipe_25nb": {"label": "25 NB (33.7 OD x 3.2)", "kg_per_m": 2.41},
    "pipe_32nb": {"label": "32 NB (42.4 OD x 3.2)", "kg_per_m": 3.11},
    "pipe_40nb": {"label": "40 NB (48.3 OD x 3.2)", "kg_per_m": 3.58},
    "pipe_50nb": {"label": "50 NB (60.3 OD x 3.6)", "kg_per_m": 5.03},
    "pipe_65nb": {"label": "65 NB (76.1 OD x 3.6)", "kg_per_m": 6.42},
    "pipe_80nb": {"label": "80 NB (88.9 OD x 4.0)", "kg_per_m": 8.36},
    "pipe_100nb": {"label": "100 NB (114.3 OD x 4.5)", "kg_per_m": 12.20},
}

# MS equal angles, IS 808, kg per metre
MS_ANGLE_WEIGHTS = {
    "angle_25x25x3": {"label": "ISA 25 x 25 x 3", "kg_per_m": 1.10},
    "angle_35x35x5": {"label": "ISA 35 x 35 x 5", "kg_per_m": 2.60},
    "angle_40x40x5": {"label": "ISA 40 x 40 x 5", "kg_per_m": 3.00},
    "angle_50x50x5": {"label": "ISA 50 x 50 x 5", "kg_per_m": 3.80},
    "angle_50x50x6": {"label": "ISA 50 x 50 x 6", "kg_per_m": 4.50},
    "angle_65x65x6": {"label": "ISA 65 x 65 x 6", "kg_per_m": 5.80},
}


def _find_section(table: dict, key: str):
    """Match a section by id or by its display label."""
    if not key:
        return None
    if key in table:
        return table[key]
    for entry in table.values():
        if entry["label"] == key:
            return entry
    return None


class MaterialLookup:
    """
    Looks up catalog rates and section weights.

    Unknown keys return 0.0, which the calculators treat as an incomplete
    selection rather than an error.
    """

    def get_base_rate(self, sheeting_type: str, acp_thickness, printing_type: str) -> float:
        """Base ₹/ft² for a sheeting/ACP/printing combination, 0.0 if not in the table."""
        acp_key = f"{self._acp_label(acp_thickness)}mm"
        rate = (BASE_RATES_PER_SQFT.get(sheeting_type, {})
                .get(acp_key, {})
                .get(printing_type, 0))
        if not rate:
            logger.warning("No base rate for %s / %s / %s", sheeting_type, acp_key, printing_type)
        return float(rate)

    def get_rate_breakdown(self, base_rate: float) -> dict:
        """Add-ons and profit on top of a base ₹/ft² rate."""
        subtotal = base_rate + RIVETING_PACKAGING_PER_SQFT + OVERHEAD_PER_SQFT
        profit = subtotal * PROFIT_MARGIN
        return {
            "base_rate": base_rate,
            "riveting_packaging": RIVETING_PACKAGING_PER_SQFT,
            "overhead": OVERHEAD_PER_SQFT,
            "subtotal": subtotal,
            "profit": profit,
            "final_rate": subtotal + profit,
        }

    def allowed_shapes(self, board_type: str) -> list:
        return list(BOARD_TYPE_SHAPES.get(board_type, []))

    def get_pipe_weight_per_m(self, pipe: str) -> float:
        entry = _find_section(MS_PIPE_WEIGHTS, pipe)
        return entry["kg_per_m"] if entry else 0.0

    def get_angle_weight_per_m(self, angle: str) -> float:
        entry = _find_section(MS_ANGLE_WEIGHTS, angle)
        return entry["kg_per_m"] if entry else 0.0

    def get_ms_rate(self, board_type: str) -> float:
        if board_type in HEAVY_STRUCTURE_BOARD_TYPES:
            return MS_RATE_HEAVY
        return MS_RATE_STANDARD

    def charges_post_only(self, board_type: str) -> bool:
        return board_type in HEAVY_STRUCTURE_BOARD_TYPES

    @staticmethod
    def _acp_label(acp_thickness) -> str:
        text = str(acp_thickness or "").strip().lower().replace("mm", "").strip()
        try:
            value = float(text)
        except ValueError:
            return text
        return str(int(value)) if value.is_integer() else str(value)
