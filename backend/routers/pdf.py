"""
PDF download endpoint.

GET /api/quotes/{quote_id}/pdf — download the quotation PDF.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..pdf_generator import generate_quote_pdf
from ..pricing_engine import PricingEngine
from .quotes import _get_quote, _quote_to_dict

router = APIRouter(prefix="/quotes", tags=["pdf"])

engine = PricingEngine()


@router.get("/{quote_id}/pdf")
def download_pdf(quote_id: int, db: Session = Depends(get_db)):
    """
    Generate and download a quotation PDF.

    Returns: application/pdf
    """
    quote = _quote_to_dict(_get_quote(quote_id, db))
    payload = {
        "section": quote["section"],
        "quantity_rm": quote["quantity_rm"],
        "total_weight_per_rm": quote["total_weight_per_rm"],
        "total_cost_per_rm": quote["total_cost_per_rm"],
        "final_total_cost": quote["final_total_cost"],
        "raw_payload": quote["raw_payload"],
    }
    company = {
        "name": settings.COMPANY_NAME,
        "address": settings.COMPANY_ADDRESS,
        "phone": settings.COMPANY_PHONE,
        "email": settings.COMPANY_EMAIL,
        "valid_days": settings.QUOTE_VALID_DAYS,
    }

    # Convert bytearray to bytes for Response compatibility
    pdf_bytes = bytes(generate_quote_pdf(
        quote, company, engine.build_line_items(payload), engine.build_assumptions(payload),
    ))

    filename = f"Quotation-{quote['quote_number'] or quote_id}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
        },
    )
