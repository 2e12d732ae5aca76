"""
PDF Quotation Generator.

Generates the customer-facing quotation PDF for a saved Quote.
Uses fpdf2 (pure Python, no system dependencies).

Sections:
1. Header (company, estimate number, date, validity, customer)
2. Line items
3. Total
4. Notes & terms

Amounts use Indian digit grouping (12,34,567.00). Built-in PDF fonts are
latin-1 only, so the rupee sign is written as "Rs.".
"""

from datetime import datetime

from fpdf import FPDF

LAKH = 100_000
CRORE = 10_000_000


def format_indian_number(value, decimals: int = 2) -> str:
    """Group digits the Indian way: last three, then pairs. 1234567.8 -> 12,34,567.80"""
    try:
        number = float(value)
    except (ValueError, TypeError):
        number = 0.0
    text = f"{abs(number):.{decimals}f}"
    whole, _, fraction = text.partition(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    sign = "-" if number < 0 and float(text) != 0 else ""
    return f"{sign}{whole}.{fraction}" if fraction else f"{sign}{whole}"


def format_indian_units(value) -> str:
    """Short amount for dashboards: 95,000 / 12.5 Lakhs / 3.2 Crores."""
    try:
        number = float(value)
    except (ValueError, TypeError):
        number = 0.0
    if abs(number) < LAKH:
        return format_indian_number(number, 0)
    if abs(number) < CRORE:
        return f"{number / LAKH:.1f} Lakhs"
    return f"{number / CRORE:.1f} Crores"


def _fmt(amount) -> str:
    """Format a number as Rs. X,XX,XXX.XX"""
    return f"Rs. {format_indian_number(amount or 0)}"


def _qty(value) -> str:
    try:
        return f"{float(value):g}"
    except (ValueError, TypeError):
        return "-"


def _safe(text: str) -> str:
    """Replace Unicode chars that can't be rendered by built-in PDF fonts (latin-1)."""
    if not text:
        return ""
    return (
        text
        .replace("₹", "Rs.")  # rupee sign
        .replace("→", "->")   # arrow
        .replace("•", "-")    # bullet
        .replace("—", " - ")  # em dash
        .replace("–", "-")    # en dash
        .replace("“", '"')
        .replace("”", '"')
        .replace("‘", "'")
        .replace("’", "'")
        .encode("latin-1", errors="replace")
        .decode("latin-1")
    )


class QuotePDF(FPDF):
    """Custom PDF class for quotation documents."""

    def __init__(self, company_name="", company_info=""):
        super().__init__()
        self.company_name = company_name
        self.company_info = company_info
        self.set_auto_page_break(auto=True, margin=20)

    def header(self):
        pass  # Drawn once on the first page by generate_quote_pdf

    def footer(self):
        self.set_y(-15)
        self.set_font("Helvetica", "I", 8)
        self.set_text_color(150, 150, 150)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="C")

    def section_header(self, title):
        """Render a section header bar."""
        self.set_font("Helvetica", "B", 11)
        self.set_fill_color(20, 60, 110)
        self.set_text_color(255, 255, 255)
        self.cell(0, 8, f"  {title}", fill=True, new_x="LMARGIN", new_y="NEXT")
        self.set_text_color(0, 0, 0)
        self.ln(2)

    def table_header(self, cols):
        """Render a table header row. cols: [(label, width), ...]"""
        self.set_font("Helvetica", "B", 8)
        self.set_fill_color(240, 240, 240)
        for label, width in cols:
            align = "R" if label in ("Qty", "Rate", "Amount") else "L"
            self.cell(width, 6, label, border="B", fill=True, align=align)
        self.ln()

    def item_row(self, description, qty, unit, rate, amount, widths):
        """Line item with a wrapping description."""
        self.set_font("Helvetica", "", 8)
        x, y = self.get_x(), self.get_y()
        self.multi_cell(widths[0], 5, _safe(description))
        bottom = self.get_y()
        self.set_xy(x + widths[0], y)
        self.cell(widths[1], 5, _qty(qty), align="R")
        self.cell(widths[2], 5, _safe(unit), align="L")
        self.cell(widths[3], 5, _fmt(rate), align="R")
        self.cell(widths[4], 5, _fmt(amount), align="R")
        self.set_xy(self.l_margin, max(bottom, y + 5) + 1)


def generate_quote_pdf(quote: dict, company: dict, line_items: list, notes: list = None) -> bytes:
    """
    Generate a quotation PDF.

    Args:
        quote: Quote dict (quote_number, date, account_name, purpose, section,
               final_total_cost)
        company: {name, address, phone, email, valid_days}
        line_items: [{description, quantity, unit, rate, amount}]
        notes: printed under the total

    Returns:
        PDF bytes
    """
    company_name = company.get("name") or "Quotation"
    info_parts = [p for p in (company.get("address"), company.get("phone"), company.get("email")) if p]
    company_info = " | ".join(info_parts)

    pdf = QuotePDF(company_name=company_name, company_info=company_info)
    pdf.alias_nb_pages()
    pdf.add_page()
    pw = pdf.w - pdf.l_margin - pdf.r_margin  # printable width

    # ── Header ──
    pdf.set_font("Helvetica", "B", 20)
    pdf.cell(0, 10, _safe(company_name), new_x="LMARGIN", new_y="NEXT")
    if company_info:
        pdf.set_font("Helvetica", "", 9)
        pdf.set_text_color(100, 100, 100)
        pdf.cell(0, 5, _safe(company_info), new_x="LMARGIN", new_y="NEXT")
        pdf.set_text_color(0, 0, 0)
    pdf.ln(4)

    quote_date = quote.get("date") or quote.get("created_at") or ""
    try:
        date_str = datetime.fromisoformat(str(quote_date)).strftime("%d %B %Y")
    except ValueError:
        date_str = datetime.utcnow().strftime("%d %B %Y")

    pdf.set_font("Helvetica", "B", 14)
    pdf.cell(0, 8, f"QUOTATION {_safe(quote.get('quote_number') or '')}", new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", "", 10)
    pdf.cell(0, 5, f"Date: {date_str}", new_x="LMARGIN", new_y="NEXT")
    pdf.cell(0, 5, f"Valid for: {company.get('valid_days', 30)} days", new_x="LMARGIN", new_y="NEXT")

    customer = quote.get("account_name") or quote.get("customer_name")
    if customer:
        pdf.ln(2)
        pdf.cell(0, 5, f"Prepared for: {_safe(customer)}", new_x="LMARGIN", new_y="NEXT")
    if quote.get("purpose"):
        pdf.set_font("Helvetica", "", 9)
        pdf.multi_cell(0, 4.5, _safe(f"Subject: {quote['purpose']}"))
    pdf.ln(4)

    # ── Line items ──
    pdf.section_header(_safe((quote.get("section") or "Items").upper()))
    cols = [("Description", 90), ("Qty", 15), ("Unit", 15), ("Rate", 35), ("Amount", 35)]
    widths = [c[1] for c in cols]
    pdf.table_header(cols)
    for item in line_items:
        pdf.item_row(
            item.get("description", ""), item.get("quantity", 0), item.get("unit", ""),
            item.get("rate", 0), item.get("amount", 0), widths,
        )
    pdf.ln(2)

    # ── Total ──
    total = quote.get("final_total_cost") or 0
    pdf.set_fill_color(20, 60, 110)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font("Helvetica", "B", 13)
    pdf.cell(130, 10, "  TOTAL (excl. GST)", fill=True)
    pdf.cell(60, 10, f"{_fmt(total)}  ", fill=True, align="R")
    pdf.set_text_color(0, 0, 0)
    pdf.ln(12)
    pdf.set_font("Helvetica", "I", 9)
    pdf.cell(0, 5, f"In short: Rs. {format_indian_units(total)}", new_x="LMARGIN", new_y="NEXT")
    pdf.ln(4)

    # ── Notes & terms ──
    if notes:
        pdf.section_header("NOTES")
        pdf.set_font("Helvetica", "", 8)
        for note in notes:
            pdf.set_x(pdf.l_margin)
            pdf.cell(pw, 4.5, _safe(f"  - {note}"), new_x="LMARGIN", new_y="NEXT")
        pdf.ln(3)

    pdf.set_font("Helvetica", "I", 8)
    pdf.set_text_color(100, 100, 100)
    pdf.set_x(pdf.l_margin)
    pdf.cell(pw, 4, "GST extra as applicable.", new_x="LMARGIN", new_y="NEXT")
    pdf.cell(pw, 4, "Payment terms: as agreed on the purchase order.", new_x="LMARGIN", new_y="NEXT")
    pdf.set_text_color(0, 0, 0)

    return pdf.output()
