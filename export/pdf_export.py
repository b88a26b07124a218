from __future__ import annotations
import io
import math
from reportlab.lib.pagesizes import LETTER
from reportlab.lib import colors
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from reportlab.lib.styles import getSampleStyleSheet
from affordability.calculators import (
    compute_max_principal_amortized,
    compute_max_principal_zero_interest,
    compute_monthly_payment_amortized,
    format_currency,
    format_percent,
)
from affordability.models import Verdict
from affordability.presets import (
    AffordabilityConfig,
    DEFAULT_CONFIG,
    DISCLAIMER,
    EMPLOYMENT_OPTIONS,
    PDF_CURRENCY_SYMBOL,
)

STATUS_LABELS = {
    "likely_eligible": "Likely Eligible",
    "needs_review": "Needs Review",
    "not_recommended": "Not Recommended",
}
TABLE_STYLE = TableStyle([
    ('BACKGROUND', (0, 0), (-1, 0), colors.lightgrey),
    ('BOX', (0, 0), (-1, -1), 1, colors.black),
    ('INNERGRID', (0, 0), (-1, -1), 0.5, colors.grey),
])


def _money(amount):
    return format_currency(amount, PDF_CURRENCY_SYMBOL)


def build_verdict_pdf(verdict: Verdict | None, loan_amount: float = 0.0, loan_term: int = 0,
                      config: AffordabilityConfig = DEFAULT_CONFIG) -> bytes:
    """Render a one-page affordability summary and return the PDF bytes."""
    if verdict is None:
        raise ValueError("A verdict is required to export an affordability summary.")
    styles = getSampleStyleSheet()
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=LETTER, leftMargin=36, rightMargin=36, topMargin=36, bottomMargin=36,
                            pageCompression=0)
    story = [Paragraph("<b>Quick Affordability Check</b>", styles['Title']), Spacer(1, 6)]

    rows = [
        ["Verdict", STATUS_LABELS[verdict.status]],
        ["Suggested action", verdict.suggested_action.replace("_", " ")],
        ["DTI", "n/a" if math.isinf(verdict.dti) else format_percent(verdict.dti)],
        ["Allowed monthly", _money(verdict.allowed_monthly)],
        ["Proposed payment", _money(verdict.estimated_monthly_payment)],
        ["Employment status", EMPLOYMENT_OPTIONS.get(verdict.employment_status, "Not provided")],
        ["Job tenure (months)", str(verdict.job_tenure_months)],
    ]
    if verdict.reason:
        rows.append(["Reason", verdict.reason.replace("₱", PDF_CURRENCY_SYMBOL).replace("∞", "inf")])
    t = Table([["Summary", ""]] + rows, hAlign='LEFT', colWidths=[160, 360])
    t.setStyle(TABLE_STYLE)
    story += [t, Spacer(1, 12)]

    if loan_amount > 0 and loan_term > 0:
        rate = config.annual_rate_percent
        loan_rows = [
            ["Requested loan", _money(loan_amount)],
            ["Term (months)", str(loan_term)],
            [f"Payment at {rate:g}% p.a.", _money(compute_monthly_payment_amortized(loan_amount, loan_term, rate))],
            ["Max loan, no interest", _money(compute_max_principal_zero_interest(verdict.allowed_monthly, loan_term))],
            [f"Max loan at {rate:g}% p.a.", _money(compute_max_principal_amortized(verdict.allowed_monthly, loan_term, rate))],
        ]
        t = Table([["Loan", ""]] + loan_rows, hAlign='LEFT', colWidths=[160, 360])
        t.setStyle(TABLE_STYLE)
        story += [Paragraph("<b>Requested Loan</b>", styles['Heading3']), Spacer(1, 6), t, Spacer(1, 12)]

    story += [Spacer(1, 12), Paragraph(f"<font size=8>{DISCLAIMER}</font>", styles['Normal'])]
    doc.build(story)
    return buf.getvalue()
