from __future__ import annotations
import logging
import math
import pandas as pd

from affordability.models import AffordabilityInput, Verdict
from affordability.presets import (
    AffordabilityConfig,
    CURRENCY_SYMBOL,
    DEFAULT_CONFIG,
    EMPLOYMENT_OPTIONS,
)

logger = logging.getLogger(__name__)

INPUT_COLUMNS = [
    "monthly_income",
    "monthly_obligations",
    "estimated_monthly_payment",
    "job_tenure_months",
    "employment_status",
]
VERDICT_COLUMNS = list(Verdict.model_fields)


def nz(x, default=0.0):
    """Return a float for ``x`` or a fallback value.

    Form fields and uploaded sheets leave gaps as ``None`` or ``NaN``.  This
    helper mirrors the spreadsheet ``NZ()`` function and keeps the formulas
    below total over missing values.
    """

    try:
        if x is None or (isinstance(x, float) and math.isnan(x)):
            return default
        return float(x)
    except (TypeError, ValueError):
        return default


def format_currency(amount, symbol=CURRENCY_SYMBOL):
    """Render ``amount`` with two decimals, grouped thousands and a glyph prefix."""
    return f"{symbol}{nz(amount):,.2f}"


def format_percent(ratio, digits=1):
    """Render a ratio such as a DTI as a percentage string."""
    value = nz(ratio)
    if math.isinf(value):
        return "∞%"
    return f"{value * 100:.{digits}f}%"


def compute_dti(monthly_obligations, monthly_income):
    """Debt-to-income ratio.

    A missing or non-positive income yields ``math.inf`` so the caller lands
    in the "not recommended" branch instead of dividing by zero.
    """

    income = nz(monthly_income)
    if income <= 0:
        return math.inf
    return nz(monthly_obligations) / income


def compute_allowed_monthly(monthly_income, monthly_obligations, config: AffordabilityConfig = DEFAULT_CONFIG):
    """Largest new monthly payment that keeps DTI at or below the threshold."""
    threshold = nz(monthly_income) * config.affordability_threshold
    return max(0.0, threshold - nz(monthly_obligations))


def compute_monthly_payment_amortized(principal, months, annual_rate_percent=DEFAULT_CONFIG.annual_rate_percent):
    """Calculate the fully amortizing monthly payment for a loan.

    ``annual_rate_percent`` is the nominal yearly rate (``12.0`` for 12%).
    Returns ``0`` for a non-positive principal or term, and when the
    amortization denominator collapses to exactly zero (a zero rate).
    """

    P = nz(principal)
    n = nz(months)
    if P <= 0 or n <= 0:
        return 0.0
    r = nz(annual_rate_percent) / 100 / 12
    denominator = 1 - (1 + r) ** (-n)
    if denominator == 0:
        return 0.0
    return P * r / denominator


def compute_monthly_payment_zero_interest(principal, months):
    P = nz(principal)
    n = nz(months)
    if P <= 0 or n <= 0:
        return 0.0
    return P / n


def compute_max_principal_zero_interest(allowed_monthly, months):
    A = nz(allowed_monthly)
    n = nz(months)
    if A <= 0 or n <= 0:
        return 0.0
    return A * n


def compute_max_principal_amortized(allowed_monthly, months, annual_rate_percent=DEFAULT_CONFIG.annual_rate_percent):
    """Reverse amortization to find the loan amount for a given payment.

    Given the allowed monthly payment, rate and term, determine the largest
    principal that fits.  A zero rate degenerates to ``allowed * months``.
    """

    A = nz(allowed_monthly)
    n = nz(months)
    if A <= 0 or n <= 0:
        return 0.0
    r = nz(annual_rate_percent) / 100 / 12
    if r == 0:
        return A * n
    return A * (1 - (1 + r) ** (-n)) / r


def decide_verdict(data: AffordabilityInput, config: AffordabilityConfig = DEFAULT_CONFIG) -> Verdict:
    """Classify an applicant as likely eligible, needs review or not recommended.

    The checks run in a fixed order and every threshold is inclusive:

    1. DTI within the affordability threshold and the allowed monthly amount
       covers the estimated payment.  Short job tenure still sends an
       otherwise eligible applicant to review.
    2. DTI within the marginal band.  Reasons explain why a review is needed.
    3. Anything else is declined.
    """

    dti = compute_dti(data.monthly_obligations, data.monthly_income)
    allowed = compute_allowed_monthly(data.monthly_income, data.monthly_obligations, config)
    payment = data.estimated_monthly_payment
    metrics = dict(
        dti=dti,
        allowed_monthly=allowed,
        estimated_monthly_payment=payment,
        employment_status=data.employment_status,
        job_tenure_months=data.job_tenure_months,
    )

    short_tenure = (
        data.employment_status == "employed"
        and 0 < data.job_tenure_months < config.minimum_job_tenure_months
    )

    if dti <= config.affordability_threshold and allowed >= payment:
        if short_tenure:
            verdict = Verdict(
                status="needs_review",
                reason="short job tenure",
                suggested_action="continue_with_review",
                **metrics,
            )
        else:
            verdict = Verdict(status="likely_eligible", reason="", suggested_action="approve", **metrics)
    elif dti <= config.marginal_dti_threshold:
        reasons = []
        if short_tenure:
            reasons.append("short job tenure")
        if allowed < payment:
            shortfall = payment - allowed
            reasons.append(f"insufficient affordability (gap: {format_currency(shortfall)})")
        verdict = Verdict(
            status="needs_review",
            reason=" and ".join(reasons),
            suggested_action="manual_review",
            **metrics,
        )
    else:
        verdict = Verdict(
            status="not_recommended",
            reason=(
                f"DTI {format_percent(dti)} exceeds "
                f"{config.affordability_threshold * 100:g}% threshold"
            ),
            suggested_action="decline",
            **metrics,
        )

    logger.debug(
        "verdict=%s dti=%s allowed=%.2f payment=%.2f",
        verdict.status,
        format_percent(dti),
        allowed,
        payment,
    )
    return verdict


def _status_or_none(value):
    s = str(value).strip().lower()
    return s if s in EMPLOYMENT_OPTIONS else None


def decide_verdicts(df: pd.DataFrame, config: AffordabilityConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """Evaluate a table of applicants, one verdict per row.

    Blank or non-finite numeric cells count as ``0`` and negative amounts
    are clipped to ``0``, matching how the single-applicant form sanitizes its inputs.
    Unknown employment statuses are treated as unset.
    """

    if df is None or df.empty:
        return pd.DataFrame(columns=VERDICT_COLUMNS)
    out = df.copy()
    for c in INPUT_COLUMNS[:-1]:
        if c in out.columns:
            numbers = pd.to_numeric(out[c], errors="coerce").replace([math.inf, -math.inf], math.nan)
            out[c] = numbers.fillna(0.0).clip(lower=0)
        else:
            out[c] = 0.0
    if "employment_status" in out.columns:
        out["employment_status"] = out["employment_status"].map(_status_or_none)
    else:
        out["employment_status"] = None

    rows = []
    for rec in out[INPUT_COLUMNS].to_dict("records"):
        status = rec["employment_status"]
        data = AffordabilityInput(
            monthly_income=float(rec["monthly_income"]),
            monthly_obligations=float(rec["monthly_obligations"]),
            estimated_monthly_payment=float(rec["estimated_monthly_payment"]),
            job_tenure_months=int(rec["job_tenure_months"]),
            employment_status=status if isinstance(status, str) else None,
        )
        rows.append(decide_verdict(data, config).model_dump())
    logger.info("evaluated %d applicants", len(rows))
    result = pd.DataFrame(rows, columns=VERDICT_COLUMNS, index=out.index)
    # Unset statuses stay None whatever string dtype pandas infers.
    status_col = result["employment_status"].astype(object)
    result["employment_status"] = status_col.where(status_col.notna(), None)
    return result
