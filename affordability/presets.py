from pydantic import BaseModel, ConfigDict, Field

DISCLAIMER = (
    "This is a soft affordability estimate based on self-reported income and obligations. "
    "It is not a credit decision and does not affect your credit score. "
    "Final approval depends on the full application, verified documents and underwriter review."
)

CURRENCY_SYMBOL = "₱"
# Standard PDF fonts cannot draw the peso sign.
PDF_CURRENCY_SYMBOL = "PHP "

EMPLOYMENT_OPTIONS = {
    "employed": "Employed",
    "government": "Government Employee",
    "self-employed": "Self-employed",
    "unemployed": "Unemployed",
    "student": "Student",
}


class AffordabilityConfig(BaseModel):
    """Thresholds used by the verdict decision.

    Instances are frozen; build a new one (``model_copy(update=...)``) to try
    different thresholds.
    """

    model_config = ConfigDict(frozen=True)

    affordability_threshold: float = Field(0.40, gt=0)
    minimum_job_tenure_months: int = Field(3, ge=0)
    annual_rate_percent: float = Field(12.0, ge=0)
    marginal_dti_threshold: float = Field(0.60, gt=0)


DEFAULT_CONFIG = AffordabilityConfig()
