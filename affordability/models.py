from typing import Literal, Optional

from pydantic import BaseModel, Field

EmploymentStatus = Literal["employed", "government", "self-employed", "unemployed", "student"]
VerdictStatus = Literal["likely_eligible", "needs_review", "not_recommended"]
SuggestedAction = Literal["approve", "continue_with_review", "manual_review", "decline"]


class AffordabilityInput(BaseModel):
    monthly_income: float = Field(0.0, ge=0)
    monthly_obligations: float = Field(0.0, ge=0)
    estimated_monthly_payment: float = Field(0.0, ge=0)
    job_tenure_months: int = Field(0, ge=0)
    employment_status: Optional[EmploymentStatus] = None


class Verdict(BaseModel):
    status: VerdictStatus
    reason: str = ""
    suggested_action: SuggestedAction
    dti: float
    allowed_monthly: float = 0.0
    estimated_monthly_payment: float = 0.0
    employment_status: Optional[EmploymentStatus] = None
    job_tenure_months: int = 0


class Payslip(BaseModel):
    """Metadata for a payslip image picked in the form. The file is never read."""

    name: str
    mime_type: str = ""
    size: int = 0
