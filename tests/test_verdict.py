import math

import pandas as pd
import pytest
from pydantic import ValidationError

from affordability.calculators import VERDICT_COLUMNS, decide_verdict, decide_verdicts
from affordability.models import AffordabilityInput
from affordability.presets import AffordabilityConfig, DEFAULT_CONFIG


def _input(**overrides):
    data = dict(
        monthly_income=50000,
        monthly_obligations=15000,
        estimated_monthly_payment=5000,
        job_tenure_months=12,
        employment_status="employed",
    )
    data.update(overrides)
    return AffordabilityInput(**data)


def test_default_config_values():
    assert DEFAULT_CONFIG.affordability_threshold == 0.40
    assert DEFAULT_CONFIG.minimum_job_tenure_months == 3
    assert DEFAULT_CONFIG.annual_rate_percent == 12.0
    assert DEFAULT_CONFIG.marginal_dti_threshold == 0.60


def test_config_is_immutable():
    with pytest.raises(ValidationError):
        DEFAULT_CONFIG.affordability_threshold = 0.5


def test_likely_eligible():
    v = decide_verdict(_input())
    assert v.status == "likely_eligible"
    assert v.reason == ""
    assert v.suggested_action == "approve"
    assert abs(v.dti - 0.30) < 1e-12
    assert v.allowed_monthly == 5000
    assert v.estimated_monthly_payment == 5000
    assert v.employment_status == "employed"
    assert v.job_tenure_months == 12


def test_short_tenure_sends_eligible_applicant_to_review():
    v = decide_verdict(_input(job_tenure_months=2))
    assert v.status == "needs_review"
    assert v.reason == "short job tenure"
    assert v.suggested_action == "continue_with_review"


def test_short_tenure_only_applies_to_employed():
    for status in ("government", "self-employed", "unemployed", "student", None):
        v = decide_verdict(_input(job_tenure_months=2, employment_status=status))
        assert v.status == "likely_eligible"


def test_zero_tenure_is_not_short():
    v = decide_verdict(_input(job_tenure_months=0))
    assert v.status == "likely_eligible"


def test_marginal_band_reports_affordability_gap():
    v = decide_verdict(_input(monthly_obligations=25000, estimated_monthly_payment=10000))
    assert v.status == "needs_review"
    assert v.suggested_action == "manual_review"
    assert v.reason == "insufficient affordability (gap: ₱10,000.00)"
    assert v.allowed_monthly == 0
    assert abs(v.dti - 0.5) < 1e-12


def test_marginal_band_joins_reasons():
    v = decide_verdict(_input(monthly_obligations=25000, estimated_monthly_payment=10000, job_tenure_months=1))
    assert v.reason == "short job tenure and insufficient affordability (gap: ₱10,000.00)"
    assert v.suggested_action == "manual_review"


def test_affordability_gap_within_threshold_goes_to_marginal_band():
    # DTI 0.30 passes, but the payment exceeds what is allowed
    v = decide_verdict(_input(estimated_monthly_payment=6000))
    assert v.status == "needs_review"
    assert v.suggested_action == "manual_review"
    assert v.reason == "insufficient affordability (gap: ₱1,000.00)"


def test_not_recommended_above_marginal_band():
    v = decide_verdict(_input(monthly_income=20000, monthly_obligations=15000))
    assert v.status == "not_recommended"
    assert v.suggested_action == "decline"
    assert "75.0%" in v.reason
    assert "40%" in v.reason
    assert v.reason == "DTI 75.0% exceeds 40% threshold"


def test_zero_income_is_declined():
    v = decide_verdict(_input(monthly_income=0, monthly_obligations=0, estimated_monthly_payment=0))
    assert math.isinf(v.dti)
    assert v.status == "not_recommended"
    assert v.allowed_monthly == 0


def test_thresholds_are_inclusive():
    at_threshold = decide_verdict(_input(monthly_income=10000, monthly_obligations=4000, estimated_monthly_payment=0))
    assert at_threshold.dti == 0.4
    assert at_threshold.status == "likely_eligible"

    at_marginal = decide_verdict(_input(monthly_income=10000, monthly_obligations=6000, estimated_monthly_payment=0))
    assert at_marginal.dti == 0.6
    assert at_marginal.status == "needs_review"

    above = decide_verdict(_input(monthly_income=10000, monthly_obligations=6001, estimated_monthly_payment=0))
    assert above.status == "not_recommended"


def test_marginal_band_without_gap_has_empty_reason():
    v = decide_verdict(_input(monthly_income=10000, monthly_obligations=5000, estimated_monthly_payment=0))
    assert v.status == "needs_review"
    assert v.reason == ""


def test_decision_is_idempotent():
    data = _input(monthly_obligations=25000, estimated_monthly_payment=10000)
    assert decide_verdict(data) == decide_verdict(data)
    assert data == _input(monthly_obligations=25000, estimated_monthly_payment=10000)


def test_custom_thresholds():
    strict = AffordabilityConfig(affordability_threshold=0.25, minimum_job_tenure_months=6)
    v = decide_verdict(_input(), strict)
    assert v.status == "needs_review"
    assert v.suggested_action == "manual_review"

    v = decide_verdict(_input(monthly_income=20000, monthly_obligations=15000), strict)
    assert v.reason == "DTI 75.0% exceeds 25% threshold"

    lenient = AffordabilityConfig(minimum_job_tenure_months=6)
    v = decide_verdict(_input(job_tenure_months=5), lenient)
    assert v.reason == "short job tenure"


def test_negative_input_rejected():
    with pytest.raises(ValidationError):
        AffordabilityInput(monthly_income=-1)
    with pytest.raises(ValidationError):
        AffordabilityInput(employment_status="retired")


def test_decide_verdicts_bulk():
    df = pd.DataFrame(
        [
            {"monthly_income": 50000, "monthly_obligations": 15000, "estimated_monthly_payment": 5000,
             "job_tenure_months": 12, "employment_status": "Employed"},
            {"monthly_income": 50000, "monthly_obligations": 25000, "estimated_monthly_payment": 10000,
             "job_tenure_months": 12, "employment_status": "employed"},
            {"monthly_income": 20000, "monthly_obligations": 15000, "estimated_monthly_payment": None,
             "job_tenure_months": None, "employment_status": "retired"},
        ]
    )
    res = decide_verdicts(df)
    assert list(res.columns) == VERDICT_COLUMNS
    assert list(res["status"]) == ["likely_eligible", "needs_review", "not_recommended"]
    assert res.loc[0, "employment_status"] == "employed"
    assert res.loc[2, "employment_status"] is None
    assert res.loc[2, "estimated_monthly_payment"] == 0


def test_decide_verdicts_clips_negatives_and_fills_missing_columns():
    df = pd.DataFrame([{"monthly_income": 10000, "monthly_obligations": -500}])
    res = decide_verdicts(df)
    assert res.loc[0, "dti"] == 0
    assert res.loc[0, "status"] == "likely_eligible"
    assert res.loc[0, "allowed_monthly"] == 4000


def test_decide_verdicts_treats_non_finite_cells_as_blank():
    df = pd.DataFrame(
        [{"monthly_income": "1e400", "monthly_obligations": 15000, "estimated_monthly_payment": "-inf",
          "job_tenure_months": "inf"}]
    )
    res = decide_verdicts(df)
    assert res.loc[0, "status"] == "not_recommended"
    assert res.loc[0, "job_tenure_months"] == 0
    assert res.loc[0, "estimated_monthly_payment"] == 0
    assert res.loc[0, "employment_status"] is None


def test_decide_verdicts_empty():
    assert decide_verdicts(None).empty
    assert list(decide_verdicts(pd.DataFrame()).columns) == VERDICT_COLUMNS
