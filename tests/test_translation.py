from affordability.models import Verdict
from core.i18n import t, verdict_headline, verdict_message


def _verdict(status, **kw):
    actions = {"likely_eligible": "approve", "needs_review": "manual_review", "not_recommended": "decline"}
    dti = kw.pop("dti", 0.3)
    return Verdict(status=status, suggested_action=actions[status], dti=dti, **kw)


def test_english_strings_loaded():
    assert t("title") == "Quick affordability check"
    assert t("estimate_now", "en") == "Estimate now"
    assert t("UnknownKey") == "UnknownKey"


def test_unknown_language_falls_back_to_english():
    assert t("title", "xx") == "Quick affordability check"


def test_placeholders_filled():
    assert t("needs_review", reason="short job tenure") == (
        "Needs review — short job tenure. We'll review your application."
    )


def test_verdict_headlines():
    assert verdict_headline(_verdict("likely_eligible")) == "✅ Likely Eligible"
    assert verdict_headline(_verdict("needs_review")) == "⚠️ Needs Review"
    assert verdict_headline(_verdict("not_recommended")) == "❌ Not Recommended"


def test_likely_eligible_message_depends_on_principal():
    v = _verdict("likely_eligible", estimated_monthly_payment=5000)
    assert verdict_message(v, 60000) == "Likely eligible — you can afford ₱5,000.00/month for this loan."
    assert verdict_message(v, 0) == "Likely eligible — you can afford ₱5,000.00/month for the requested term."


def test_review_and_decline_messages():
    review = _verdict("needs_review", reason="  short job tenure ")
    assert verdict_message(review) == "Needs review — short job tenure. We'll review your application."
    decline = _verdict("not_recommended", dti=0.75)
    assert verdict_message(decline) == (
        "Not recommended — current obligations leave little room for extra payments (DTI: 75.0%)."
    )
