import logging

import pandas as pd
import streamlit as st

from affordability.calculators import (
    compute_monthly_payment_amortized,
    compute_monthly_payment_zero_interest,
    decide_verdicts,
    format_currency,
)
from affordability.presets import DISCLAIMER
from core.i18n import t
from core.settings import get_settings
from core.state import get_modal, open_modal
from ui.modal import dismiss_affordability_modal, render_affordability_modal

settings = get_settings()
logging.basicConfig(
    level=settings.log_level_value,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("app")
config = settings.affordability_config()
lang = settings.ui_language

st.set_page_config(page_title=t("title", lang), layout="centered")


# ---------------------------------------------------------------------------
# Host collaborators.  The modal only decides *when* these run; the host page
# decides what applying or skipping means.
# ---------------------------------------------------------------------------


def _apply_loan():
    st.session_state["application_step"] = "apply"


def _skip_to_full_application():
    st.session_state["application_step"] = "full_application"


def _modal_closed():
    logger.info("affordability modal closed")


@st.dialog(t("title", lang), width="large", on_dismiss=dismiss_affordability_modal)
def affordability_dialog(loan_amount, loan_term):
    render_affordability_modal(
        on_apply_loan=_apply_loan,
        on_skip_to_full_application=_skip_to_full_application,
        on_close=_modal_closed,
        current_loan_amount=loan_amount,
        current_loan_term=loan_term,
    )
    if get_modal() is None:
        # A full rerun is what dismisses the dialog.
        st.rerun()


def render_bulk_check():
    """Sidebar tool evaluating a CSV of applicants with the same rules."""
    with st.sidebar.expander("Bulk check (CSV)"):
        st.caption(
            "Columns: monthly_income, monthly_obligations, estimated_monthly_payment, "
            "job_tenure_months, employment_status"
        )
        upload = st.file_uploader("Applicants CSV", type=["csv"], key="bulk_csv")
        if upload is None:
            return
        try:
            frame = pd.read_csv(upload)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
            st.error(f"Could not read CSV: {exc}")
            return
        results = decide_verdicts(frame, config)
        st.dataframe(results)
        st.download_button(
            "Download verdicts",
            data=results.to_csv(index=False).encode("utf-8"),
            file_name="verdicts.csv",
            mime="text/csv",
        )


st.title("Personal Loan")
st.caption(DISCLAIMER)

c1, c2 = st.columns(2)
loan_amount = c1.number_input(
    "Loan amount (₱)", min_value=0.0, value=float(settings.default_loan_amount), step=1000.0
)
loan_term = int(
    c2.number_input("Term (months)", min_value=1, max_value=120, value=settings.default_loan_term_months, step=1)
)
c1.caption(f"Without interest: {format_currency(compute_monthly_payment_zero_interest(loan_amount, loan_term))}/month")
c2.caption(
    f"At {config.annual_rate_percent:g}% p.a.: "
    f"{format_currency(compute_monthly_payment_amortized(loan_amount, loan_term, config.annual_rate_percent))}/month"
)

if st.button(t("title", lang), type="primary"):
    st.session_state.pop("application_step", None)
    open_modal(config)
    affordability_dialog(loan_amount, loan_term)

step = st.session_state.get("application_step")
if step == "apply":
    st.success("Great, let's start your loan application.")
elif step == "full_application":
    st.info("Continuing to the full application.")

render_bulk_check()
