"""Streamlit rendering of the quick affordability check modal."""
from __future__ import annotations
import streamlit as st
from affordability.calculators import format_currency, format_percent
from affordability.models import Payslip
from affordability.presets import EMPLOYMENT_OPTIONS
from core.i18n import t, verdict_headline, verdict_message
from core.modal import CloseTrigger, HostCallbacks, ModalState, format_field
from core.settings import get_settings
from core.state import discard_modal, get_modal
from export.pdf_export import build_verdict_pdf

PAYSLIP_TYPES = ["png", "jpg", "jpeg", "gif", "webp", "heic"]


def _on_status_change():
    modal = get_modal()
    if modal:
        modal.set_employment_status(st.session_state.get("afford_employment_status"))


def _on_currency_change(name: str):
    modal = get_modal()
    if modal:
        key = f"afford_{name}"
        value = modal.set_currency_field(name, st.session_state.get(key, ""))
        st.session_state[key] = format_field(value)


def _on_tenure_change():
    modal = get_modal()
    if modal:
        value = modal.set_tenure(st.session_state.get("afford_job_tenure", ""))
        st.session_state["afford_job_tenure"] = format_field(value)


def _on_payslips_change():
    modal = get_modal()
    if not modal:
        return
    known = {(p.name, p.size) for p in modal.form.payslips}
    picked = [
        Payslip(name=f.name, mime_type=f.type or "", size=f.size)
        for f in (st.session_state.get("afford_payslips") or [])
    ]
    modal.add_payslips([p for p in picked if (p.name, p.size) not in known])


def _on_estimate(loan_amount, loan_term, delay_seconds):
    modal = get_modal()
    if modal:
        modal.estimate(loan_amount, loan_term, delay_seconds=delay_seconds)


def _on_back():
    modal = get_modal()
    if modal:
        modal.back_to_edit()


def _finish(action):
    modal = get_modal()
    if modal:
        action(modal)
    discard_modal()


def dismiss_affordability_modal():
    """Close the open modal when the dialog is dismissed outside its buttons.

    Streamlit reports an Escape press and a backdrop click the same way, so
    both are recorded as a backdrop close.
    """
    _finish(lambda m: m.close(CloseTrigger.BACKDROP))


def _seed_widgets(modal):
    # Streamlit drops widget values while the verdict screen is shown; put the
    # form values back so "Back to Edit" shows what was entered.
    seeds = {
        "afford_monthly_income": format_field(modal.form.monthly_income),
        "afford_monthly_obligations": format_field(modal.form.monthly_obligations),
        "afford_job_tenure": format_field(modal.form.job_tenure_months),
    }
    if modal.form.employment_status is not None:
        seeds["afford_employment_status"] = modal.form.employment_status
    for key, value in seeds.items():
        if key not in st.session_state:
            st.session_state[key] = value


def _render_form(modal, lang, loan_amount, loan_term, delay_seconds):
    _seed_widgets(modal)
    st.write(t("income_help", lang))
    st.selectbox(
        f"{t('employment_status', lang)} *",
        list(EMPLOYMENT_OPTIONS),
        index=None,
        placeholder=t("employment_placeholder", lang),
        format_func=lambda v: EMPLOYMENT_OPTIONS.get(v, v),
        key="afford_employment_status",
        on_change=_on_status_change,
    )
    for name, placeholder in (("monthly_income", "50,000"), ("monthly_obligations", "20,000")):
        st.text_input(
            f"{t(name, lang)} * (₱)",
            placeholder=placeholder,
            key=f"afford_{name}",
            on_change=_on_currency_change,
            args=(name,),
        )
    st.text_input(
        t("job_tenure", lang),
        placeholder="6",
        help=t("job_tenure_help", lang),
        key="afford_job_tenure",
        on_change=_on_tenure_change,
    )
    st.file_uploader(
        t("upload_payslip", lang),
        type=PAYSLIP_TYPES,
        accept_multiple_files=True,
        help=t("upload_payslip_help", lang),
        key="afford_payslips",
        on_change=_on_payslips_change,
    )
    if modal.form.payslips:
        st.caption(f"{len(modal.form.payslips)} payslip(s) attached")
    st.caption(t("privacy_note", lang))
    if modal.prompt:
        st.warning(modal.prompt)

    c1, c2 = st.columns(2)
    c1.button(
        t("calculating", lang) if modal.is_loading else t("estimate_now", lang),
        key="afford_estimate",
        type="primary",
        disabled=modal.is_loading,
        on_click=_on_estimate,
        args=(loan_amount, loan_term, delay_seconds),
    )
    c2.button(
        t("skip_continue", lang),
        key="afford_skip",
        on_click=_finish,
        args=(lambda m: m.skip(),),
    )


def _render_verdict(modal, lang, loan_amount, loan_term):
    verdict = modal.verdict
    st.markdown(f"### {verdict_headline(verdict, lang)}")
    cols = st.columns(3)
    cols[0].metric(t("metric_dti", lang), format_percent(verdict.dti))
    cols[1].metric(t("metric_allowed_monthly", lang), format_currency(verdict.allowed_monthly))
    cols[2].metric(t("metric_proposed_payment", lang), format_currency(verdict.estimated_monthly_payment))

    message = verdict_message(verdict, loan_amount, lang)
    if verdict.status == "likely_eligible":
        st.success(message)
    elif verdict.status == "needs_review":
        st.warning(message)
    else:
        st.error(message)

    c1, c2, c3 = st.columns(3)
    if verdict.status in ("likely_eligible", "needs_review"):
        label = t("apply_now", lang) if verdict.status == "likely_eligible" else t("confirm_continue", lang)
        c1.button(label, key="afford_proceed", type="primary", on_click=_finish, args=(lambda m: m.proceed(),))
    c2.button(t("back_to_edit", lang), key="afford_back", on_click=_on_back)
    c3.button(t("skip_to_full", lang), key="afford_skip", on_click=_finish, args=(lambda m: m.skip(),))
    st.download_button(
        "Download summary (PDF)",
        data=build_verdict_pdf(verdict, loan_amount, loan_term, modal.config),
        file_name="affordability_summary.pdf",
        mime="application/pdf",
        key="afford_download",
    )


def render_affordability_modal(
    on_apply_loan=None,
    on_skip_to_full_application=None,
    on_close=None,
    current_loan_amount: float = 0.0,
    current_loan_term: int = 12,
    delay_seconds: float | None = None,
):
    """Render the open modal's current screen.

    Returns the modal, or ``None`` when no modal is open (never opened or
    closed by one of its actions).
    """
    modal = get_modal()
    if modal is None:
        return None
    settings = get_settings()
    lang = settings.ui_language
    if delay_seconds is None:
        delay_seconds = settings.estimate_delay_seconds
    hooks = {
        "on_apply_loan": on_apply_loan,
        "on_skip_to_full_application": on_skip_to_full_application,
        "on_close": on_close,
    }
    modal.callbacks = HostCallbacks(**{k: v for k, v in hooks.items() if v is not None})

    st.caption(t("subtitle", lang))
    if modal.state is ModalState.EDITING:
        _render_form(modal, lang, current_loan_amount, current_loan_term, delay_seconds)
    else:
        _render_verdict(modal, lang, current_loan_amount, current_loan_term)
    st.button(
        t("close", lang),
        key="afford_close",
        on_click=_finish,
        args=(lambda m: m.close(CloseTrigger.CLOSE_BUTTON),),
    )
    return modal
