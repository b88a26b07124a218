from typing import Optional

import streamlit as st

from affordability.presets import AffordabilityConfig, DEFAULT_CONFIG
from core.modal import AffordabilityModal, ModalState

MODAL_KEY = "affordability_modal"

# Widget keys owned by the modal form. They are dropped together with the
# modal so a reopened modal starts from empty fields instead of whatever
# Streamlit kept for the previous run.
MODAL_WIDGET_KEYS = {
    "afford_employment_status",
    "afford_monthly_income",
    "afford_monthly_obligations",
    "afford_job_tenure",
    "afford_payslips",
}


def open_modal(config: AffordabilityConfig = DEFAULT_CONFIG) -> AffordabilityModal:
    """Start a fresh modal, discarding any form state left from a previous one."""
    discard_modal()
    modal = AffordabilityModal(config=config)
    st.session_state[MODAL_KEY] = modal
    return modal


def get_modal() -> Optional[AffordabilityModal]:
    """Return the open modal, or ``None`` when it is closed or was never opened."""
    modal = st.session_state.get(MODAL_KEY)
    if modal is None or modal.state is ModalState.CLOSED:
        return None
    return modal


def discard_modal() -> None:
    """Remove the modal and its widget values from ``st.session_state``."""
    for key in {MODAL_KEY} | MODAL_WIDGET_KEYS:
        if key in st.session_state:
            del st.session_state[key]
