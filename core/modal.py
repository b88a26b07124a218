"""State machine behind the quick affordability check modal.

The modal has two screens, the data-entry form (``EDITING``) and the verdict
(``SHOWING_VERDICT``), and ends in ``CLOSED``.  Nothing here touches
Streamlit so the flow can be exercised directly in tests.
"""
from __future__ import annotations

import logging
import math
import re
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, List, Optional

from affordability.calculators import compute_monthly_payment_zero_interest, decide_verdict
from affordability.models import AffordabilityInput, Payslip, Verdict
from affordability.presets import AffordabilityConfig, DEFAULT_CONFIG, EMPLOYMENT_OPTIONS

logger = logging.getLogger(__name__)

MISSING_REQUIRED_PROMPT = "Please enter both monthly income and obligations"
CURRENCY_FIELDS = ("monthly_income", "monthly_obligations")

_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")


class ModalState(str, Enum):
    EDITING = "editing"
    SHOWING_VERDICT = "showing_verdict"
    CLOSED = "closed"


class CloseTrigger(str, Enum):
    CLOSE_BUTTON = "close_button"
    BACKDROP = "backdrop"
    ESCAPE = "escape"
    PROCEED = "proceed"
    SKIP = "skip"


class ModalStateError(ValueError):
    """An action was requested that the current modal state does not allow."""


def _noop() -> None:
    return None


@dataclass
class HostCallbacks:
    """Zero-argument hooks into the host application."""

    on_apply_loan: Callable[[], None] = _noop
    on_skip_to_full_application: Callable[[], None] = _noop
    on_close: Callable[[], None] = _noop


def sanitize_currency_input(text) -> Optional[float]:
    """Parse a currency entry such as ``"₱50,000.50"``.

    Everything except digits and ``.`` is dropped and the leading number is
    kept, so ``"1.2.3"`` reads as ``1.2``.  Returns ``None`` when nothing
    numeric is left or the number overflows to infinity.
    """
    if text is None:
        return None
    cleaned = re.sub(r"[^\d.]", "", str(text))
    m = _LEADING_NUMBER.match(cleaned)
    if not m:
        return None
    value = float(m.group())
    return value if math.isfinite(value) else None


def sanitize_tenure_input(text) -> Optional[int]:
    digits = re.sub(r"\D", "", "" if text is None else str(text))
    if not digits:
        return None
    try:
        return int(digits)
    except ValueError:
        # past the interpreter's integer string conversion limit
        return None


def format_field(value) -> str:
    """Text shown back in a sanitized numeric field."""
    if value is None:
        return ""
    if isinstance(value, int):
        return str(value)
    return f"{value:f}".rstrip("0").rstrip(".")


@dataclass
class FormData:
    employment_status: Optional[str] = None
    monthly_income: Optional[float] = None
    monthly_obligations: Optional[float] = None
    job_tenure_months: Optional[int] = None
    payslips: List[Payslip] = field(default_factory=list)


class AffordabilityModal:
    def __init__(
        self,
        config: AffordabilityConfig = DEFAULT_CONFIG,
        callbacks: Optional[HostCallbacks] = None,
    ) -> None:
        self.config = config
        self.callbacks = callbacks or HostCallbacks()
        self.state = ModalState.EDITING
        self.form = FormData()
        self.verdict: Optional[Verdict] = None
        self.is_loading = False
        self.prompt: Optional[str] = None
        self.close_trigger: Optional[CloseTrigger] = None

    # -- form -------------------------------------------------------------

    def _require(self, *states: ModalState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise ModalStateError(f"Action not allowed while {self.state.value}; expected {allowed}.")

    def set_employment_status(self, value: Optional[str]) -> None:
        self._require(ModalState.EDITING)
        self.form.employment_status = value if value in EMPLOYMENT_OPTIONS else None

    def set_currency_field(self, name: str, text) -> Optional[float]:
        self._require(ModalState.EDITING)
        if name not in CURRENCY_FIELDS:
            raise ValueError(f"Unknown currency field '{name}'.")
        value = sanitize_currency_input(text)
        setattr(self.form, name, value)
        return value

    def set_tenure(self, text) -> Optional[int]:
        self._require(ModalState.EDITING)
        self.form.job_tenure_months = sanitize_tenure_input(text)
        return self.form.job_tenure_months

    def add_payslips(self, files: Iterable[Payslip]) -> int:
        """Append image payslips; anything that is not ``image/*`` is ignored."""
        self._require(ModalState.EDITING)
        images = [f for f in files if f.mime_type.startswith("image/")]
        self.form.payslips.extend(images)
        return len(images)

    @property
    def can_estimate(self) -> bool:
        return (
            self.state is ModalState.EDITING
            and not self.is_loading
            and self.form.monthly_income is not None
            and self.form.monthly_obligations is not None
        )

    # -- transitions ------------------------------------------------------

    def start_estimate(self) -> bool:
        """Validate the form and mark an estimate as pending.

        Returns ``False`` without changing state when a required field is
        missing or an estimate is already pending.
        """
        self._require(ModalState.EDITING)
        if self.is_loading:
            return False
        missing = [n for n in CURRENCY_FIELDS if getattr(self.form, n) is None]
        if missing:
            self.prompt = MISSING_REQUIRED_PROMPT
            logger.info("estimate blocked, missing %s", ", ".join(missing))
            return False
        self.prompt = None
        self.is_loading = True
        return True

    def finish_estimate(self, loan_amount=0.0, loan_term=0) -> Verdict:
        self._require(ModalState.EDITING)
        if not self.is_loading:
            raise ModalStateError("No estimate is pending.")
        try:
            # Quick estimate ignores interest.
            payment = compute_monthly_payment_zero_interest(loan_amount, loan_term)
            data = AffordabilityInput(
                monthly_income=self.form.monthly_income,
                monthly_obligations=self.form.monthly_obligations,
                estimated_monthly_payment=payment,
                job_tenure_months=self.form.job_tenure_months or 0,
                employment_status=self.form.employment_status,
            )
            self.verdict = decide_verdict(data, self.config)
        finally:
            self.is_loading = False
        self.state = ModalState.SHOWING_VERDICT
        logger.info("showing verdict %s", self.verdict.status)
        return self.verdict

    def estimate(self, loan_amount=0.0, loan_term=0, delay_seconds: float = 0.0) -> Optional[Verdict]:
        if not self.start_estimate():
            return None
        if delay_seconds > 0:
            time.sleep(delay_seconds)
        return self.finish_estimate(loan_amount, loan_term)

    def back_to_edit(self) -> None:
        self._require(ModalState.SHOWING_VERDICT)
        self.verdict = None
        self.state = ModalState.EDITING

    def close(self, trigger: CloseTrigger = CloseTrigger.CLOSE_BUTTON) -> None:
        if self.state is ModalState.CLOSED:
            return
        self.state = ModalState.CLOSED
        self.close_trigger = trigger
        self.form = FormData()
        self.verdict = None
        self.is_loading = False
        self.prompt = None
        logger.info("modal closed via %s", trigger.value)
        self.callbacks.on_close()

    def proceed(self) -> None:
        self._require(ModalState.SHOWING_VERDICT)
        if self.verdict is not None and self.verdict.status == "likely_eligible":
            self.callbacks.on_apply_loan()
        else:
            self.callbacks.on_skip_to_full_application()
        self.close(CloseTrigger.PROCEED)

    def skip(self) -> None:
        self._require(ModalState.EDITING, ModalState.SHOWING_VERDICT)
        self.callbacks.on_skip_to_full_application()
        self.close(CloseTrigger.SKIP)

    def handle_key(self, key: str, loan_amount=0.0, loan_term=0) -> None:
        if key == "Escape":
            self.close(CloseTrigger.ESCAPE)
        elif key == "Enter" and self.state is ModalState.EDITING and not self.is_loading:
            self.estimate(loan_amount, loan_term)
