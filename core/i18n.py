"""Minimal internationalization helpers."""
from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Dict

from affordability.calculators import format_currency, format_percent
from affordability.models import Verdict

TRANSLATIONS_DIR = Path(__file__).resolve().parent / "translations"
DEFAULT_LANG = "en"


@lru_cache()
def load_translations(lang: str) -> Dict[str, str]:
    """Load translation mappings for the given language."""
    path = TRANSLATIONS_DIR / f"{lang}.json"
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return {}


def t(key: str, lang: str = DEFAULT_LANG, **values) -> str:
    """Translate ``key`` using the specified language.

    Missing languages fall back to English and missing keys to the key
    itself.  Keyword arguments fill ``{placeholders}`` in the message.
    """
    text = load_translations(lang).get(key) or load_translations(DEFAULT_LANG).get(key, key)
    return text.format(**values) if values else text


def verdict_headline(verdict: Verdict, lang: str = DEFAULT_LANG) -> str:
    return t(f"headline_{verdict.status}", lang)


def verdict_message(verdict: Verdict, principal: float = 0.0, lang: str = DEFAULT_LANG) -> str:
    """Contextual sentence shown under the verdict metrics."""
    if verdict.status == "likely_eligible":
        subject_key = "likely_eligible_this_loan" if principal > 0 else "likely_eligible_requested_term"
        return t(
            "likely_eligible",
            lang,
            payment=format_currency(verdict.estimated_monthly_payment),
            subject=t(subject_key, lang),
        )
    if verdict.status == "needs_review":
        return t("needs_review", lang, reason=verdict.reason.strip())
    return t("not_recommended", lang, dti=format_percent(verdict.dti))
