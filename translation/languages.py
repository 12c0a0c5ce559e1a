"""
Target language resolution.

Only one target is supported today. Every alias, and any unrecognized
value, resolves to Uzbek in Latin script. New targets are added as new
TargetLanguage members with their aliases.
"""
import logging
from enum import Enum

from .normalizer import unify_apostrophes

logger = logging.getLogger(__name__)


class TargetLanguage(Enum):
    """Closed set of supported translation targets."""

    UZ_LATN = ("uz-Latn", "Uzbek (Latin script, uz-Latn)")

    def __init__(self, code: str, display_label: str):
        self.code = code
        self.display_label = display_label


DEFAULT_TARGET_LANGUAGE = TargetLanguage.UZ_LATN

_ALIASES = {
    "uz": TargetLanguage.UZ_LATN,
    "uz-latn": TargetLanguage.UZ_LATN,
    "uz_latn": TargetLanguage.UZ_LATN,
    "uz-latin": TargetLanguage.UZ_LATN,
    "uz-uz": TargetLanguage.UZ_LATN,
    "uzb": TargetLanguage.UZ_LATN,
    "uzbek": TargetLanguage.UZ_LATN,
    "uzbek-latin": TargetLanguage.UZ_LATN,
    "o'zbek": TargetLanguage.UZ_LATN,
    "o'zbekcha": TargetLanguage.UZ_LATN,
}


def resolve_target_language(raw: str) -> TargetLanguage:
    key = unify_apostrophes((raw or "").strip().lower())
    language = _ALIASES.get(key)
    if language is None:
        logger.debug(f"[LANGUAGE] Unrecognized target {raw!r}, using {DEFAULT_TARGET_LANGUAGE.code}")
        return DEFAULT_TARGET_LANGUAGE
    return language
