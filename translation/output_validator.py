"""
Output validation for translation candidates.

Rules are checked in order and the first match wins:
empty, source script, refusal prefix, placeholder run, ok.
"""
import re
from dataclasses import dataclass
from enum import Enum

from .normalizer import normalize_script

# Hangul compatibility jamo through the end of the syllable block
HANGUL_RE = re.compile("[\u3131-\ud7a3]")

PLACEHOLDER_RE = re.compile(r"\?{3,}")

# Compared against the start of the trimmed, lower-cased, script-normalized text
_REFUSAL_PHRASES = (
    # English
    "sorry",
    "i'm sorry",
    "i am sorry",
    "i apologize",
    "apologies",
    "unfortunately, i",
    "unfortunately i",
    "i cannot",
    "i can't",
    "i can not",
    "i am unable",
    "i'm unable",
    "impossible to translate",
    "as an ai",
    # Uzbek (Latin)
    "uzr",
    "kechirasiz",
    "afsuski",
    "men tarjima qila olmayman",
    "tarjima qilib bo'lmaydi",
    "tarjima qilish imkonsiz",
    "imkonsiz, ",
    # Uzbek (Cyrillic) and Russian
    "кечирасиз",
    "узр",
    "извините",
    "простите",
    "к сожалению",
)

# Completions are script-normalized before validation, so the lexicon is too
REFUSAL_PREFIXES = tuple(normalize_script(phrase) for phrase in _REFUSAL_PHRASES)


class VerdictReason(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    CONTAINS_SOURCE_SCRIPT = "contains_source_script"
    LOOKS_LIKE_REFUSAL = "looks_like_refusal"
    PLACEHOLDER_GARBAGE = "placeholder_garbage"


@dataclass(frozen=True)
class ValidationVerdict:
    accepted: bool
    reason: VerdictReason


def contains_source_script(text: str) -> bool:
    return HANGUL_RE.search(text) is not None


def looks_like_refusal(text: str) -> bool:
    normalized = normalize_script(text.strip()).lower()
    return normalized.startswith(REFUSAL_PREFIXES)


def validate(text: str) -> ValidationVerdict:
    """Classify a candidate translation as acceptable or defective."""
    if not text or not text.strip():
        return ValidationVerdict(False, VerdictReason.EMPTY)
    if contains_source_script(text):
        return ValidationVerdict(False, VerdictReason.CONTAINS_SOURCE_SCRIPT)
    if looks_like_refusal(text):
        return ValidationVerdict(False, VerdictReason.LOOKS_LIKE_REFUSAL)
    if PLACEHOLDER_RE.search(text):
        return ValidationVerdict(False, VerdictReason.PLACEHOLDER_GARBAGE)
    return ValidationVerdict(True, VerdictReason.OK)
