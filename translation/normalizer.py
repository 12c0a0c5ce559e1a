"""
Script normalization for model output.

Pure text transforms applied to every completion before validation, plus
the transport encoding of the final text and the last-resort local
romanization used when the model never produces acceptable output.
"""
import re
import base64

# Right/left single quotes and the two modifier-letter apostrophes
_APOSTROPHE_RE = re.compile("[\u2018\u2019\u02bc\u02bb]")

# Digraph letters. Applied before the single-letter map.
CYRILLIC_DIGRAPHS = (
    ("Ч", "Ch"), ("ч", "ch"),
    ("Ш", "Sh"), ("ш", "sh"),
    ("Ю", "Yu"), ("ю", "yu"),
    ("Я", "Ya"), ("я", "ya"),
    ("Ё", "Yo"), ("ё", "yo"),
)

# O' and G' are written with the Uzbek modifier letter (U+02BB);
# unify_apostrophes turns it into the ASCII apostrophe afterwards.
CYRILLIC_LETTERS = {
    "Қ": "Q", "қ": "q",
    "Ғ": "Gʻ", "ғ": "gʻ",
    "Ў": "Oʻ", "ў": "oʻ",
    "Ҳ": "H", "ҳ": "h",
    "Й": "Y", "й": "y",
    "Ж": "J", "ж": "j",
    "Э": "E", "э": "e",
}

_CYRILLIC_LETTER_TABLE = str.maketrans(CYRILLIC_LETTERS)

# Best-effort syllable table for the local fallback. Incomplete on purpose:
# unmapped syllables are left as they are.
HANGUL_SYLLABLES = {
    "안": "an", "녕": "nyeong", "하": "ha", "세": "se", "요": "yo",
    "이": "i", "것": "geot", "은": "eun", "는": "neun", "프": "peu",
    "로": "ro", "젝": "jek", "트": "teu", "계": "gye", "획": "hoek",
    "입": "ip", "니": "ni", "다": "da", "의": "ui", "에": "e",
    "를": "reul", "을": "eul", "가": "ga", "고": "go", "서": "seo",
    "사": "sa", "업": "eop", "회": "hoe", "감": "gam", "합": "hap",
}

_HANGUL_SYLLABLE_TABLE = str.maketrans(HANGUL_SYLLABLES)

_PRINTABLE_ASCII_RE = re.compile(r"[^\x20-\x7e]")


def unify_apostrophes(text: str) -> str:
    """Replace typographic and modifier apostrophes with "'"."""
    if not text:
        return text or ""
    return _APOSTROPHE_RE.sub("'", text)


def cyrillic_to_latin(text: str) -> str:
    """
    Transliterate the Uzbek Cyrillic letters that models tend to leak.

    Only the letters in CYRILLIC_DIGRAPHS and CYRILLIC_LETTERS are touched.
    Call unify_apostrophes on the result (see normalize_script).
    """
    if not text:
        return text or ""
    for cyrillic, latin in CYRILLIC_DIGRAPHS:
        text = text.replace(cyrillic, latin)
    return text.translate(_CYRILLIC_LETTER_TABLE)


def normalize_script(text: str) -> str:
    """cyrillic_to_latin followed by unify_apostrophes."""
    return unify_apostrophes(cyrillic_to_latin(text))


def to_ascii_approx(text: str) -> str:
    """Replace every code point outside printable ASCII (0x20-0x7E) with "?"."""
    return _PRINTABLE_ASCII_RE.sub("?", text or "")


def to_transport_safe(text: str) -> str:
    """Base64 over the UTF-8 bytes of text."""
    return base64.b64encode((text or "").encode("utf-8")).decode("ascii")


def from_transport_safe(payload: str) -> str:
    return base64.b64decode(payload.encode("ascii")).decode("utf-8")


def romanize_known_syllables(text: str) -> str:
    """Romanize the Hangul syllables in HANGUL_SYLLABLES; leave everything else."""
    return (text or "").translate(_HANGUL_SYLLABLE_TABLE)
