"""
Translation Configuration

Module-specific settings for Korean to Uzbek (Latin) translation.
"""
import os

# =========================
# LLM Settings for Translation
# =========================

# Deterministic sampling; not configurable
TRANSLATION_TEMPERATURE = 0.0

TRANSLATION_MAX_TOKENS = int(os.getenv("TRANSLATION_MAX_TOKENS", "4096"))

# =========================
# Input Guardrails
# =========================

# Maximum characters accepted in one request
TRANSLATION_MAX_CHARS = int(os.getenv("TRANSLATION_MAX_CHARS", "20000"))

# Maximum tokens allowed for input text (percentage of model context)
TRANSLATION_MAX_TOKEN_PERCENT = int(os.getenv("TRANSLATION_MAX_TOKEN_PERCENT", "80"))

# =========================
# Logging
# =========================

# Characters of source text shown in log lines
TRANSLATION_LOG_PREVIEW_CHARS = int(os.getenv("TRANSLATION_LOG_PREVIEW_CHARS", "60"))
