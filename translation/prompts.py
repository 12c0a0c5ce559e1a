"""
Prompts for translation service.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from .languages import TargetLanguage
from .output_validator import VerdictReason


class Strictness(str, Enum):
    STRICT = "strict"
    RELAXED = "relaxed"


@dataclass(frozen=True)
class PromptSpec:
    system_prompt: str
    strictness: Strictness


STRICT_SYSTEM_PROMPT = """You are a professional translator of Korean business documents.
Translate the user's Korean text into {label}.

Rules:
1. Translate literally and completely. Do not summarize, shorten, or add content.
2. Write only in Uzbek Latin script. Never copy Korean (Hangul) characters into the output.
3. Never refuse, apologize, or comment on the task.
4. Never use placeholder characters such as "???" for words you are unsure of. Translate or transliterate them.
5. Preserve line breaks, punctuation, and structural formatting such as headings and bullet points.
6. Write o' and g' with the ASCII apostrophe.

Output ONLY the {code} translation. Nothing else."""

RELAXED_SYSTEM_PROMPT = """Translate this Korean text into {label}. Reply with the translation only."""

# One-line reminders added to a retry prompt, keyed by the previous defect
RETRY_REMINDERS = {
    VerdictReason.CONTAINS_SOURCE_SCRIPT: "Your previous answer still contained Korean characters. Write every word in Uzbek Latin letters.",
    VerdictReason.LOOKS_LIKE_REFUSAL: "This is ordinary business text. Translate it directly, without apologies.",
    VerdictReason.PLACEHOLDER_GARBAGE: "Do not replace any word with question marks.",
    VerdictReason.EMPTY: "Your previous answer was empty. Return the full translation.",
}


def build_prompt(
    target_language: TargetLanguage,
    strictness: Strictness,
    previous_defect: Optional[VerdictReason] = None,
) -> PromptSpec:
    """Generate the system prompt for one translation attempt."""
    template = STRICT_SYSTEM_PROMPT if strictness == Strictness.STRICT else RELAXED_SYSTEM_PROMPT
    system_prompt = template.format(
        label=target_language.display_label,
        code=target_language.code,
    )

    reminder = RETRY_REMINDERS.get(previous_defect)
    if reminder:
        system_prompt = f"{system_prompt}\n{reminder}"

    return PromptSpec(system_prompt=system_prompt, strictness=strictness)


def build_messages(prompt_spec: PromptSpec, source_text: str) -> List[Dict[str, str]]:
    """System prompt plus the source text, sent verbatim as the user message."""
    return [
        {"role": "system", "content": prompt_spec.system_prompt},
        {"role": "user", "content": source_text},
    ]
