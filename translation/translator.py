"""
Core translation logic using LLM.

Translator runs the two-attempt pipeline for one request:

    attempt 1 (strict prompt) -> normalize -> validate
        ok      -> done
        defect  -> attempt 2 (relaxed prompt + reminder) -> normalize -> validate
            ok      -> done
            defect  -> local romanization fallback -> done

Provider and transport errors stop the pipeline and propagate.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from core import OutputDefect
from .config import TRANSLATION_LOG_PREVIEW_CHARS
from .languages import TargetLanguage, resolve_target_language
from .llm_client import TranslationClient
from .normalizer import (
    normalize_script,
    unify_apostrophes,
    to_ascii_approx,
    to_transport_safe,
    romanize_known_syllables,
)
from .output_validator import VerdictReason, validate
from .prompts import Strictness, PromptSpec, build_prompt

logger = logging.getLogger(__name__)

# Fixed upstream budget per request, one entry per attempt
ATTEMPT_STRICTNESS = (Strictness.STRICT, Strictness.RELAXED)
MAX_ATTEMPTS = len(ATTEMPT_STRICTNESS)


class OutputEncoding(str, Enum):
    BASE64 = "base64"
    PLAIN_ASCII = "ascii"


@dataclass(frozen=True)
class TranslationRequest:
    source_text: str
    target_lang_raw: str
    model: Optional[str] = None


@dataclass(frozen=True)
class TranslationResult:
    text: str
    encoding: OutputEncoding
    attempts_used: int
    used_fallback: bool
    target_language: TargetLanguage = TargetLanguage.UZ_LATN
    defects: Tuple[VerdictReason, ...] = ()

    def to_transport(self) -> str:
        """Base64 of the final text."""
        return to_transport_safe(self.text)


def local_fallback(source_text: str) -> str:
    """Deterministic last resort: romanize the syllables we know, keep the rest."""
    return unify_apostrophes(romanize_known_syllables(source_text))


class Translator:
    """Translator class running the validated retry pipeline."""

    def __init__(
        self,
        client: TranslationClient,
        api_key: str,
        model: Optional[str] = None,
        output_encoding: str = OutputEncoding.BASE64.value,
    ):
        """
        Initialize the translator.

        Args:
            client: Translation client used for each upstream attempt
            api_key: Provider API key
            model: Default model when the request does not name one
            output_encoding: "base64", or "ascii" to force printable ASCII output
        """
        self.client = client
        self.api_key = api_key
        self.model = model
        self.output_encoding = OutputEncoding(output_encoding)

    async def translate(self, request: TranslationRequest) -> TranslationResult:
        """
        Translate request.source_text into the resolved target language.

        Returns:
            TranslationResult; used_fallback is True when both attempts failed
            validation and the text came from local_fallback.

        Raises:
            UpstreamError: provider answered with a non-success status
            TransportError: the provider could not be reached
        """
        target_language = resolve_target_language(request.target_lang_raw)
        model = request.model or self.model
        defects = []
        previous_defect: Optional[VerdictReason] = None

        logger.info(
            f"[TRANSLATOR] Translating {len(request.source_text)} chars to {target_language.code} | "
            f"model={model} | preview={request.source_text[:TRANSLATION_LOG_PREVIEW_CHARS]!r}"
        )

        for attempt, strictness in enumerate(ATTEMPT_STRICTNESS, start=1):
            prompt_spec = build_prompt(target_language, strictness, previous_defect)
            try:
                text = await self._attempt(prompt_spec, request.source_text, model)
            except OutputDefect as defect:
                previous_defect = defect.verdict.reason
                defects.append(previous_defect)
                logger.warning(
                    f"[TRANSLATOR] Attempt {attempt}/{MAX_ATTEMPTS} rejected | "
                    f"strictness={strictness.value} | reason={previous_defect.value}"
                )
                continue

            logger.info(
                f"[TRANSLATOR] Attempt {attempt}/{MAX_ATTEMPTS} accepted | "
                f"strictness={strictness.value} | output_chars={len(text)}"
            )
            return self._result(text, target_language, attempt, False, defects)

        text = local_fallback(request.source_text)
        logger.warning(
            f"[TRANSLATOR] Using local fallback after {MAX_ATTEMPTS} attempts | "
            f"reasons={[d.value for d in defects]}"
        )
        return self._result(text, target_language, MAX_ATTEMPTS, True, defects)

    async def _attempt(self, prompt_spec: PromptSpec, source_text: str, model: Optional[str]) -> str:
        """One upstream call; raises OutputDefect when the output fails validation."""
        raw = await self.client.complete(self.api_key, model, prompt_spec, source_text)
        text = normalize_script(raw).strip()
        verdict = validate(text)
        if not verdict.accepted:
            raise OutputDefect(verdict)
        return text

    def _result(
        self,
        text: str,
        target_language: TargetLanguage,
        attempts_used: int,
        used_fallback: bool,
        defects,
    ) -> TranslationResult:
        encoding = OutputEncoding.BASE64
        if self.output_encoding == OutputEncoding.PLAIN_ASCII:
            text = to_ascii_approx(text)
            encoding = OutputEncoding.PLAIN_ASCII

        return TranslationResult(
            text=text,
            encoding=encoding,
            attempts_used=attempts_used,
            used_fallback=used_fallback,
            target_language=target_language,
            defects=tuple(defects),
        )
