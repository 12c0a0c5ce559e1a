from __future__ import annotations

import pytest

from conftest import StubTranslationClient
from core import TransportError, UpstreamError
from translation.normalizer import from_transport_safe
from translation.output_validator import HANGUL_RE, VerdictReason
from translation.prompts import Strictness
from translation.translator import (
    MAX_ATTEMPTS,
    OutputEncoding,
    TranslationRequest,
    Translator,
    local_fallback,
)

SOURCE = "안녕하세요, 이것은 프로젝트 계획입니다."
CLEAN = "Assalomu alaykum, bu loyiha rejasi."


def _request(model=None) -> TranslationRequest:
    return TranslationRequest(source_text=SOURCE, target_lang_raw="uz-latn", model=model)


@pytest.mark.asyncio
async def test_first_attempt_accepted():
    stub = StubTranslationClient(CLEAN)
    result = await Translator(stub, api_key="k", model="gpt-4o-mini").translate(_request())

    assert len(stub.calls) == 1
    assert stub.calls[0]["prompt_spec"].strictness == Strictness.STRICT
    assert stub.calls[0]["source_text"] == SOURCE
    assert stub.calls[0]["api_key"] == "k"
    assert result.text == CLEAN
    assert result.attempts_used == 1
    assert result.used_fallback is False
    assert result.encoding == OutputEncoding.BASE64
    assert result.defects == ()


@pytest.mark.asyncio
async def test_hangul_then_clean_retries_once():
    stub = StubTranslationClient("안녕하세요", CLEAN)
    result = await Translator(stub, api_key="k").translate(_request())

    assert len(stub.calls) == 2
    first, second = (call["prompt_spec"] for call in stub.calls)
    assert first.strictness == Strictness.STRICT
    assert second.strictness == Strictness.RELAXED
    assert second.system_prompt != first.system_prompt
    assert "Korean characters" in second.system_prompt
    assert result.used_fallback is False
    assert result.attempts_used == 2
    assert result.defects == (VerdictReason.CONTAINS_SOURCE_SCRIPT,)
    assert not HANGUL_RE.search(from_transport_safe(result.to_transport()))


@pytest.mark.asyncio
async def test_always_hangul_uses_local_fallback():
    stub = StubTranslationClient("안녕하세요")
    result = await Translator(stub, api_key="k").translate(_request())

    assert len(stub.calls) == MAX_ATTEMPTS == 2
    assert result.used_fallback is True
    assert result.attempts_used == 2
    assert result.text == local_fallback(SOURCE)
    assert result.text == "annyeonghaseyo, igeoteun peurojekteu gyehoekipnida."
    assert result.to_transport()


@pytest.mark.asyncio
async def test_refusal_then_clean():
    stub = StubTranslationClient("Kechirasiz, bajara olmayman", CLEAN)
    result = await Translator(stub, api_key="k").translate(_request())

    assert result.text == CLEAN
    assert result.defects == (VerdictReason.LOOKS_LIKE_REFUSAL,)
    assert "without apologies" in stub.calls[1]["prompt_spec"].system_prompt


@pytest.mark.asyncio
async def test_cyrillic_refusal_is_retried():
    stub = StubTranslationClient("Кечирасиз, бу матнни таржима қила олмайман.", CLEAN)
    result = await Translator(stub, api_key="k").translate(_request())

    assert len(stub.calls) == 2
    assert result.text == CLEAN
    assert result.used_fallback is False
    assert result.defects == (VerdictReason.LOOKS_LIKE_REFUSAL,)
    assert "without apologies" in stub.calls[1]["prompt_spec"].system_prompt


@pytest.mark.asyncio
async def test_output_is_normalized_and_trimmed():
    stub = StubTranslationClient("  Ўзбек tili – Oʻzbekiston ҳақида\n")
    result = await Translator(stub, api_key="k").translate(_request())

    assert result.attempts_used == 1
    assert result.text.startswith("O'")
    assert "ʻ" not in result.text
    assert result.text == result.text.strip()


@pytest.mark.asyncio
async def test_upstream_error_stops_without_retry():
    stub = StubTranslationClient(UpstreamError(429, '{"error": {"message": "rate limited"}}'), CLEAN)
    with pytest.raises(UpstreamError) as excinfo:
        await Translator(stub, api_key="k").translate(_request())

    assert excinfo.value.status_code == 429
    assert len(stub.calls) == 1


@pytest.mark.asyncio
async def test_transport_error_on_second_attempt_propagates():
    stub = StubTranslationClient("안녕", TransportError("unreachable"))
    with pytest.raises(TransportError):
        await Translator(stub, api_key="k").translate(_request())

    assert len(stub.calls) == 2


@pytest.mark.asyncio
async def test_request_model_overrides_default():
    stub = StubTranslationClient(CLEAN)
    await Translator(stub, api_key="k", model="default-model").translate(_request(model="gpt-4o"))
    assert stub.calls[0]["model"] == "gpt-4o"


@pytest.mark.asyncio
async def test_ascii_output_mode():
    stub = StubTranslationClient("Oʻzbek tili — yaxshi")
    translator = Translator(stub, api_key="k", output_encoding="ascii")
    result = await translator.translate(_request())

    assert result.encoding == OutputEncoding.PLAIN_ASCII
    assert result.text == "O'zbek tili ? yaxshi"
    assert result.text.isascii()
