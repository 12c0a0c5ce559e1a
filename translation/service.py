"""
Translation Service

FastAPI endpoints for Korean to Uzbek (Latin) translation using LLM.
"""
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from config import estimate_tokens, get_model_context_length
from core import (
    ServiceError,
    ConfigError,
    require_client_token,
    parse_json_body,
    validate_text_length,
    validate_token_count,
)
from logs.logging_config import get_llm_logger, RequestContext
from .config import TRANSLATION_MAX_CHARS, TRANSLATION_MAX_TOKEN_PERCENT
from .schemas import TranslateRequestBody, TranslateResponse
from .translator import Translator, TranslationRequest, OutputEncoding

logger = get_llm_logger()

BAD_REQUEST_MESSAGE = "Bad Request: need { text, targetLang }"

# Create router
router = APIRouter(tags=["Translation"])


def validate_input_size(text: str, model: str) -> None:
    """
    Reject text that is too long or too large for the model context.

    Raises:
        ValidationError: If a limit is exceeded
    """
    validate_text_length(text, TRANSLATION_MAX_CHARS, module_name="Translation")

    estimated_tokens = estimate_tokens(text)
    max_tokens = int(get_model_context_length(model) * (TRANSLATION_MAX_TOKEN_PERCENT / 100))
    if estimated_tokens > max_tokens:
        logger.warning(
            f"[GUARDRAIL] Token limit exceeded | tokens={estimated_tokens} | "
            f"max={max_tokens} | model={model}"
        )
    validate_token_count(estimated_tokens, max_tokens, module_name="Translation")


# =====================
# API Endpoints
# =====================

@router.get("/translate", response_class=PlainTextResponse)
async def translate_liveness():
    """Liveness probe."""
    return "ok"


@router.options("/translate")
async def translate_preflight():
    """CORS preflight acknowledgment for clients that send bare OPTIONS."""
    return Response(status_code=200)


@router.post(
    "/translate",
    response_model=TranslateResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_client_token)],
)
async def translate_endpoint(request: Request):
    """
    Translate Korean text into Uzbek (Latin script).

    **Request Body:**
    - `text`: Korean text to translate (required)
    - `targetLang`: Target language (required; resolves to uz-Latn)
    - `model`: Model to use (optional)

    **Returns:**
    - `ok`: true
    - `mode`: "translate"
    - `result_b64`: Base64 of the UTF-8 translation
    - `result`: plain ASCII translation, in ascii output mode only

    Headers `X-Translation-Attempts` and `X-Translation-Fallback` report how
    the result was produced.
    """
    settings = request.app.state.settings

    with RequestContext() as ctx:
        if not settings.api_key:
            raise ConfigError("Missing OPENAI_API_KEY")

        body = parse_json_body(await request.body(), TranslateRequestBody, BAD_REQUEST_MESSAGE)
        model = body.model or settings.model

        logger.info(
            f"[TRANSLATE] START | request_id={ctx.request_id} | "
            f"chars={len(body.text)} | target={body.targetLang} | model={model}"
        )

        validate_input_size(body.text, model)

        translator = Translator(
            client=request.app.state.translation_client,
            api_key=settings.api_key,
            model=model,
            output_encoding=settings.output_encoding,
        )

        try:
            result = await translator.translate(
                TranslationRequest(source_text=body.text, target_lang_raw=body.targetLang, model=model)
            )
        except ServiceError as e:
            logger.error(
                f"[TRANSLATE] ERROR | request_id={ctx.request_id} | "
                f"status={e.status_code} | error={e.message}"
            )
            raise
        except Exception as e:
            logger.exception(f"[TRANSLATE] ERROR | request_id={ctx.request_id} | error={str(e)}")
            raise ServiceError(f"Translation failed: {str(e)}")

        logger.info(
            f"[TRANSLATE] END | request_id={ctx.request_id} | output_chars={len(result.text)} | "
            f"attempts={result.attempts_used} | fallback={result.used_fallback}"
        )

        response = TranslateResponse(
            result_b64=result.to_transport(),
            result=result.text if result.encoding == OutputEncoding.PLAIN_ASCII else None,
        )
        return JSONResponse(
            content=response.model_dump(exclude_none=True),
            headers={
                "X-Request-ID": ctx.request_id,
                "X-Translation-Attempts": str(result.attempts_used),
                "X-Translation-Fallback": "true" if result.used_fallback else "false",
            },
        )
