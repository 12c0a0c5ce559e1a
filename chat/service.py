"""
Chat Service

FastAPI endpoint proxying chat completions to the LLM provider.
"""
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from core import ConfigError, require_client_token, parse_json_body
from logs.logging_config import get_llm_logger, RequestContext
from .schemas import ChatRequestBody

logger = get_llm_logger()

router = APIRouter(tags=["Chat"])


@router.options("/chat")
async def chat_preflight():
    """CORS preflight acknowledgment for clients that send bare OPTIONS."""
    return Response(status_code=200)


@router.post("/chat", dependencies=[Depends(require_client_token)])
async def chat_endpoint(request: Request):
    """
    Forward `{model, messages}` to the provider and return its JSON unchanged.

    Provider errors are passed through with the provider's status code.
    """
    settings = request.app.state.settings

    with RequestContext() as ctx:
        if not settings.api_key:
            raise ConfigError("Missing OPENAI_API_KEY")

        body = parse_json_body(await request.body(), ChatRequestBody, "messages(Array) required")
        client = request.app.state.chat_llm_client
        payload = client.build_payload(body.messages, model=body.model or settings.model)

        logger.info(
            f"[CHAT] START | request_id={ctx.request_id} | "
            f"messages={len(body.messages)} | model={payload['model']}"
        )

        data = await client.chat_completion(payload, settings.api_key)

        logger.info(f"[CHAT] END | request_id={ctx.request_id}")
        return JSONResponse(content=data, headers={"X-Request-ID": ctx.request_id})
