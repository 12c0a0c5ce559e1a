"""
Logging setup for LLM calls and inbound requests.

Provides:
- One-time handler configuration (console + rotating files)
- request_id propagation through contextvars
- Structured request/response/metrics log lines for every LLM call
"""
import json
import uuid
import logging
import contextvars
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Dict, Any

from config import (
    estimate_tokens,
    CONTEXT_WARNING_THRESHOLD,
    CONTEXT_ERROR_THRESHOLD,
)
from .config import (
    LOG_OUTPUT_DIR,
    LOG_TO_FILE,
    LOG_LEVEL,
    LOG_MAX_BYTES,
    LOG_BACKUP_COUNT,
    LOG_PREVIEW_LENGTH,
    LOG_DATE_FORMAT,
    LOG_DETAILED_FORMAT,
    LOG_SIMPLE_FORMAT,
    LOG_JSON_FORMAT,
    LOG_FILE_REQUESTS,
    LOG_FILE_ERRORS,
    LOG_FILE_METRICS,
)

LOG_DIR = Path(LOG_OUTPUT_DIR)

LLM_LOGGER_NAME = "llm"
METRICS_LOGGER_NAME = "llm.metrics"

_request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")

_configured = False


# =========================
# Request Context
# =========================

def generate_request_id() -> str:
    return str(uuid.uuid4())


def set_request_id(request_id: str) -> contextvars.Token:
    return _request_id_var.set(request_id)


def get_request_id() -> str:
    return _request_id_var.get()


def clear_request_id() -> None:
    _request_id_var.set("-")


class RequestContext:
    """
    Bind a request_id to every log record emitted inside the block.

    Usage:
        with RequestContext(request_id):
            logger.info("...")
    """

    def __init__(self, request_id: Optional[str] = None):
        self.request_id = request_id or generate_request_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> "RequestContext":
        self._token = set_request_id(self.request_id)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._token is not None:
            _request_id_var.reset(self._token)
            self._token = None
        return False


class RequestIdFilter(logging.Filter):
    """Inject the current request_id into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = get_request_id()
        return True


# =========================
# Log Records
# =========================

@dataclass
class LLMRequestLog:
    request_id: str
    model: str
    task: str
    prompt_chars: int
    prompt_preview: str
    temperature: float
    max_tokens: int
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


@dataclass
class LLMResponseLog:
    request_id: str
    model: str
    status: str
    latency_ms: float
    response_chars: int
    response_preview: str
    error_message: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


@dataclass
class LLMMetrics:
    request_id: str
    model: str
    task: str
    latency_ms: float
    prompt_chars: int
    response_chars: int
    status: str
    context_limit: int
    estimated_tokens: int
    context_usage_percent: float


@dataclass
class ContextUsageLog:
    request_id: str
    model: str
    estimated_tokens: int
    context_limit: int
    usage_percent: float


# =========================
# Setup
# =========================

def _file_handler(filename: str, level: int, fmt: str) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        LOG_DIR / filename,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=LOG_DATE_FORMAT))
    handler.addFilter(RequestIdFilter())
    return handler


def setup_llm_logging(level: Optional[str] = None, log_to_file: Optional[bool] = None) -> None:
    """
    Configure service logging once per process.

    Console output goes through the root logger so module loggers created
    with logging.getLogger(__name__) share the same format. LLM request and
    metrics lines additionally go to rotating files under LOG_DIR.
    """
    global _configured
    if _configured:
        return

    level_name = (level or LOG_LEVEL).upper()
    write_files = LOG_TO_FILE if log_to_file is None else log_to_file

    root = logging.getLogger()
    root.setLevel(level_name)

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(LOG_SIMPLE_FORMAT, datefmt=LOG_DATE_FORMAT))
    console.addFilter(RequestIdFilter())
    root.addHandler(console)

    if write_files:
        LOG_DIR.mkdir(parents=True, exist_ok=True)

        llm_logger = logging.getLogger(LLM_LOGGER_NAME)
        llm_logger.addHandler(_file_handler(LOG_FILE_REQUESTS, logging.DEBUG, LOG_DETAILED_FORMAT))
        root.addHandler(_file_handler(LOG_FILE_ERRORS, logging.ERROR, LOG_DETAILED_FORMAT))

        metrics_logger = logging.getLogger(METRICS_LOGGER_NAME)
        metrics_logger.addHandler(_file_handler(LOG_FILE_METRICS, logging.INFO, LOG_JSON_FORMAT))

    _configured = True
    logging.getLogger(LLM_LOGGER_NAME).debug(
        f"[LOGGING] Configured | level={level_name} | files={write_files} | dir={LOG_DIR}"
    )


def get_llm_logger() -> logging.Logger:
    return logging.getLogger(LLM_LOGGER_NAME)


def get_metrics_logger() -> logging.Logger:
    return logging.getLogger(METRICS_LOGGER_NAME)


def _preview(text: str) -> str:
    text = text.replace("\n", " ")
    if len(text) <= LOG_PREVIEW_LENGTH:
        return text
    return text[:LOG_PREVIEW_LENGTH] + "..."


# =========================
# LLM Call Logging
# =========================

def log_llm_request(
    model: str,
    task: str,
    prompt: str,
    temperature: float,
    max_tokens: int,
    request_id: Optional[str] = None,
) -> str:
    """Log an outgoing LLM request. Returns the request_id used."""
    request_id = request_id or get_request_id()
    if request_id == "-":
        request_id = generate_request_id()

    entry = LLMRequestLog(
        request_id=request_id,
        model=model,
        task=task,
        prompt_chars=len(prompt),
        prompt_preview=_preview(prompt),
        temperature=temperature,
        max_tokens=max_tokens,
    )
    get_llm_logger().info(
        f"[LLM_REQUEST] model={entry.model} | task={entry.task} | "
        f"chars={entry.prompt_chars} | temperature={entry.temperature} | "
        f"max_tokens={entry.max_tokens} | preview={entry.prompt_preview}"
    )
    return request_id


def log_llm_response(
    request_id: str,
    model: str,
    response: str,
    latency_ms: float,
    status: str,
    error_message: Optional[str] = None,
) -> None:
    """Log the outcome of an LLM request."""
    entry = LLMResponseLog(
        request_id=request_id,
        model=model,
        status=status,
        latency_ms=round(latency_ms, 2),
        response_chars=len(response),
        response_preview=_preview(response),
        error_message=error_message,
    )
    logger = get_llm_logger()
    if status == "success":
        logger.info(
            f"[LLM_RESPONSE] model={entry.model} | status={entry.status} | "
            f"latency_ms={entry.latency_ms} | chars={entry.response_chars} | "
            f"preview={entry.response_preview}"
        )
    else:
        logger.error(
            f"[LLM_RESPONSE] model={entry.model} | status={entry.status} | "
            f"latency_ms={entry.latency_ms} | error={entry.error_message}"
        )


def log_metrics(
    request_id: str,
    model: str,
    task: str,
    latency_ms: float,
    prompt_chars: int,
    response_chars: int,
    status: str,
    context_limit: int,
    estimated_tokens: int,
    context_usage_percent: float,
) -> None:
    """Write one JSON metrics line for an LLM call."""
    metrics = LLMMetrics(
        request_id=request_id,
        model=model,
        task=task,
        latency_ms=round(latency_ms, 2),
        prompt_chars=prompt_chars,
        response_chars=response_chars,
        status=status,
        context_limit=context_limit,
        estimated_tokens=estimated_tokens,
        context_usage_percent=context_usage_percent,
    )
    get_metrics_logger().info(json.dumps(asdict(metrics), ensure_ascii=False))


def log_context_usage(
    request_id: str,
    model: str,
    prompt: str,
    context_limit: int,
) -> Dict[str, Any]:
    """
    Estimate how much of the model context a prompt uses and log it.

    Returns:
        dict with 'estimated_tokens', 'context_limit' and 'usage_percent'
    """
    estimated = estimate_tokens(prompt)
    usage_percent = round((estimated / context_limit) * 100, 2) if context_limit else 0.0

    usage = ContextUsageLog(
        request_id=request_id,
        model=model,
        estimated_tokens=estimated,
        context_limit=context_limit,
        usage_percent=usage_percent,
    )

    logger = get_llm_logger()
    message = (
        f"[CONTEXT] model={usage.model} | tokens={usage.estimated_tokens} | "
        f"limit={usage.context_limit} | usage={usage.usage_percent}%"
    )
    if usage_percent >= CONTEXT_ERROR_THRESHOLD:
        logger.error(message)
    elif usage_percent >= CONTEXT_WARNING_THRESHOLD:
        logger.warning(message)
    else:
        logger.debug(message)

    return {
        "estimated_tokens": usage.estimated_tokens,
        "context_limit": usage.context_limit,
        "usage_percent": usage.usage_percent,
    }
