"""
Logs Module

Provides:
- Logging configuration for the service and its LLM calls
- Request/Response logging with metrics
- request_id propagation across one inbound request
"""

from .logging_config import (
    setup_llm_logging,
    get_llm_logger,
    get_metrics_logger,
    log_llm_request,
    log_llm_response,
    log_metrics,
    log_context_usage,
    RequestContext,
    RequestIdFilter,
    set_request_id,
    get_request_id,
    clear_request_id,
    generate_request_id,
    LOG_DIR,
    ContextUsageLog,
    LLMRequestLog,
    LLMResponseLog,
    LLMMetrics
)

__all__ = [
    "setup_llm_logging",
    "get_llm_logger",
    "get_metrics_logger",
    "log_llm_request",
    "log_llm_response",
    "log_metrics",
    "log_context_usage",
    "RequestContext",
    "RequestIdFilter",
    "set_request_id",
    "get_request_id",
    "clear_request_id",
    "generate_request_id",
    "LOG_DIR",
    "ContextUsageLog",
    "LLMRequestLog",
    "LLMResponseLog",
    "LLMMetrics"
]
