"""
Core Validators

Shared input guardrails for all modules.
"""

import json

from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError


def validate_token_count(
    estimated_tokens: int,
    token_limit: int,
    module_name: str = "Module"
) -> None:
    """
    Validate that estimated tokens don't exceed the allowed share of the context.

    Args:
        estimated_tokens: Estimated token count for the request
        token_limit: Maximum tokens accepted for the input
        module_name: Name of the module for error messages

    Raises:
        ValidationError: If tokens exceed the limit
    """
    if estimated_tokens > token_limit:
        raise ValidationError(
            f"{module_name}: Estimated tokens ({estimated_tokens}) exceed "
            f"limit ({token_limit}). Please reduce input size.",
            detail={
                "error": "token_limit_exceeded",
                "estimated_tokens": estimated_tokens,
                "max_tokens": token_limit,
            }
        )


def validate_text_length(
    text: str,
    max_chars: int,
    module_name: str = "Module"
) -> None:
    """
    Validate that text length doesn't exceed maximum.

    Args:
        text: Text to validate
        max_chars: Maximum allowed characters
        module_name: Name of the module for error messages

    Raises:
        ValidationError: If text length exceeds maximum
    """
    if len(text) > max_chars:
        raise ValidationError(
            f"{module_name}: Text length ({len(text)}) exceeds "
            f"maximum of {max_chars} characters."
        )


def parse_json_body(raw: bytes, schema, error_message: str):
    """
    Decode a raw request body and validate it against a pydantic model.

    An empty body counts as {}. A body that decodes to a JSON string is
    decoded once more, for clients that double-encode their payload.

    Raises:
        ValidationError: on malformed JSON or a schema mismatch
    """
    # Decoded by hand rather than as a typed body parameter: double-encoded
    # payloads must still parse, and schema errors must map to 400, not 422.
    try:
        payload = json.loads(raw or b"{}")
        if isinstance(payload, str):
            payload = json.loads(payload or "{}")
    except ValueError:
        raise ValidationError(error_message, detail="Request body is not valid JSON.")

    if not isinstance(payload, dict):
        raise ValidationError(error_message, detail="Request body must be a JSON object.")

    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(
            error_message,
            detail=[{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()]
        )
