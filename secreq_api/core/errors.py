# File: secreq_api/core/errors.py
"""
Handler error taxonomy.

Every endpoint is a boundary: use cases raise one of these and the endpoint
turns it into a JSON envelope with the matching status code.
"""
from typing import Any, Dict, List, Optional, Sequence

from fastapi import status
from fastapi.responses import JSONResponse


class HandlerError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_response(self, key: str = "error") -> JSONResponse:
        content: Dict[str, Any] = {key: self.message}
        if self.details:
            content["details"] = self.details
        return JSONResponse(status_code=self.status_code, content=content)


class ValidationError(HandlerError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(HandlerError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(HandlerError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(HandlerError):
    status_code = status.HTTP_404_NOT_FOUND


class DeliveryError(HandlerError):
    status_code = status.HTTP_502_BAD_GATEWAY


class InternalError(HandlerError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ProviderError(Exception):
    """Raised by provider adapters (generation, embeddings, email) when an upstream call fails."""

    def __init__(self, message: str, operation: str, error_type: str = "provider_error"):
        super().__init__(message)
        self.operation = operation
        self.error_type = error_type


VALUE_ERROR_PREFIX = "Value error, "


def _field_label(loc: Sequence[Any]) -> str:
    parts = [part for part in loc if part != "body"]
    if not parts:
        return "body"
    label = str(parts[0])
    for part in parts[1:]:
        label += f"[{part}]" if isinstance(part, int) else f".{part}"
    return label


def describe_validation_errors(errors: Sequence[Dict[str, Any]]) -> str:
    """Flattens pydantic request errors into one message naming each offending field."""
    messages: List[str] = []
    for error in errors:
        error_type = error.get("type")
        label = _field_label(error.get("loc", ()))
        if error_type == "json_invalid":
            message = "Invalid JSON body"
        elif error_type in ("missing", "string_too_short"):
            message = f"{label} required"
        elif error_type == "too_short":
            message = f"{label} must not be empty"
        elif error_type == "value_error":
            message = str(error.get("msg", "")).removeprefix(VALUE_ERROR_PREFIX)
        else:
            message = f"{label}: {error.get('msg')}"
        if message not in messages:
            messages.append(message)
    return "; ".join(messages) or "Invalid request body"
