"""Error taxonomy for the todo service.

Raw Elasticsearch client errors are only inspected here. Everything above the
repository deals with :class:`AppError` subclasses.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from elasticsearch import ApiError, TransportError

RESOURCE_ALREADY_EXISTS = "resource_already_exists_exception"


class AppError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "statusCode": self.status_code,
            "error": self.code,
            "message": self.message,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str) -> None:
        super().__init__(f"{entity_type} with id '{entity_id}' not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class IndexOperationFailed(AppError):
    status_code = 500
    code = "INDEX_ERROR"

    def __init__(self, message: str, original_message: Optional[str] = None) -> None:
        details = {"originalError": original_message} if original_message else None
        super().__init__(f"Elasticsearch index error: {message}", details)
        self.original_message = original_message


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"


def _engine_status(error: BaseException) -> Optional[int]:
    if isinstance(error, ApiError):
        return error.status_code
    return None


def _engine_error_type(error: BaseException) -> Optional[str]:
    if not isinstance(error, ApiError):
        return None
    body = error.body
    if isinstance(body, dict):
        inner = body.get("error")
        if isinstance(inner, dict) and inner.get("type"):
            return str(inner["type"])
    return error.message or None


def describe_engine_error(error: BaseException) -> str:
    if isinstance(error, ApiError):
        body = error.body
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            reason = body["error"].get("reason")
            if reason:
                return str(reason)
        return error.message or str(error)
    if isinstance(error, TransportError):
        return error.message or str(error)
    return str(error)


def is_resource_already_exists(error: BaseException) -> bool:
    error_type = _engine_error_type(error)
    if error_type and RESOURCE_ALREADY_EXISTS in error_type:
        return True
    return RESOURCE_ALREADY_EXISTS in str(error)


def classify_engine_error(
    error: BaseException,
    action: str,
    *,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
) -> AppError:
    """Normalize a client failure into ``NotFoundError`` or ``IndexOperationFailed``."""

    if isinstance(error, AppError):
        return error
    if entity_id is not None and _engine_status(error) == 404:
        return NotFoundError(entity_type or "Todo", entity_id)
    return IndexOperationFailed(action, describe_engine_error(error))
