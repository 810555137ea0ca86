"""
Error handling utilities for the PixelMind client.

Every failure the client can surface ends up as exactly one user-facing
message in FormState. This module owns those messages and the logging of
the underlying exception.
"""

import logging
import re
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any

from utils.logging_config import get_logger

logger = get_logger(__name__)


class ErrorKind(Enum):
    """Kinds of errors surfaced to the user."""
    MODEL_LIST_FAILURE = "model_list_failure"
    SCHEMA_FETCH_FAILURE = "schema_fetch_failure"
    SCHEMA_NOT_FOUND = "schema_not_found"
    VALIDATION_FAILURE = "validation_failure"
    GENERATION_FAILURE = "generation_failure"
    DOWNLOAD_FAILURE = "download_failure"


USER_MESSAGES = {
    ErrorKind.MODEL_LIST_FAILURE: "Failed to fetch models.",
    ErrorKind.SCHEMA_FETCH_FAILURE: "Error fetching schema.",
    ErrorKind.SCHEMA_NOT_FOUND: "Schema not found.",
    ErrorKind.VALIDATION_FAILURE: "Please fill in all required fields.",
    ErrorKind.GENERATION_FAILURE: "Error generating image.",
    ErrorKind.DOWNLOAD_FAILURE: "Error downloading image.",
}


class SanitizedError:
    """Sanitized error representation."""

    def __init__(
        self,
        user_message: str,
        kind: ErrorKind,
        transient: bool = False,
        error_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        self.user_message = user_message
        self.kind = kind
        self.transient = transient
        self.error_id = error_id or f"ERR_{datetime.now().strftime('%H%M%S')}"
        self.context = context or {}
        self.original_error = original_error
        self.timestamp = datetime.now()


def sanitize_error_message(error_message: str) -> str:
    """
    Strip URLs, keys and stack traces from an error message before it is
    logged. Upstream response bodies end up in exception messages.

    Args:
        error_message: Raw error message

    Returns:
        Sanitized error message
    """
    if not error_message:
        return "An error occurred"

    sanitized = error_message

    # Query strings may carry tokens
    sanitized = re.sub(r'(https?://[^\s?]+)\?[^\s]*', r'\1?[QUERY]', sanitized)

    # Bearer tokens and long opaque keys
    sanitized = re.sub(r'(?i)bearer\s+[A-Za-z0-9._\-]+', 'Bearer [KEY]', sanitized)
    sanitized = re.sub(r'sk-[A-Za-z0-9]{20,}', '[KEY]', sanitized)

    # Embedded image payloads are huge and useless in logs
    sanitized = re.sub(r'data:[^\s,]*,[^\s]+', '[DATA_URI]', sanitized)

    sanitized = re.sub(r'Traceback \(most recent call last\):.*?$', '', sanitized, flags=re.MULTILINE | re.DOTALL)

    sanitized = re.sub(r'\s+', ' ', sanitized).strip()

    if len(sanitized) > 200:
        sanitized = sanitized[:197] + "..."

    return sanitized or "Sanitized error message"


def get_user_message(kind: ErrorKind) -> str:
    """Return the user-facing message for an error kind."""
    return USER_MESSAGES[kind]


def handle_error(
    error: Optional[Exception],
    kind: ErrorKind,
    context: Optional[Dict[str, Any]] = None
) -> SanitizedError:
    """
    Log a failure and return its sanitized, user-facing form.

    Args:
        error: The exception that caused the failure, if any
        kind: Which user-facing error this becomes
        context: Extra details for the log line (model id, operation, ...)

    Returns:
        SanitizedError instance
    """
    transient = bool(getattr(error, "transient", False))

    sanitized_error = SanitizedError(
        user_message=get_user_message(kind),
        kind=kind,
        transient=transient,
        context=context,
        original_error=error
    )

    # Validation and missing schemas are expected outcomes, not faults
    if kind in (ErrorKind.VALIDATION_FAILURE, ErrorKind.SCHEMA_NOT_FOUND):
        log_level = logging.INFO
    elif transient:
        log_level = logging.WARNING
    else:
        log_level = logging.ERROR

    original = "none"
    if error is not None:
        original = f"{type(error).__name__}: {sanitize_error_message(str(error))}"

    logger.log(
        log_level,
        f"Error {sanitized_error.error_id} [{kind.value}]: {sanitized_error.user_message} | "
        f"Original: {original} | Transient: {transient} | Context: {sanitized_error.context}"
    )

    return sanitized_error
