# =============================================================================
# core/validation.py - Generic Input Validation
# =============================================================================
# Schemas are pydantic models (field -> constraints). This module is the one
# routine that interprets them for inputs FastAPI does not validate on its own
# (multipart form fields, raw query dicts) and turns failures into a
# ValidationFailedError listing every failing field.
#
# JSON bodies, path and query parameters declared on routes go through
# FastAPI's request validation instead; app.exceptions renders both the same way.
# =============================================================================

from typing import Any, Literal, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

from app.exceptions import ValidationFailedError, format_validation_errors

ModelT = TypeVar("ModelT", bound=BaseModel)

InputLocation = Literal["body", "query", "path"]


def validate_input(
    model: type[ModelT],
    data: Mapping[str, Any] | None,
    location: InputLocation = "body",
) -> ModelT:
    """
    Validate a raw input bag against a schema.

    Args:
        model: The pydantic model describing the constraints
        data: Raw values (strings are coerced where the model allows)
        location: Prefix for error paths ("body", "query" or "path")

    Returns:
        The validated, normalized model instance

    Raises:
        ValidationFailedError: details = [{"path": "body.name", "message": ...}, ...]

    Example:
        page = validate_input(PaginationParams, {"limit": "20"}, "query")
        page.limit  # 20
    """
    try:
        return model.model_validate(dict(data or {}))
    except ValidationError as e:
        raise ValidationFailedError(
            details=format_validation_errors(e.errors(), prefix=location)
        ) from e
