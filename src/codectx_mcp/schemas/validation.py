"""
Input validation and schema utilities for tool definitions.
"""

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def validate_input(model_class: type[T], data: dict[str, Any] | None) -> T:
    """
    Validate input data against a Pydantic model.

    Args:
        model_class: The Pydantic model class to validate against
        data: Input data dictionary (None is treated as empty)

    Returns:
        Validated model instance

    Raises:
        ValueError: If validation fails with detailed error message
    """
    try:
        return model_class.model_validate(data or {})
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            msg = error["msg"]
            errors.append(f"{loc}: {msg}" if loc else msg)
        raise ValueError(f"Input validation failed: {'; '.join(errors)}") from e


def get_json_schema(model_class: type[BaseModel]) -> dict[str, Any]:
    """
    Get JSON Schema for a Pydantic model.

    Args:
        model_class: Pydantic model class

    Returns:
        JSON Schema dictionary
    """
    return model_class.model_json_schema()
