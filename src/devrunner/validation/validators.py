"""
Simplified validation functions.

Only the checks that the config layer and the public API actually need.
"""

from typing import Any, List, Optional

from .exceptions import ValidationError


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate that a value is an integer within bounds.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated

    Returns:
        Validated integer value

    Raises:
        ValidationError: If validation fails
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    try:
        int_value = int(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    if int_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and int_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    return int_value


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """
    Validate that a value is a number within bounds.

    Raises:
        ValidationError: If validation fails
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid number, got {value}",
            field_name=field_name,
            value=value
        )
    try:
        float_value = float(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid number, got {value}",
            field_name=field_name,
            value=value
        )
    if float_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and float_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    return float_value


def validate_non_empty_string(value: Any, field_name: str = "value") -> str:
    """Validate that a value is a string with at least one non-blank character."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(
            f"{field_name} must be a non-empty string, got {value!r}",
            field_name=field_name,
            value=value
        )
    return value


def validate_enum_choice(
    value: Any,
    valid_choices: List[str],
    field_name: str = "value",
    case_sensitive: bool = False
) -> str:
    """
    Validate that a value is one of the allowed choices.

    Returns:
        The matching choice, spelled as in ``valid_choices``

    Raises:
        ValidationError: If the value is not a valid choice
    """
    if not isinstance(value, str):
        raise ValidationError(
            f"{field_name} must be a string, got {type(value).__name__}",
            field_name=field_name,
            value=value
        )

    for choice in valid_choices:
        if value == choice or (not case_sensitive and value.lower() == choice.lower()):
            return choice

    raise ValidationError(
        f"{field_name} must be one of {valid_choices}, got '{value}'",
        field_name=field_name,
        value=value
    )


def validate_string_list(value: Any, field_name: str = "value") -> List[str]:
    """Validate a list whose items are all non-empty strings."""
    if not isinstance(value, (list, tuple)):
        raise ValidationError(
            f"{field_name} must be a list of strings, got {type(value).__name__}",
            field_name=field_name,
            value=value
        )
    return [
        validate_non_empty_string(item, field_name=f"{field_name}[{i}]")
        for i, item in enumerate(value)
    ]
