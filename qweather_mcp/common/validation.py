"""ABOUTME: Shared validation helpers for location tokens and tool arguments.

Design:
- Constants for token limits and the structural patterns used to classify tokens
- Field validator functions (for @field_validator decorators)
- Standalone predicates and helpers (no side effects)
"""

import re
from typing import Optional, Tuple

from pydantic import ValidationError


# =============================================================================
# Validation Constants
# =============================================================================

MIN_TOKEN_LENGTH: int = 1
MAX_TOKEN_LENGTH: int = 256

# "<longitude>,<latitude>", decimal, at most two fractional digits
COORDINATE_PAIR_PATTERN = re.compile(r"^-?\d{1,3}(\.\d{1,2})?,-?\d{1,2}(\.\d{1,2})?$")

# Han ideographs (CJK Unified Ideographs and Extension A)
NATIVE_SCRIPT_PATTERN = re.compile(r"[\u3400-\u4dbf\u4e00-\u9fff]")


# =============================================================================
# Pydantic Field Validator Functions (for @field_validator decorators)
# =============================================================================

def validate_token_field(v: str, field_name: str = "location") -> str:
    """Pydantic field validator for free-form location tokens.

    Args:
        v: Token to validate
        field_name: Name of field for error messages

    Returns:
        Token with surrounding whitespace stripped

    Raises:
        ValueError: If the token is empty or too long

    Usage:
        @field_validator("city_name")
        @classmethod
        def validate_city_name(cls, v: str) -> str:
            return validate_token_field(v, field_name="city_name")
    """
    is_valid, error = validate_token(v, field_name)
    if not is_valid:
        raise ValueError(error)
    return v.strip()


# =============================================================================
# Standalone Validator Functions
# =============================================================================

def validate_token(value: str, field_name: str = "location") -> Tuple[bool, Optional[str]]:
    """Validate a location token and return (is_valid, error_message).

    Example:
        is_valid, error = validate_token("101010100")
    """
    if not isinstance(value, str):
        return False, f"{field_name} must be a string, got {type(value).__name__}"

    value_len = len(value.strip())

    if value_len < MIN_TOKEN_LENGTH:
        return False, f"{field_name} cannot be empty or whitespace-only"

    if value_len > MAX_TOKEN_LENGTH:
        return False, f"{field_name} too long (max {MAX_TOKEN_LENGTH} characters, got {value_len})"

    return True, None


def is_coordinate_pair(token: str) -> bool:
    """True if the token is a "<longitude>,<latitude>" decimal pair."""
    return bool(COORDINATE_PAIR_PATTERN.match(token))


def contains_native_script(text: str) -> bool:
    """True if the text contains characters that need transliteration."""
    return bool(NATIVE_SCRIPT_PATTERN.search(text))


def flatten_validation_error(exc: ValidationError) -> str:
    """Render every failing field of a pydantic ValidationError on one line.

    Example:
        "days: Input should be 'now', '24h', ...; location: Field required"
    """
    problems = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error.get("loc", ())) or "arguments"
        problems.append(f"{path}: {error.get('msg', 'invalid value')}")
    return "; ".join(problems)
