"""
Query Validation - Estimation Input Rules

Turns untrusted form/API values into QueryFeatures. Every problem is
collected and reported together; nothing is defaulted or inferred.
"""

from __future__ import annotations

import math
from typing import Any, Final, Mapping, Optional, Union

from .models import FEATURE_COLUMNS, QueryFeatures, ValidationError


# =============================================================================
# Input Fields
# =============================================================================

# Numeric inputs, excluding fireplaces which arrives as has_fireplace
NUMERIC_INPUT_FIELDS: Final[tuple[str, ...]] = tuple(
    name for name in FEATURE_COLUMNS if name != "fireplaces"
)

INTEGER_INPUT_FIELDS: Final[frozenset[str]] = frozenset({
    "year_built",
    "year_remodeled",
    "bedrooms",
    "garage_cars",
    "full_baths",
    "half_baths",
})

REQUIRED_INPUT_FIELDS: Final[tuple[str, ...]] = NUMERIC_INPUT_FIELDS + ("has_fireplace",)

TRUE_STRINGS: Final[frozenset[str]] = frozenset({"true", "1", "yes", "on"})
FALSE_STRINGS: Final[frozenset[str]] = frozenset({"false", "0", "no", "off"})


# =============================================================================
# Coercion
# =============================================================================


def coerce_number(value: Any) -> Optional[float]:
    """
    Coerce a form or JSON value to a finite float.

    Returns None when the value is absent, blank, boolean or not numeric.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def coerce_flag(value: Any) -> Optional[bool]:
    """Coerce a checkbox-style value to bool, or None if unrecognised."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalised = value.strip().lower()
        if normalised in TRUE_STRINGS:
            return True
        if normalised in FALSE_STRINGS:
            return False
    return None


# =============================================================================
# Validation Functions
# =============================================================================


def validate_query(data: Mapping[str, Any]) -> QueryFeatures:
    """
    Validate raw estimation input and build QueryFeatures.

    has_fireplace is coerced to a fireplace count of 0 or 1.

    Args:
        data: Raw input mapping (form fields or JSON body)

    Returns:
        QueryFeatures

    Raises:
        ValidationError: Listing every missing or malformed field
    """
    errors: list[str] = []
    values: dict[str, Union[int, float]] = {}

    for name in NUMERIC_INPUT_FIELDS:
        raw = data.get(name)
        number = coerce_number(raw)
        if number is None:
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                errors.append(f"{name} is required")
            else:
                errors.append(f"{name} must be a number, got {raw!r}")
            continue
        if name in INTEGER_INPUT_FIELDS:
            if not number.is_integer():
                errors.append(f"{name} must be a whole number, got {raw!r}")
                continue
            values[name] = int(number)
        else:
            values[name] = number

    raw_flag = data.get("has_fireplace")
    flag = coerce_flag(raw_flag)
    if flag is None:
        if raw_flag is None:
            errors.append("has_fireplace is required")
        else:
            errors.append(f"has_fireplace must be true or false, got {raw_flag!r}")
    else:
        values["fireplaces"] = 1 if flag else 0

    if errors:
        raise ValidationError(errors)

    return QueryFeatures(**values)


def ensure_valid_query(query: QueryFeatures) -> QueryFeatures:
    """
    Check an already-built QueryFeatures.

    Guards the engine against programmatically constructed queries
    carrying missing or non-finite values.

    Raises:
        ValidationError: Listing every offending field
    """
    errors = []
    for name in FEATURE_COLUMNS:
        value = getattr(query, name, None)
        if coerce_number(value) is None:
            errors.append(f"{name} must be a finite number, got {value!r}")
    if errors:
        raise ValidationError(errors)
    return query
