import re
import logging
from typing import List, Optional

import numpy as np
import pandas as pd

from semitools.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

# Values pasted into the data-set editor may be separated by commas, semicolons or whitespace
VALUE_SEPARATORS = r"[,;\s]+"


def parse_float(text: str, field: str) -> float:
    """
    Parses a user-entered number.
    Raises ValidationError for empty, non-numeric or non-finite input.
    """
    if text is None or not str(text).strip():
        raise ValidationError(f"{field} is required.")
    try:
        value = float(str(text).strip())
    except ValueError:
        raise ValidationError(f"Invalid {field.lower()}: '{text}' is not a number.")
    if not np.isfinite(value):
        raise ValidationError(f"Invalid {field.lower()}: '{text}' is not a finite number.")
    return value


def parse_int(text: str, field: str, minimum: Optional[int] = None) -> int:
    """Parses a user-entered whole number, optionally enforcing a lower bound."""
    if text is None or not str(text).strip():
        raise ValidationError(f"{field} is required.")
    try:
        value = int(str(text).strip())
    except ValueError:
        raise ValidationError(f"Invalid {field.lower()}: '{text}' is not a whole number.")
    if minimum is not None and value < minimum:
        raise ValidationError(f"{field} must be at least {minimum}.")
    return value


def parse_positive(text: str, field: str) -> float:
    value = parse_float(text, field)
    if value <= 0:
        raise ValidationError(f"{field} must be greater than 0.")
    return value


def parse_value_list(text: str) -> List[float]:
    """
    Parses a pasted block of numbers into a list of floats.
    Any token that is not numeric rejects the whole block.
    """
    if text is None or not text.strip():
        return []

    tokens = pd.Series([t for t in re.split(VALUE_SEPARATORS, text.strip()) if t])
    values = pd.to_numeric(tokens, errors='coerce').astype(float)

    # NaN marks unparseable tokens; 'inf' parses but is not a usable reading
    invalid = tokens[~np.isfinite(values)]
    if not invalid.empty:
        raise ValidationError(f"Invalid values: {', '.join(invalid.tolist())}")

    logger.debug(f"Parsed {len(values)} values from text input.")
    return values.tolist()


def validate_limits(lower: float, upper: float, lower_label: str = "LSL", upper_label: str = "USL") -> None:
    """Raises ValidationError unless lower < upper."""
    if lower >= upper:
        raise ValidationError(f"{lower_label} ({lower}) must be less than {upper_label} ({upper}).")


def require_text(text: str, field: str) -> str:
    """Returns the stripped text or raises ValidationError when blank."""
    if text is None or not text.strip():
        raise ValidationError(f"Please enter a {field.lower()}.")
    return text.strip()
