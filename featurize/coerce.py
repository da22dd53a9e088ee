"""
Scalar coercion to float.

coerce() never raises: anything that has no numeric reading becomes NaN.
coerce_element() is the strict form used for array elements, where one bad
element invalidates the whole array.
"""

import numpy as np

from featurize.errors import CoercionError

NAN = float('nan')


def coerce_element(value) -> float:
    """
    Convert a value to float or raise CoercionError.

    None, containers and non-numeric strings are rejected. Booleans map to
    0.0/1.0, strings are parsed after stripping whitespace.
    """
    if value is None:
        raise CoercionError("None has no numeric value")
    if isinstance(value, (bool, np.bool_)):
        return 1.0 if value else 0.0
    if isinstance(value, str):
        value = value.strip()
    elif isinstance(value, np.ndarray):
        if value.ndim != 0:
            raise CoercionError(f"Cannot convert array of shape {value.shape} to float")
        value = value.item()
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise CoercionError(f"Cannot convert {value!r} to float") from e


def coerce(value) -> float:
    """Convert a value to float, returning NaN when it has no numeric reading."""
    try:
        return coerce_element(value)
    except CoercionError:
        return NAN
