"""
Flatten one field value into a numeric sub-vector.

Dispatches on the field's shape:

    Scalar       → [coerce(value)]                 never fails, may be NaN
    FixedArray   → [coerce(x) for x in value]      None if not a sequence,
                                                   wrong length, or a bad element
    EnumShape    → one-hot over the full domain    None if value is not a member

None means the field contributes nothing to the record's vector.
"""

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import List, Optional, Union

import numpy as np

from featurize.coerce import coerce, coerce_element
from featurize.errors import CoercionError
from featurize.registry import FieldDescriptor
from featurize.shapes import EnumShape, FieldShape, FixedArray, Scalar


def _shape(target: Union[FieldDescriptor, FieldShape]) -> FieldShape:
    return target.shape if isinstance(target, FieldDescriptor) else target


def _is_sequence(value) -> bool:
    if isinstance(value, np.ndarray):
        return value.ndim == 1
    if isinstance(value, (str, bytes, bytearray, Mapping)):
        return False
    return isinstance(value, Sequence)


def flatten_array(value, shape: FixedArray) -> Optional[np.ndarray]:
    """Element-wise strict coercion of a sequence value."""
    if not _is_sequence(value):
        return None
    if shape.length is not None and len(value) != shape.length:
        return None
    try:
        return np.array([coerce_element(x) for x in value], dtype=np.float64)
    except CoercionError:
        return None


def _matches(value, member) -> bool:
    if value is member:
        return True
    # True/False never resolve to 1/0 members.
    if isinstance(value, bool) != isinstance(member, bool):
        return False
    try:
        return bool(value == member)
    except (TypeError, ValueError):
        return False


def flatten_enum(value, shape: EnumShape) -> Optional[np.ndarray]:
    """One-hot encoding of `value` over the shape's full domain."""
    hits = [_matches(value, member) for member in shape.domain]
    if sum(hits) != 1:
        return None
    return np.array(hits, dtype=np.float64)


def flatten(value, target: Union[FieldDescriptor, FieldShape]) -> Optional[np.ndarray]:
    """
    Flatten a field value according to the field's shape.

    Args:
        value: Current value of the field.
        target: The FieldDescriptor (or bare FieldShape) of the field.

    Returns:
        1-D float64 array, or None when an array/enum value is structurally
        wrong for its declared shape.
    """
    shape = _shape(target)
    if isinstance(shape, FixedArray):
        return flatten_array(value, shape)
    if isinstance(shape, EnumShape):
        return flatten_enum(value, shape)
    if isinstance(shape, Scalar):
        return np.array([coerce(value)], dtype=np.float64)
    raise TypeError(f"Unknown field shape: {shape!r}")


def _member_label(member) -> str:
    if isinstance(member, Enum):
        return str(member.name)
    return str(member)


def column_names(field: FieldDescriptor, value=None) -> List[str]:
    """
    Column names for a field's sub-vector.

    Arrays of unspecified length take their width from `value`; with no
    usable value they get no columns.
    """
    shape = field.shape
    if isinstance(shape, EnumShape):
        return [f"{field.name}_{_member_label(m)}" for m in shape.domain]
    if isinstance(shape, FixedArray):
        width = shape.length
        if width is None:
            width = len(value) if _is_sequence(value) else 0
        return [f"{field.name}_{i}" for i in range(width)]
    return [field.name]
