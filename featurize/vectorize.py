"""
Record vectorization.

One record, one role → one 1-D float64 vector: the flattened sub-vectors of
every field carrying the role, concatenated in field order. A field whose
array/enum value fails to flatten contributes nothing, so the vector narrows
instead of the call failing.
"""

import logging
from collections import Counter
from typing import Optional, Sequence

import numpy as np

from featurize.flatten import flatten
from featurize.registry import FieldDescriptor, Schema, get_registry

logger = logging.getLogger(__name__)

_EMPTY = np.empty(0, dtype=np.float64)


def vectorize_fields(
    record,
    fields: Sequence[FieldDescriptor],
    degraded: Optional[Counter] = None,
) -> np.ndarray:
    """
    Concatenate the flattened values of `fields` read from `record`.

    Args:
        record: Any object (or mapping) exposing the fields.
        fields: Ordered descriptors to read.
        degraded: Optional counter; the name of every field that failed to
            flatten is added to it.
    """
    if not fields:
        return _EMPTY.copy()

    parts = []
    for field in fields:
        sub = flatten(field.read(record), field)
        if sub is None:
            logger.debug(f"Field {field.name!r} of {type(record).__name__} dropped: "
                         f"value does not fit {field.shape!r}")
            if degraded is not None:
                degraded[field.name] += 1
            continue
        parts.append(sub)

    if not parts:
        return _EMPTY.copy()
    return np.concatenate(parts)


def vectorize(record, role, schema: Optional[Schema] = None) -> np.ndarray:
    """
    Feature (or label) vector of a single record.

    Args:
        record: The record to read.
        role: Role.FEATURE or Role.LABEL (or their string values).
        schema: Explicit schema; defaults to the registry's description of
            the record's type.

    Returns:
        1-D float64 array, empty when no field carries `role`.
    """
    if schema is None:
        fields = get_registry().classify(type(record), role)
    else:
        fields = schema.select(role)
    return vectorize_fields(record, fields)
