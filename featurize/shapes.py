"""
Field shapes.

Every described field has exactly one shape, resolved once when the record
type is described:

    Scalar()              → 1 column
    FixedArray(length)    → `length` columns (None: whatever the value holds)
    EnumShape(domain)     → one-hot, len(domain) columns in declared order
"""

import collections.abc
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple, Union

import numpy as np


@dataclass(frozen=True)
class Scalar:
    """Single numeric-convertible value."""

    @property
    def width(self) -> int:
        return 1


@dataclass(frozen=True)
class FixedArray:
    """Ordered sequence of numeric-convertible elements."""
    length: Optional[int] = None

    @property
    def width(self) -> Optional[int]:
        return self.length


@dataclass(frozen=True)
class EnumShape:
    """One member of a closed, ordered set of possibilities."""
    domain: Tuple[Any, ...]

    @classmethod
    def of(cls, enum_type) -> 'EnumShape':
        """Shape covering every member of an Enum class, in declaration order."""
        return cls(tuple(enum_type))

    @property
    def width(self) -> int:
        return len(self.domain)


FieldShape = Union[Scalar, FixedArray, EnumShape]

_SEQUENCE_ORIGINS = (
    list, tuple,
    collections.abc.Sequence, collections.abc.MutableSequence,
)


# `X | None` has its own origin on Python 3.10+.
_UNION_ORIGINS = (Union, getattr(types, 'UnionType', Union))


def _unwrap_optional(tp):
    if typing.get_origin(tp) in _UNION_ORIGINS:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def shape_for_annotation(tp) -> FieldShape:
    """
    Resolve a field's shape from its type annotation.

    Optional[X] and X | None resolve as X. Tuple[float, float] is a 2-wide array,
    Tuple[float, ...] / List[float] / Sequence[float] / np.ndarray are
    arrays of unspecified length. str is a scalar.
    """
    tp = _unwrap_optional(tp)

    if isinstance(tp, type) and issubclass(tp, Enum):
        return EnumShape.of(tp)

    if tp in (list, tuple) or tp is np.ndarray:
        return FixedArray()

    origin = typing.get_origin(tp)
    if origin is tuple:
        args = typing.get_args(tp)
        if args and args[-1] is not Ellipsis:
            return FixedArray(len(args))
        return FixedArray()
    if origin in _SEQUENCE_ORIGINS or origin is np.ndarray:
        return FixedArray()

    return Scalar()
