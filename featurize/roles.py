"""
Role markers.

A field carries zero or more roles. FEATURE marks a model input, LABEL a
model output. Roles are attached to dataclass fields through field metadata:

    @dataclass
    class Listing:
        rooms: int = feature()
        area: float = feature(default=0.0)
        kind: Kind = feature(default=Kind.FLAT)
        price: float = label(default=float('nan'))
        note: str = ''                                  # no role, never extracted
"""

import dataclasses
from enum import Enum
from typing import FrozenSet, Optional

ROLES_KEY = 'featurize.roles'
SHAPE_KEY = 'featurize.shape'


class Role(str, Enum):
    """Semantic role of a field for extraction."""
    FEATURE = "feature"
    LABEL = "label"

    def __str__(self) -> str:
        return self.value


def as_role(value) -> Optional[Role]:
    """
    Normalize a role argument.

    Accepts Role members and their string values. Anything else, including
    None and the Role class itself (no concrete role), returns None.
    """
    if isinstance(value, Role):
        return value
    if isinstance(value, str):
        try:
            return Role(value.lower())
        except ValueError:
            return None
    return None


def marked(*roles, shape=None, **field_kwargs):
    """
    dataclasses.field() carrying one or more roles.

    Args:
        *roles: Role members (or their string values).
        shape: Optional explicit FieldShape, overriding the one resolved
            from the annotation.
        **field_kwargs: Passed through to dataclasses.field().
    """
    resolved = [as_role(x) for x in roles]
    if None in resolved:
        raise ValueError(f"Unknown role in {roles!r}")
    metadata = dict(field_kwargs.pop('metadata', None) or {})
    metadata[ROLES_KEY] = frozenset(resolved)
    if shape is not None:
        metadata[SHAPE_KEY] = shape
    return dataclasses.field(metadata=metadata, **field_kwargs)


def feature(**kwargs):
    """Field marked as a model input."""
    return marked(Role.FEATURE, **kwargs)


def label(**kwargs):
    """Field marked as a model output."""
    return marked(Role.LABEL, **kwargs)


def roles_of(f: dataclasses.Field) -> FrozenSet[Role]:
    """Roles carried by a dataclass field (empty if unmarked)."""
    return f.metadata.get(ROLES_KEY, frozenset())
