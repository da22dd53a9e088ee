"""
Field Registry
==============
Maps record types to ordered field descriptors (name, roles, shape).

Dataclasses are described from their own declarations the first time they
are queried: field order is declaration order (inherited fields first, as
dataclasses.fields() reports them), roles come from field metadata and the
shape from the annotation. Any other type must be registered explicitly.

Usage:
    from featurize.registry import get_registry, record
    @record
    @dataclass
    class Listing:
        rooms: int = feature()

    get_registry().classify(Listing, Role.FEATURE)
    # → (FieldDescriptor(name='rooms', ...),)
"""

import dataclasses
import logging
import sys
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Literal, Optional, Tuple, Union

import yaml
from pydantic import AliasChoices, BaseModel, Field, ValidationError, conint, field_validator, model_validator

from featurize.errors import SchemaError
from featurize.roles import Role, SHAPE_KEY, as_role, roles_of
from featurize.shapes import EnumShape, FieldShape, FixedArray, Scalar, shape_for_annotation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldDescriptor:
    """One readable field of a record type."""
    name: str
    roles: frozenset = frozenset()
    shape: FieldShape = Scalar()

    def has_role(self, role: Role) -> bool:
        return role in self.roles

    def read(self, record) -> Any:
        """
        Current value of this field on `record`.

        Mappings are read by key, everything else by attribute. A field that
        cannot be read yields None, which the flattener treats as missing.
        """
        try:
            if isinstance(record, Mapping):
                return record.get(self.name)
            return getattr(record, self.name)
        except Exception as e:
            logger.debug(f"Could not read {self.name!r} from {type(record).__name__}: {e}")
            return None


class Schema:
    """Ordered, immutable collection of field descriptors."""

    def __init__(self, fields: Iterable[FieldDescriptor] = ()):
        self._fields: Tuple[FieldDescriptor, ...] = tuple(fields)
        names = [f.name for f in self._fields]
        if len(set(names)) != len(names):
            raise SchemaError(f"Duplicate field names in schema: {names}")

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"Schema({[f.name for f in self._fields]})"

    @property
    def fields(self) -> Tuple[FieldDescriptor, ...]:
        return self._fields

    def select(self, role) -> Tuple[FieldDescriptor, ...]:
        """Fields carrying `role`, in schema order. Empty for a non-concrete role."""
        role = as_role(role)
        if role is None:
            return ()
        return tuple(f for f in self._fields if f.has_role(role))

    # -----------------------------------------------------------------
    # Constructors
    # -----------------------------------------------------------------

    @classmethod
    def from_dataclass(cls, record_type) -> 'Schema':
        """
        Describe a dataclass from its field declarations.

        Raises:
            SchemaError: If a field carrying a role has an annotation that
                cannot be resolved and no explicit shape.
        """
        try:
            hints = typing.get_type_hints(record_type)
        except NameError as e:
            # Some forward reference is unresolvable: resolve field by field.
            logger.debug(f"Type hints of {record_type.__name__} unresolved: {e}")
            hints = {}
        descriptors = []
        for f in dataclasses.fields(record_type):
            roles = roles_of(f)
            shape = f.metadata.get(SHAPE_KEY)
            if shape is None:
                annotation = hints.get(f.name, f.type)
                if isinstance(annotation, str):
                    annotation = _resolve_annotation(annotation, record_type)
                if isinstance(annotation, str):
                    if roles:
                        raise SchemaError(
                            f"{record_type.__name__}.{f.name}: cannot resolve annotation "
                            f"{annotation!r}; pass shape=EnumShape.of(...), FixedArray(...) "
                            f"or Scalar() to the field"
                        )
                    shape = Scalar()
                else:
                    shape = shape_for_annotation(annotation)
            descriptors.append(FieldDescriptor(f.name, roles, shape))
        return cls(descriptors)

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> 'Schema':
        """
        Build a schema from a plain declaration.

            {'fields': [
                {'name': 'rooms', 'role': 'feature'},
                {'name': 'sizes', 'role': 'feature', 'shape': 'array', 'length': 2},
                {'name': 'kind', 'role': ['feature'], 'shape': 'enum',
                 'domain': ['flat', 'house', 'villa']},
                {'name': 'price', 'role': 'label'},
            ]}

        Raises:
            SchemaError: If the declaration does not validate.
        """
        try:
            model = SchemaModel.model_validate(cfg)
        except ValidationError as e:
            raise SchemaError(f"Invalid schema: {e}") from e
        return cls(entry.to_descriptor() for entry in model.entries)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> 'Schema':
        """Load a schema declaration from a YAML file."""
        with open(path) as f:
            cfg = yaml.safe_load(f)
        return cls.from_dict(cfg)


def _resolve_annotation(annotation: str, record_type):
    """Evaluate a string annotation in the record's module; returned unchanged if that fails."""
    module = sys.modules.get(record_type.__module__)
    namespace = dict(vars(module)) if module is not None else {}
    try:
        return eval(annotation, namespace)
    except (NameError, AttributeError, SyntaxError, TypeError):
        return annotation


# =============================================================================
# DECLARED SCHEMAS (dict / YAML)
# =============================================================================

class FieldEntry(BaseModel):
    """One field of a declared schema."""

    name: str = Field(..., description="Attribute or key read from each record")
    roles: List[Role] = Field(
        default_factory=list,
        validation_alias=AliasChoices('role', 'roles'),
        description="Roles carried by the field; a single role may be given as a string",
    )
    shape: Literal['scalar', 'array', 'enum'] = Field(
        'scalar',
        description="How the value is flattened",
    )
    length: Optional[conint(ge=0)] = Field(
        None,
        description="Declared array length; None takes whatever the value holds",
    )
    domain: Optional[List[Any]] = Field(
        None,
        description="Enum members in one-hot order",
    )

    @field_validator('roles', mode='before')
    @classmethod
    def _role_list(cls, v):
        if isinstance(v, str):
            v = [v]
        if isinstance(v, list):
            return [r.lower() if isinstance(r, str) else r for r in v]
        return v

    @model_validator(mode='after')
    def _enum_needs_domain(self) -> 'FieldEntry':
        if self.shape == 'enum' and not self.domain:
            raise ValueError(f"Field {self.name!r}: enum shape needs a non-empty domain")
        return self

    def to_descriptor(self) -> FieldDescriptor:
        if self.shape == 'array':
            shape = FixedArray(self.length)
        elif self.shape == 'enum':
            shape = EnumShape(tuple(self.domain))
        else:
            shape = Scalar()
        return FieldDescriptor(self.name, frozenset(self.roles), shape)


class SchemaModel(BaseModel):
    """Top-level schema declaration: an ordered list of fields."""

    entries: List[FieldEntry] = Field(..., validation_alias='fields')


class Registry:
    """
    Record type → Schema.

    Explicit registrations win and are inherited by subclasses that are not
    dataclasses themselves. Dataclass descriptions are cached per type.
    """

    def __init__(self):
        self._registered: Dict[type, Schema] = {}
        self._discovered: Dict[type, Schema] = {}

    def register(self, record_type: type, schema: Union[Schema, Iterable[FieldDescriptor]]) -> None:
        """Register an explicit schema for a record type."""
        if not isinstance(schema, Schema):
            schema = Schema(schema)
        self._registered[record_type] = schema
        logger.debug(f"Registered {record_type.__name__}: {schema!r}")

    def is_registered(self, record_type: type) -> bool:
        return record_type in self._registered

    def describe(self, record_type: type) -> Schema:
        """Schema of a record type; empty when nothing is known about it."""
        if record_type in self._registered:
            return self._registered[record_type]

        if dataclasses.is_dataclass(record_type):
            schema = self._discovered.get(record_type)
            if schema is None:
                schema = Schema.from_dataclass(record_type)
                self._discovered[record_type] = schema
            return schema

        for klass in getattr(record_type, '__mro__', ())[1:]:
            if klass in self._registered:
                return self._registered[klass]
        return Schema()

    def classify(self, record_type: type, role) -> Tuple[FieldDescriptor, ...]:
        """Fields of `record_type` carrying `role`, in declaration order."""
        return self.describe(record_type).select(role)

    def clear(self) -> None:
        self._registered.clear()
        self._discovered.clear()


# Module-level singleton
_registry: Optional[Registry] = None


def get_registry() -> Registry:
    """Get or create the global field registry."""
    global _registry
    if _registry is None:
        _registry = Registry()
    return _registry


def record(cls):
    """Class decorator: describe a dataclass now and register it."""
    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"@record expects a dataclass, got {cls!r}")
    get_registry().register(cls, Schema.from_dataclass(cls))
    return cls


def classify(record_type: type, role) -> Tuple[FieldDescriptor, ...]:
    """Fields of `record_type` carrying `role`, using the global registry."""
    return get_registry().classify(record_type, role)
