"""
Copy readable-and-writable field values from one record to another.
"""

import dataclasses
from typing import Iterator, Tuple


def _writable_fields(source) -> Iterator[Tuple[str, object]]:
    cls = type(source)
    seen = set()

    if dataclasses.is_dataclass(source):
        frozen = cls.__dataclass_params__.frozen
        for f in dataclasses.fields(source):
            seen.add(f.name)
            if not frozen:
                yield f.name, getattr(source, f.name)

    for name, value in getattr(source, '__dict__', {}).items():
        if name not in seen:
            seen.add(name)
            yield name, value

    for klass in cls.__mro__:
        for name in getattr(klass, '__slots__', ()):
            if name in seen or name in ('__dict__', '__weakref__') or not hasattr(source, name):
                continue
            seen.add(name)
            yield name, getattr(source, name)

    for name in dir(cls):
        attr = getattr(cls, name, None)
        if isinstance(attr, property) and name not in seen:
            seen.add(name)
            if attr.fget is not None and attr.fset is not None:
                yield name, attr.fget(source)


def clone(source, destination):
    """
    Copy every readable and writable field of `source` onto `destination`.

    Covers dataclass fields (skipped for frozen dataclasses), instance
    attributes, slots and properties that have both a getter and a setter.
    Values are copied by reference.

    Raises:
        TypeError: If `destination` is not an instance of `source`'s type.
    """
    if not isinstance(destination, type(source)):
        raise TypeError(
            f"Cannot clone {type(source).__name__} into {type(destination).__name__}"
        )
    for name, value in _writable_fields(source):
        setattr(destination, name, value)
    return destination
