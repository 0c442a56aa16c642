"""
Field descriptors for outgoing request types.

Request types are dataclasses whose fields are declared with `param()`,
which records the wire name and the omit-if-empty flag in the field metadata.
`field_specs()` turns a request type into a descriptor table once and caches it,
so encoding is a lookup over descriptors.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, Tuple

WIRE_NAME = "gramvibe.wire_name"
OMIT_EMPTY = "gramvibe.omit_empty"


def param(wire_name: Optional[str] = None, *, omit_empty: bool = False,
          default: Any = dataclasses.MISSING, default_factory: Any = dataclasses.MISSING):
    """dataclasses.field() with a wire name and an omit-if-empty flag."""
    metadata = {WIRE_NAME: wire_name, OMIT_EMPTY: omit_empty}
    if default_factory is not dataclasses.MISSING:
        return dataclasses.field(default_factory=default_factory, metadata=metadata)
    return dataclasses.field(default=default, metadata=metadata)


@dataclass(frozen=True)
class FieldSpec:
    attr: str
    wire_name: str
    omit_empty: bool


@lru_cache(maxsize=None)
def field_specs(cls: type) -> Tuple[FieldSpec, ...]:
    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"{cls.__name__} is not a dataclass")
    specs = []
    for f in dataclasses.fields(cls):
        specs.append(FieldSpec(
            attr=f.name,
            wire_name=f.metadata.get(WIRE_NAME) or f.name,
            omit_empty=bool(f.metadata.get(OMIT_EMPTY, False)),
        ))
    return tuple(specs)


def is_empty(value: Any) -> bool:
    """Zero value test used by omit-if-empty fields."""
    if value is None:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, (str, bytes, list, tuple, dict, set, frozenset)):
        return len(value) == 0
    return False
