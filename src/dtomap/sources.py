from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Dict, Iterator

from pydantic import BaseModel
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import InstanceState


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

FieldTable = Dict[str, Any]

_SNAKE_BOUNDARY = re.compile(r"(.)(?=[A-Z])")
_WORD_SEPARATORS = re.compile(r"[-_\s]+")


def ucfirst(value: str) -> str:
    return value[:1].upper() + value[1:]


def snake(value: str) -> str:
    """``userName`` -> ``user_name``. Already lowercase names are kept."""
    if value.islower():
        return value
    return _SNAKE_BOUNDARY.sub(r"\1_", re.sub(r"\s+", "", value)).lower()


def studly(value: str) -> str:
    """``user_name`` -> ``UserName``."""
    return "".join(ucfirst(word) for word in _WORD_SEPARATORS.split(value))


def camel(value: str) -> str:
    """``user_name`` -> ``userName``."""
    studly_value = studly(value)
    return studly_value[:1].lower() + studly_value[1:]


# region Source extraction


def _slot_names(source: Any) -> Iterator[str]:
    for klass in type(source).__mro__:
        slots = vars(klass).get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        yield from slots


def _public_attrs(source: Any) -> FieldTable:
    attrs: FieldTable = {}
    for name in _slot_names(source):
        if hasattr(source, name):
            attrs[name] = getattr(source, name)
    attrs.update(getattr(source, "__dict__", {}))
    return {name: value for name, value in attrs.items() if not name.startswith("_")}


def _model_attrs(source: Any, state: InstanceState) -> FieldTable:
    mapper = state.mapper
    # Expired and deferred columns are refreshed by the attribute access.
    attrs: FieldTable = {
        attr.key: getattr(source, attr.key) for attr in mapper.column_attrs
    }
    # Relationships are read from loaded state only, never lazy loaded.
    loaded = state.dict
    attrs.update(
        (rel.key, loaded[rel.key]) for rel in mapper.relationships if rel.key in loaded
    )
    return attrs


def extract(source: Any) -> FieldTable:
    """Build the field table of ``source`` without mutating it."""
    if isinstance(source, Mapping):
        return dict(source)

    to_dict = getattr(source, "to_dict", None) or getattr(source, "_asdict", None)
    if callable(to_dict):
        return dict(to_dict())

    if isinstance(source, BaseModel):
        # Shallow: nested models stay models.
        return dict(source)

    state = sa_inspect(source, raiseerr=False)
    if isinstance(state, InstanceState):
        return _model_attrs(source, state)

    return _public_attrs(source)


# endregion

# region Field resolution


def _call_getter(source: Any, name: str) -> Any:
    if callable(getattr(type(source), name, None)):
        return getattr(source, name)()
    return MISSING


def resolve(source: Any, table: FieldTable, name: str) -> Any:
    """Find the value for target field ``name``.

    Getter methods are tried before the field table, then the name is looked
    up as is, in snake_case and in camelCase. ``MISSING`` is returned when
    nothing matches.

    Besides the ``getUserName`` style getters a Python ``get_user_name``
    method is honoured too, so such a method on the source class wins over
    a ``user_name`` attribute even when it is unrelated to it.
    """
    snake_name = snake(name)
    getters = (
        f"get{ucfirst(name)}",
        f"get{ucfirst(camel(snake_name))}",
        f"get_{snake_name}",
    )
    for getter in getters:
        value = _call_getter(source, getter)
        if value is not MISSING:
            return value

    for key in (name, snake_name, camel(name)):
        if key in table:
            return table[key]
    return MISSING


# endregion
