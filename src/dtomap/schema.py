"""Static description of mapping targets.

A target class is described once, at registration time, by a
:class:`TargetSchema`: one :class:`FieldDescriptor` per public field. Field
metadata is declared with ``typing.Annotated`` markers::

    @dataclass
    class UserDTO:
        id: int = 0
        user_name: str = ""
        password: Annotated[str, Ignore()] = ""
        tags: Annotated[list, ArrayOf(TagDTO)] = field(default_factory=list)
        balance: Annotated[str, Converter("money")] = ""
"""

from __future__ import annotations

import collections.abc
import dataclasses
import types
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from inspect import Parameter, isclass, signature
from pathlib import PurePath
from typing import (
    Annotated,
    Any,
    ClassVar,
    Dict,
    Iterable,
    Mapping,
    Optional,
    Tuple,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)
from uuid import UUID

from pydantic import BaseModel

DYNAMIC = "dynamic"
SCALAR = "scalar"
ARRAY = "array"
NESTED = "nested"

VALUE_TYPES: Tuple[type, ...] = (
    int,
    float,
    complex,
    str,
    bytes,
    bytearray,
    bool,
    Decimal,
    Fraction,
    datetime,
    date,
    time,
    timedelta,
    UUID,
    Enum,
    PurePath,
)

CONTAINER_TYPES: Tuple[type, ...] = (list, tuple, set, frozenset, dict)
ABSTRACT_CONTAINER_TYPES = frozenset(
    {
        collections.abc.Iterable,
        collections.abc.Collection,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Set,
        collections.abc.MutableSet,
        collections.abc.Mapping,
        collections.abc.MutableMapping,
    }
)


@dataclasses.dataclass(frozen=True)
class Ignore:
    """Never write this field."""


@dataclasses.dataclass(frozen=True)
class ArrayOf:
    """Element type of a collection field."""

    item_type: type


@dataclasses.dataclass(frozen=True)
class Converter:
    """Field level converter: a registry key, a converter or its class."""

    converter: Any

    def __post_init__(self) -> None:
        if isclass(self.converter):
            object.__setattr__(self, "converter", self.converter())


@dataclasses.dataclass(frozen=True)
class FieldDescriptor:
    name: str
    kind: str = DYNAMIC
    type: Optional[Any] = None
    item_type: Optional[type] = None
    ignored: bool = False
    converter: Optional[Any] = None

    @property
    def type_name(self) -> str:
        if self.type is None:
            return "mixed"
        return getattr(self.type, "__name__", None) or repr(self.type)


def is_value_type(tp: Any) -> bool:
    return isclass(tp) and issubclass(tp, VALUE_TYPES)


def is_array_type(tp: Any) -> bool:
    return isclass(tp) and (
        issubclass(tp, CONTAINER_TYPES) or tp in ABSTRACT_CONTAINER_TYPES
    )


def is_mappable_type(tp: Any) -> bool:
    return (
        isclass(tp)
        and tp is not object
        and not is_value_type(tp)
        and not is_array_type(tp)
    )


def _unwrap_optional(tp: Any) -> Any:
    origin = get_origin(tp)
    if origin is Union or origin is getattr(types, "UnionType", None):
        args = [arg for arg in get_args(tp) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _classify(tp: Any) -> Tuple[str, Optional[Any], Optional[type]]:
    """Return ``(kind, declared type, inferred item type)`` for an annotation."""
    tp = _unwrap_optional(tp)
    if tp is Any or tp is object or tp is None:
        return DYNAMIC, None, None

    origin = get_origin(tp)
    if origin is not None and is_array_type(origin):
        args = [arg for arg in get_args(tp) if arg is not Ellipsis]
        item_type = args[-1] if args else None
        if not is_mappable_type(item_type):
            item_type = None
        return ARRAY, origin, item_type
    if origin is not None:
        # Union of several types, Literal and friends.
        return SCALAR, tp, None

    if is_array_type(tp):
        return ARRAY, tp, None
    if is_mappable_type(tp):
        return NESTED, tp, None
    return SCALAR, tp, None


def _split_annotated(annotation: Any) -> Tuple[Any, Tuple[Any, ...]]:
    if get_origin(annotation) is Annotated:
        base, *metadata = get_args(annotation)
        return base, tuple(metadata)
    return annotation, ()


def _public_class_attributes(cls: type) -> Iterable[str]:
    for klass in reversed(cls.__mro__[:-1]):
        for name, value in vars(klass).items():
            if name.startswith("_") or callable(value):
                continue
            if isinstance(value, (property, classmethod, staticmethod)):
                continue
            if hasattr(value, "__get__") and not isinstance(value, VALUE_TYPES):
                # Descriptors such as pydantic internals or ORM attributes.
                continue
            yield name


def _init_params(cls: type) -> Iterable[str]:
    try:
        parameters = signature(cls).parameters
    except (TypeError, ValueError):
        return ()
    return [
        name
        for name, param in parameters.items()
        if param.kind in (Parameter.POSITIONAL_OR_KEYWORD, Parameter.KEYWORD_ONLY)
        and not name.startswith("_")
    ]


def _annotations(cls: type) -> Dict[str, Any]:
    try:
        return get_type_hints(cls, include_extras=True)
    except (NameError, TypeError):
        # Unresolvable forward references: fall back to raw annotations.
        merged: Dict[str, Any] = {}
        for klass in reversed(cls.__mro__[:-1]):
            merged.update(getattr(klass, "__annotations__", {}))
        return merged


def _is_classvar(annotation: Any) -> bool:
    return annotation is ClassVar or get_origin(annotation) is ClassVar


def _pydantic_fields(target: type) -> Optional[Dict[str, Any]]:
    if not issubclass(target, BaseModel):
        return None
    model_fields = target.model_fields
    # pydantic moves Annotated extras into FieldInfo.metadata
    return {
        name: Annotated[(info.annotation, *info.metadata)]
        if info.metadata
        else info.annotation
        for name, info in model_fields.items()
    }


@dataclasses.dataclass(frozen=True)
class TargetSchema:
    target: type
    fields: Tuple[FieldDescriptor, ...]

    @classmethod
    def from_type(
        cls,
        target: type,
        *,
        ignore: Iterable[str] = (),
        item_types: Optional[Mapping[str, type]] = None,
        converters: Optional[Mapping[str, Any]] = None,
    ) -> "TargetSchema":
        ignore = set(ignore)
        item_types = dict(item_types or {})
        converters = {
            name: Converter(converter).converter
            for name, converter in (converters or {}).items()
        }

        descriptors: Dict[str, FieldDescriptor] = {}
        class_vars = set()
        pydantic_fields = _pydantic_fields(target)
        annotations = (
            pydantic_fields if pydantic_fields is not None else _annotations(target)
        )
        for name, annotation in annotations.items():
            if _is_classvar(annotation):
                class_vars.add(name)
                continue
            if name.startswith("_"):
                continue
            base, metadata = _split_annotated(annotation)
            if isinstance(base, str):
                # Forward reference that could not be evaluated.
                base = Any
            kind, declared, item_type = _classify(base)
            ignored = name in ignore
            converter = converters.get(name)
            for marker in metadata:
                if isinstance(marker, Ignore):
                    ignored = True
                elif isinstance(marker, ArrayOf):
                    item_type = marker.item_type
                elif isinstance(marker, Converter) and converter is None:
                    converter = marker.converter
            descriptors[name] = FieldDescriptor(
                name=name,
                kind=kind,
                type=declared,
                item_type=item_types.get(name, item_type),
                ignored=ignored,
                converter=converter,
            )

        untyped: Iterable[str] = ()
        if pydantic_fields is None:
            untyped = [*_public_class_attributes(target), *_init_params(target)]
        for name in untyped:
            if name in class_vars or name in descriptors:
                continue
            # Untyped fields only take part in conversion when asked to.
            if name in item_types:
                kind, declared = ARRAY, list
            elif name in converters:
                kind, declared = SCALAR, None
            else:
                kind, declared = DYNAMIC, None
            descriptors[name] = FieldDescriptor(
                name=name,
                kind=kind,
                type=declared,
                item_type=item_types.get(name),
                ignored=name in ignore,
                converter=converters.get(name),
            )

        unknown = (ignore | set(item_types) | set(converters)) - set(descriptors)
        if unknown:
            raise TypeError(
                f"{target.__name__} has no field(s) {', '.join(sorted(unknown))}"
            )

        return cls(target=target, fields=tuple(descriptors.values()))

    def __getitem__(self, name: str) -> FieldDescriptor:
        for descriptor in self.fields:
            if descriptor.name == name:
                return descriptor
        raise KeyError(name)

    def __iter__(self):
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)
