from __future__ import annotations

import collections.abc
import types
from datetime import date, datetime, time
from inspect import Parameter, isabstract, isclass, signature
from typing import (
    Any,
    Dict,
    Iterable,
    List,
    Literal,
    Mapping,
    NoReturn,
    Optional,
    Set,
    Type,
    TypeVar,
    Union,
    get_args,
    get_origin,
)

import structlog
from pydantic import BaseModel

from . import converters as conv
from .config import MapperConfig
from .converters import ConverterRegistry
from .dates import format_date
from .errors import ConstructionError, TypeMismatchError
from .schema import (
    ARRAY,
    CONTAINER_TYPES,
    DYNAMIC,
    NESTED,
    VALUE_TYPES,
    FieldDescriptor,
    TargetSchema,
)
from .sources import MISSING, extract, resolve

logger = structlog.get_logger(__name__)

TT = TypeVar("TT")

TEXT_TYPES = (str, bytes, bytearray)
DATE_VALUES = (datetime, date, time)


def is_collection(value: Any) -> bool:
    """Lists, tuples, sets, ORM collections and iterators; not text, not mappings."""
    if isinstance(value, TEXT_TYPES) or isinstance(value, Mapping):
        return False
    if isinstance(value, BaseModel) or callable(getattr(value, "_asdict", None)):
        # Records: named tuples are objects here, not sequences.
        return False
    return isinstance(value, (collections.abc.Collection, collections.abc.Iterator))


def as_container(value: Any, declared: type) -> Any:
    if isinstance(value, declared) and not isinstance(value, TEXT_TYPES):
        return value
    if issubclass(declared, CONTAINER_TYPES):
        factory = declared
    elif issubclass(declared, collections.abc.Mapping):
        factory = dict
    else:
        factory = list

    if issubclass(factory, dict):
        return factory(value) if isinstance(value, Mapping) else factory()
    if isinstance(value, Mapping):
        return factory(value.values())
    if is_collection(value):
        return factory(value)
    return factory()


def is_compatible(value: Any, expected: Any) -> bool:
    if expected is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if expected is float:
        return isinstance(value, float)
    if isclass(expected):
        return isinstance(value, expected)

    origin = get_origin(expected)
    if origin is Literal:
        return value in get_args(expected)
    if origin is Union or isinstance(expected, getattr(types, "UnionType", ())):
        return any(is_compatible(value, arg) for arg in get_args(expected))
    # TypeVars, NewTypes and other annotations we can't check at runtime.
    return True


class PopoAdapter:
    def get_init_params(self, cls: Type[Any]) -> Set[str]:
        try:
            parameters = signature(cls).parameters
        except (TypeError, ValueError):
            return set()
        return {
            name
            for name, param in parameters.items()
            if param.kind in (Parameter.POSITIONAL_OR_KEYWORD, Parameter.KEYWORD_ONLY)
        }

    def set_attrs(self, instance: TT, attrs: Mapping[str, Any]) -> TT:
        for name, value in attrs.items():
            setattr(instance, name, value)
        return instance

    def create_instance(self, cls: Type[TT], attrs: Mapping[str, Any]) -> TT:
        if isabstract(cls):
            raise ConstructionError(cls.__name__, "abstract class")
        init_params = self.get_init_params(cls)
        kwargs = {name: value for name, value in attrs.items() if name in init_params}
        try:
            instance = cls(**kwargs)
        except TypeError as e:
            raise ConstructionError(cls.__name__, e) from e
        return self.set_attrs(
            instance, {k: v for k, v in attrs.items() if k not in kwargs}
        )


class PydanticModelAdapter(PopoAdapter):
    def create_instance(self, cls: Type[TT], attrs: Mapping[str, Any]) -> TT:
        missing = [
            name
            for name, info in cls.model_fields.items()
            if info.is_required() and name not in attrs and info.alias not in attrs
        ]
        if missing:
            raise ConstructionError(
                cls.__name__, f"missing required field(s) {', '.join(missing)}"
            )
        # Values are assigned as resolved, pydantic validation is not re-run.
        return cls.model_construct(**attrs)


class Mapper:
    """Populate target objects from arbitrary source objects.

    Target fields are matched by name (getters, exact, snake_case and
    camelCase keys), nested objects and collections are mapped
    recursively and values pass through the field or global converters.

    Usage::

        mapper = Mapper(MapperConfig(date_format="Y-m-d"))
        dto = mapper.map(user, UserDTO)
        dtos = mapper.map_collection(users, UserDTO)
    """

    def __init__(
        self,
        config: Optional[MapperConfig] = None,
        converters: Optional[ConverterRegistry] = None,
    ) -> None:
        self.config = config if config is not None else MapperConfig()
        self.converters = (
            converters
            if converters is not None
            else ConverterRegistry.from_config(self.config)
        )
        self.schemas: Dict[type, TargetSchema] = {}

    def register(
        self,
        target: type,
        *,
        ignore: Iterable[str] = (),
        item_types: Optional[Mapping[str, type]] = None,
        converters: Optional[Mapping[str, Any]] = None,
    ) -> TargetSchema:
        """Describe ``target`` once and keep the result for later mappings.

        The keyword arguments add the same metadata as the ``Ignore``,
        ``ArrayOf`` and ``Converter`` markers, for classes that can't be
        annotated.
        """
        schema = TargetSchema.from_type(
            target, ignore=ignore, item_types=item_types, converters=converters
        )
        self.schemas[target] = schema
        logger.debug(
            "schema_registered",
            target=target.__name__,
            fields=[descriptor.name for descriptor in schema],
        )
        return schema

    def get_schema(self, target: type) -> TargetSchema:
        schema = self.schemas.get(target)
        if schema is None:
            schema = self.register(target)
        return schema

    def map(self, source: Any, destination: Union[Type[TT], TT]) -> TT:
        """Map ``source`` onto ``destination``.

        ``destination`` is either a class, in which case a new instance is
        built, or an existing instance which is populated in place.
        """
        target_is_type = isclass(destination)
        target_type = destination if target_is_type else type(destination)
        schema = self.get_schema(target_type)

        table = extract(source)
        global_ignores = set(self.config.global_ignored_properties)
        attrs: Dict[str, Any] = {}
        for field in schema:
            if field.ignored or field.name in global_ignores:
                continue
            value = resolve(source, table, field.name)
            if value is MISSING or value is None:
                continue
            value = self._transform(value, field, target_type)
            if value is not MISSING:
                attrs[field.name] = value

        adapter = self.get_adapter(target_type)
        if target_is_type:
            return adapter.create_instance(target_type, attrs)
        return adapter.set_attrs(destination, attrs)

    def map_collection(
        self, items: Iterable[Any], destination_type: Type[TT]
    ) -> List[TT]:
        return [self.map(item, destination_type) for item in items]

    def get_adapter(self, target_type: type) -> PopoAdapter:
        if issubclass(target_type, BaseModel):
            return PydanticModelAdapter()
        return PopoAdapter()

    # region Private methods
    # These methods are not intended to be used outside of this class.

    def _transform(self, value: Any, field: FieldDescriptor, target_type: type) -> Any:
        if field.kind == DYNAMIC:
            return value

        value = self._convert(value, field)

        if field.kind == NESTED:
            return self._map_nested(value, field, target_type)
        if field.kind == ARRAY:
            if field.item_type is not None:
                return self._map_items(value, field.item_type)
            return as_container(value, field.type)
        if field.type is str and isinstance(value, DATE_VALUES):
            return format_date(value, self.config.date_format)

        if self.config.strict_types and not is_compatible(value, field.type):
            self._raise_type_mismatch(value, field, target_type)
        return value

    def _convert(self, value: Any, field: FieldDescriptor) -> Any:
        if field.converter is not None:
            return conv.apply(self.converters.resolve(field.converter), value)
        converter = self.converters.find(value)
        if converter is None:
            return value
        return conv.apply(converter, value)

    def _map_nested(
        self, value: Any, field: FieldDescriptor, target_type: type
    ) -> Any:
        if is_collection(value):
            if field.item_type is not None:
                return self._map_items(value, field.item_type)
            # No item type: the collection itself becomes one nested object.
            return self.map(
                {str(index): item for index, item in enumerate(value)}, field.type
            )
        if value is None or isinstance(value, VALUE_TYPES):
            logger.debug(
                "field_skipped",
                target=target_type.__name__,
                field=field.name,
                reason="not an object",
                value_type=type(value).__name__,
            )
            return MISSING
        return self.map(value, field.type)

    def _map_items(self, items: Any, item_type: type) -> List[Any]:
        if isinstance(items, Mapping):
            items = items.values()
        elif not is_collection(items):
            return []
        return [self.map(item, item_type) for item in items]

    def _raise_type_mismatch(
        self, value: Any, field: FieldDescriptor, target_type: type
    ) -> NoReturn:
        raise TypeMismatchError(
            destination=target_type.__name__,
            field=field.name,
            expected=field.type_name,
            actual=type(value).__name__,
        )

    # endregion
