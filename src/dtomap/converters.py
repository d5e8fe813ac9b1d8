from __future__ import annotations

from inspect import isclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, Union

import structlog

from .config import MapperConfig
from .errors import ConverterNotFoundError

logger = structlog.get_logger(__name__)

ConverterRef = Union[str, Type[Any], Callable[[Any], Any], Any]


def _instantiate(converter: ConverterRef) -> Any:
    # Converter classes act as factories and are built once.
    return converter() if isclass(converter) else converter


def has_convert_capability(converter: Any) -> bool:
    return callable(getattr(converter, "convert", None)) or (
        callable(converter) and not isclass(converter)
    )


def apply(converter: Any, value: Any) -> Any:
    """Run ``converter`` on ``value``.

    Objects exposing ``convert`` are preferred over plain callables. A
    converter with neither is not applicable and the value is returned
    as it is.
    """
    convert = getattr(converter, "convert", None)
    if callable(convert):
        return convert(value)
    if callable(converter) and not isclass(converter):
        return converter(value)
    logger.debug(
        "converter_not_applicable",
        converter=type(converter).__name__,
        value_type=type(value).__name__,
    )
    return value


class ConverterRegistry:
    """Global ``type -> converter`` table plus converters registered by key.

    Global entries are consulted in registration order. Keyed entries are
    only used by fields that name them in a ``Converter`` marker.
    """

    def __init__(self) -> None:
        self._converters: List[Tuple[Type[Any], Any]] = []
        self._named: Dict[str, Any] = {}

    @classmethod
    def from_config(cls, config: MapperConfig) -> "ConverterRegistry":
        registry = cls()
        for source_type, converter in config.custom_converters:
            registry.register(source_type, converter)
        return registry

    def register(self, source_type: Type[Any], converter: ConverterRef) -> None:
        if not isclass(source_type):
            raise TypeError(
                f"Converter key must be a type, got {type(source_type).__name__}"
            )
        self._converters.append((source_type, _instantiate(converter)))

    def register_named(self, key: str, converter: ConverterRef) -> None:
        self._named[key] = _instantiate(converter)

    def find(self, value: Any) -> Optional[Any]:
        for source_type, converter in self._converters:
            if isinstance(value, source_type) and has_convert_capability(converter):
                return converter
        return None

    def resolve(self, ref: ConverterRef) -> Any:
        if isinstance(ref, str):
            try:
                return self._named[ref]
            except KeyError:
                raise ConverterNotFoundError(ref) from None
        return _instantiate(ref)

    def __len__(self) -> int:
        return len(self._converters)

    def __contains__(self, key: object) -> bool:
        return key in self._named
