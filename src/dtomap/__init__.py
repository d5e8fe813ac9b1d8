from .config import MapperConfig
from .converters import ConverterRegistry
from .errors import (
    ConstructionError,
    ConverterNotFoundError,
    MappingError,
    TypeMismatchError,
)
from .mapper import Mapper
from .schema import ArrayOf, Converter, FieldDescriptor, Ignore, TargetSchema
from .sources import MISSING

__all__ = [
    "ArrayOf",
    "ConstructionError",
    "Converter",
    "ConverterNotFoundError",
    "ConverterRegistry",
    "FieldDescriptor",
    "Ignore",
    "MISSING",
    "Mapper",
    "MapperConfig",
    "MappingError",
    "TargetSchema",
    "TypeMismatchError",
]
