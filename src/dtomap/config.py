"""Mapper configuration.

Values are read from the environment (prefix ``DTOMAP_``) or passed in
directly by the hosting application::

    config = MapperConfig(date_format="Y-m-d", strict_types=True)

``custom_converters`` holds ``(type, converter)`` pairs. Both members may be
given as objects or as dotted import paths, e.g.
``DTOMAP_CUSTOM_CONVERTERS='[["decimal.Decimal", "app.converters.DecimalToStr"]]'``.
"""

from __future__ import annotations

from typing import List, Tuple

from pydantic import Field, ImportString
from pydantic_settings import BaseSettings, SettingsConfigDict


class MapperConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DTOMAP_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    date_format: str = Field(
        default="Y-m-d H:i:s",
        description="strftime or PHP date() style pattern for date/time values",
    )
    strict_types: bool = Field(default=False)
    global_ignored_properties: List[str] = Field(default_factory=list)
    custom_converters: List[Tuple[ImportString, ImportString]] = Field(
        default_factory=list
    )
