import math
from dataclasses import dataclass
from decimal import Decimal

import pytest
from pydantic import ValidationError

from dtomap import Mapper, MapperConfig


class TestMapperConfig:
    def test_defaults(self, monkeypatch):
        for name in (
            "DTOMAP_DATE_FORMAT",
            "DTOMAP_STRICT_TYPES",
            "DTOMAP_GLOBAL_IGNORED_PROPERTIES",
            "DTOMAP_CUSTOM_CONVERTERS",
        ):
            monkeypatch.delenv(name, raising=False)

        config = MapperConfig()

        assert config.date_format == "Y-m-d H:i:s"
        assert config.strict_types is False
        assert config.global_ignored_properties == []
        assert config.custom_converters == []

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("DTOMAP_DATE_FORMAT", "d/m/Y")
        monkeypatch.setenv("DTOMAP_STRICT_TYPES", "true")
        monkeypatch.setenv("DTOMAP_GLOBAL_IGNORED_PROPERTIES", '["password"]')
        monkeypatch.setenv(
            "DTOMAP_CUSTOM_CONVERTERS", '[["decimal.Decimal", "math.floor"]]'
        )

        config = MapperConfig()

        assert config.date_format == "d/m/Y"
        assert config.strict_types is True
        assert config.global_ignored_properties == ["password"]
        assert config.custom_converters == [(Decimal, math.floor)]

    def test_objects_are_accepted(self):
        config = MapperConfig(custom_converters=[(Decimal, math.floor)])

        assert config.custom_converters == [(Decimal, math.floor)]

    def test_config_is_read_only(self):
        config = MapperConfig()

        with pytest.raises(ValidationError):
            config.strict_types = True

    def test_mapper_builds_registry_from_config(self):
        mapper = Mapper(MapperConfig(custom_converters=[(Decimal, math.floor)]))

        @dataclass
        class Target:
            amount: int = 0

        assert len(mapper.converters) == 1
        assert mapper.map({"amount": Decimal("2.7")}, Target).amount == 2
