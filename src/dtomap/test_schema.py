from dataclasses import dataclass, field
from typing import Annotated, Any, ClassVar, Dict, List, Optional, Sequence

import pytest
from pydantic import BaseModel

from dtomap import ArrayOf, Converter, Ignore, TargetSchema
from dtomap.schema import ARRAY, DYNAMIC, NESTED, SCALAR


@dataclass
class ItemDTO:
    name: str = ""


class Upper:
    def convert(self, value):
        return value.upper()


@dataclass
class OrderDTO:
    id: int = 0
    note: Optional[str] = None
    item: Optional[ItemDTO] = None
    items: List[ItemDTO] = field(default_factory=list)
    codes: List[int] = field(default_factory=list)
    lines: Annotated[list, ArrayOf(ItemDTO)] = field(default_factory=list)
    lookup: Dict[str, int] = field(default_factory=dict)
    history: Sequence[ItemDTO] = ()
    payload: Any = None
    secret: Annotated[str, Ignore()] = ""
    label: Annotated[str, Converter(Upper)] = ""
    currency: Annotated[str, Converter("currency")] = ""
    registry: ClassVar[dict] = {}


@pytest.fixture
def schema():
    return TargetSchema.from_type(OrderDTO)


class TestFieldClassification:
    @pytest.mark.parametrize(
        "name,kind,declared,item_type",
        [
            ("id", SCALAR, int, None),
            ("note", SCALAR, str, None),
            ("item", NESTED, ItemDTO, None),
            ("items", ARRAY, list, ItemDTO),
            ("codes", ARRAY, list, None),
            ("lines", ARRAY, list, ItemDTO),
            ("lookup", ARRAY, dict, None),
            ("payload", DYNAMIC, None, None),
        ],
    )
    def test_kinds(self, schema, name, kind, declared, item_type):
        descriptor = schema[name]

        assert descriptor.kind == kind
        assert descriptor.type is declared
        assert descriptor.item_type is item_type

    def test_abstract_sequence(self, schema):
        descriptor = schema["history"]

        assert descriptor.kind == ARRAY
        assert descriptor.item_type is ItemDTO

    def test_class_vars_are_not_fields(self, schema):
        with pytest.raises(KeyError):
            schema["registry"]

    def test_fields_keep_declaration_order(self, schema):
        assert [descriptor.name for descriptor in schema][:3] == ["id", "note", "item"]


class TestMarkers:
    def test_ignore(self, schema):
        assert schema["secret"].ignored
        assert not schema["id"].ignored

    def test_converter_class_is_instantiated(self, schema):
        assert isinstance(schema["label"].converter, Upper)

    def test_converter_key(self, schema):
        assert schema["currency"].converter == "currency"

    def test_registration_overrides(self):
        schema = TargetSchema.from_type(
            OrderDTO,
            ignore=["note"],
            item_types={"codes": ItemDTO},
            converters={"currency": str.lower},
        )

        assert schema["note"].ignored
        assert schema["codes"].item_type is ItemDTO
        assert schema["currency"].converter is str.lower

    def test_unknown_field_in_registration(self):
        with pytest.raises(TypeError, match="OrderDTO has no field\\(s\\) missing"):
            TargetSchema.from_type(OrderDTO, ignore=["missing"])


class TestTargetKinds:
    def test_pydantic_model(self):
        class Model(BaseModel):
            id: int = 0
            items: Annotated[list, ArrayOf(ItemDTO)] = []
            hidden: Annotated[str, Ignore()] = ""

        schema = TargetSchema.from_type(Model)

        assert [descriptor.name for descriptor in schema] == ["id", "items", "hidden"]
        assert schema["items"].item_type is ItemDTO
        assert schema["hidden"].ignored

    def test_plain_class(self):
        class Target:
            kind = "default"

            def __init__(self, name=None):
                self.name = name

            def describe(self):
                return self.name

            @property
            def title(self):
                return self.name

        schema = TargetSchema.from_type(Target)

        assert {descriptor.name for descriptor in schema} == {"kind", "name"}
        assert all(descriptor.kind == DYNAMIC for descriptor in schema)

    def test_type_name(self, schema):
        assert schema["id"].type_name == "int"
        assert schema["payload"].type_name == "mixed"
