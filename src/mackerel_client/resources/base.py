"""
Shared wire model for API payloads.

Field names are snake_case in Python and camelCase on the wire. Fields holding
their empty value ("", 0, False, empty collections) are left out of the
encoded body unless listed in ``always_emit``; optional fields are left out
only when None, and nested models are always emitted. A JSON ``null`` for a field that cannot hold None decodes to the
field default.
"""

from __future__ import annotations

import types
import typing
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, model_serializer, model_validator
from pydantic.alias_generators import to_camel

EVERY_FIELD = frozenset({"*"})


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, BaseModel):
        return False
    if isinstance(value, bool):
        return not value
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, (str, bytes, list, tuple, dict, set, frozenset)):
        return len(value) == 0
    return False


def _nullable(annotation: Any) -> bool:
    if annotation is Any or annotation is None or annotation is type(None):
        return True
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        return any(_nullable(arg) for arg in typing.get_args(annotation))
    return False


class MackerelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        validate_by_name=True,
        validate_by_alias=True,
        serialize_by_alias=True,
        extra="ignore",
    )

    always_emit: ClassVar[frozenset[str]] = frozenset()

    @classmethod
    def _wire_names(cls) -> dict[str, str]:
        names: dict[str, str] = {}
        for name, field in cls.model_fields.items():
            names[name] = name
            if field.alias:
                names[field.alias] = name
        return names

    @model_validator(mode="before")
    @classmethod
    def _null_means_default(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        names = cls._wire_names()
        cleaned = {}
        for key, value in data.items():
            name = names.get(key)
            if value is None and name is not None:
                if not _nullable(cls.model_fields[name].annotation):
                    continue
            cleaned[key] = value
        return cleaned

    def _prune(self, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        keep = self.always_emit
        for name, field in type(self).model_fields.items():
            key = field.alias if field.alias and field.alias in data else name
            if key not in data:
                continue
            if "*" in keep or key in keep:
                continue
            value = getattr(self, name)
            # Optional fields are present whenever they are not None.
            if _nullable(field.annotation):
                if value is None:
                    del data[key]
            elif is_empty(value):
                del data[key]
        return data

    @model_serializer(mode="wrap")
    def _serialize(self, handler: Any) -> Any:
        return self._prune(handler(self))

    def to_json(self) -> str:
        """Wire JSON for this value."""
        return self.model_dump_json(by_alias=True)
