"""
Base domain model with camelCase JSON compatibility.

The external report renderer consumes camelCase JSON, while the Python side
uses snake_case dataclass fields. All domain models inherit from
BaseDomainModel to get the conversion in both directions.
"""

from __future__ import annotations

import dataclasses
import typing
from dataclasses import dataclass, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Type, TypeVar

T = TypeVar("T", bound="BaseDomainModel")


def to_camel_case(snake_str: str) -> str:
    """
    Convert snake_case to camelCase.

    Examples:
        >>> to_camel_case("readme_score")
        'readmeScore'
        >>> to_camel_case("score")
        'score'
    """
    components = snake_str.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


def to_snake_case(camel_str: str) -> str:
    """
    Convert camelCase to snake_case.

    Examples:
        >>> to_snake_case("readmeScore")
        'readme_score'
    """
    result = [camel_str[0].lower()]
    for char in camel_str[1:]:
        if char.isupper():
            result.extend(["_", char.lower()])
        else:
            result.append(char)
    return "".join(result)


def _serialize(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, BaseDomainModel):
        return value.to_json()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    return value


@dataclass
class BaseDomainModel:
    """
    Base class for all domain models.

    - to_json() serializes to camelCase
    - from_json() deserializes camelCase JSON
    - Enum values are serialized by value
    - Dates are serialized as ISO 8601 strings
    """

    def to_json(self) -> Dict[str, Any]:
        """Serialize to camelCase JSON-compatible dict."""
        return {to_camel_case(f.name): _serialize(getattr(self, f.name)) for f in fields(self)}

    @classmethod
    def from_json(cls: Type[T], data: Dict[str, Any]) -> T:
        """
        Deserialize from camelCase JSON.

        Enums, datetimes and nested domain models (directly or inside a list)
        are restored from their field annotations. Anything more exotic should
        be handled by overriding this method.

        Raises:
            ValueError: If a required field is missing
        """
        hints = typing.get_type_hints(cls)
        kwargs: Dict[str, Any] = {}

        for field in fields(cls):
            if not field.init:
                continue

            json_key = to_camel_case(field.name)
            if json_key not in data:
                if field.default is not dataclasses.MISSING or field.default_factory is not dataclasses.MISSING:  # type: ignore[misc]
                    continue
                raise ValueError(f"Missing required field: {json_key}")

            kwargs[field.name] = _deserialize(hints.get(field.name, Any), data[json_key])

        return cls(**kwargs)

    def __str__(self) -> str:
        field_strs = [f"{field.name}={getattr(self, field.name)!r}" for field in fields(self)]
        return f"{self.__class__.__name__}({', '.join(field_strs)})"

    def __repr__(self) -> str:
        return self.__str__()


def _deserialize(annotation: Any, value: Any) -> Any:
    if value is None:
        return None

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    # Optional[X] / X | None
    if origin is typing.Union or (origin is not None and type(None) in args):
        non_none = [a for a in args if a is not type(None)]
        if len(non_none) == 1:
            return _deserialize(non_none[0], value)
        return value

    if origin in (list, tuple) and args:
        if not isinstance(value, (list, tuple)):
            raise TypeError(f"Expected a list, got {type(value).__name__}")
        return [_deserialize(args[0], item) for item in value]

    if origin is dict and len(args) == 2:
        if not isinstance(value, dict):
            raise TypeError(f"Expected an object, got {type(value).__name__}")
        return {k: _deserialize(args[1], v) for k, v in value.items()}

    if isinstance(annotation, type):
        if issubclass(annotation, BaseDomainModel) and isinstance(value, dict):
            return annotation.from_json(value)
        if issubclass(annotation, Enum):
            return annotation(value)
        if annotation is datetime and isinstance(value, str):
            return datetime.fromisoformat(value)

    return value
