"""
Argument coercion — JSON-decoded argument bag → typed positional values.

Applied per parameter, in declaration order; the first failing parameter
raises. Nothing is cached between calls.
"""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence

from llmtool_sdk.tools.errors import (
    InvalidEnumValueError,
    MissingArgumentError,
    TypeMismatchError,
)
from llmtool_sdk.tools.types import enum_values

if TYPE_CHECKING:
    from llmtool_sdk.tools.registry import ToolParam

logger = logging.getLogger("llmtool_sdk.tools")

_MISSING = object()


def _to_string(name: str, value: Any) -> str:
    if isinstance(value, str):
        return value
    raise TypeMismatchError(name, "string")


def _to_boolean(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise TypeMismatchError(name, "boolean")


def _to_integer(name: str, value: Any) -> int:
    # bool is an int subclass; JSON true/false are not integers.
    if isinstance(value, bool):
        raise TypeMismatchError(name, "integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise TypeMismatchError(name, "integer")


def _to_number(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise TypeMismatchError(name, "number")
    if isinstance(value, (int, float)):
        return float(value)
    raise TypeMismatchError(name, "number")


_CONVERTERS = {
    "string": _to_string,
    "boolean": _to_boolean,
    "integer": _to_integer,
    "number": _to_number,
}


def _to_enum(param: ToolParam, value: Any) -> Any:
    if not isinstance(value, str):
        raise TypeMismatchError(param.name, "string")

    enum_class: Optional[type] = param.enum_class
    allowed: List[str]
    if param.enum_ref is not None:
        resolved = param.enum_ref.resolve()
        allowed = enum_values(resolved) or []
        enum_class = resolved if isinstance(resolved, type) and issubclass(resolved, enum.Enum) else None
    else:
        allowed = list(param.enum or [])

    if value not in allowed:
        raise InvalidEnumValueError(param.name, value)
    return enum_class(value) if enum_class is not None else value


def coerce_value(param: ToolParam, value: Any) -> Any:
    """Coerce a single present, non-null value to *param*'s type."""
    if param.enum or param.enum_ref is not None:
        return _to_enum(param, value)
    return _CONVERTERS[param.type](param.name, value)


def coerce_arguments(
    parameters: Sequence[ToolParam],
    args: Optional[Mapping[str, Any]],
) -> List[Any]:
    """Return one typed value per parameter, in declaration order.

    Raises:
        MissingArgumentError: A required parameter is absent or ``None``.
        TypeMismatchError: A value has the wrong JSON type.
        InvalidEnumValueError: A string is not an allowed enum value.
    """
    raw: Mapping[str, Any] = args or {}
    values: List[Any] = []

    for p in parameters:
        value = raw.get(p.name, _MISSING)
        if value is _MISSING or value is None:
            if not p.optional:
                raise MissingArgumentError(p.name)
            values.append(p.default if p.has_default else None)
            continue
        values.append(coerce_value(p, value))

    extra = set(raw) - {p.name for p in parameters}
    if extra:
        logger.debug("Ignoring unknown arguments: %s", sorted(extra))

    return values


def split_call_args(
    parameters: Sequence[ToolParam],
    values: Sequence[Any],
) -> "tuple[List[Any], Dict[str, Any]]":
    """Split coerced values into positional and keyword-only arguments."""
    positional: List[Any] = []
    keywords: Dict[str, Any] = {}
    for p, v in zip(parameters, values):
        if p.keyword_only:
            keywords[p.name] = v
        else:
            positional.append(v)
    return positional, keywords
