"""
Error taxonomy for tool definition and tool dispatch.

Two families:

- ``ToolDefinitionError``: raised while building a ``ToolDef`` (decorator,
  builder, registration). Blocks the tool entirely.
- ``ToolCallError``: raised by ``ToolRegistry.dispatch`` before the handler
  runs (unknown tool, bad arguments). Handler exceptions are never wrapped.
"""

from __future__ import annotations

from typing import Any, Tuple

SUPPORTED_TYPES = (
    "str, int, float, bool, Optional[...] thereof, "
    "str-valued Enum subclasses and Literal[...] of strings"
)


class LLMToolError(Exception):
    """Base class for all errors raised by this package.

    Attributes:
        kind: Stable machine-readable error kind.
    """

    kind = "llm_tool_error"


# ──────────────────────────────────────────────
# Definition-time errors
# ──────────────────────────────────────────────


class ToolDefinitionError(LLMToolError):
    """A callable cannot be turned into a tool."""

    kind = "tool_definition_error"


class UnsupportedTypeError(ToolDefinitionError, TypeError):
    """A parameter annotation cannot be mapped to a schema type."""

    kind = "unsupported_type"

    def __init__(self, type_name: str, param: str = "") -> None:
        self.type_name = type_name
        self.param = param
        where = f" (parameter {param!r})" if param else ""
        super().__init__(
            f"The type {type_name!r}{where} is not supported. "
            f"LLM tools only support {SUPPORTED_TYPES}."
        )


# ──────────────────────────────────────────────
# Dispatch-time errors
# ──────────────────────────────────────────────


class ToolCallError(LLMToolError):
    """Base for failures detected by the dispatcher itself."""

    kind = "tool_call_error"

    def _fields(self) -> Tuple[Any, ...]:
        return ()

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._fields() == other._fields()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self._fields()))


class FunctionNotFoundError(ToolCallError, LookupError):
    """The requested tool is unknown (or hidden by a filtered view)."""

    kind = "function_not_found"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool call error: function not found: {name!r}")

    def _fields(self) -> Tuple[Any, ...]:
        return (self.name,)


class MissingArgumentError(ToolCallError):
    """A required parameter is absent or null."""

    kind = "missing_argument"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool call error: missing argument: {name!r}")

    def _fields(self) -> Tuple[Any, ...]:
        return (self.name,)


class TypeMismatchError(ToolCallError, TypeError):
    """A value does not match (and cannot be losslessly coerced to) its type."""

    kind = "type_mismatch"

    def __init__(self, param: str, expected: str) -> None:
        self.param = param
        self.expected = expected
        super().__init__(
            f"Tool call error: type mismatch for {param!r}, expected {expected}"
        )

    def _fields(self) -> Tuple[Any, ...]:
        return (self.param, self.expected)


class InvalidEnumValueError(ToolCallError, ValueError):
    """A string is not one of the parameter's allowed values."""

    kind = "invalid_enum_value"

    def __init__(self, param: str, value: str) -> None:
        self.param = param
        self.value = value
        super().__init__(
            f"Tool call error: invalid enum value for {param!r}: {value!r}"
        )

    def _fields(self) -> Tuple[Any, ...]:
        return (self.param, self.value)
