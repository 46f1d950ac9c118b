"""
Schema rendering — one normalized model, several wire shapes.

``normalize()`` is the only place where loose/strict rules are applied.
Every exported shape (unwrapped function schema, OpenAI ``tools`` entry,
minified JSON string) is derived from the resulting
:class:`NormalizedFunctionSchema`, so the formats cannot drift apart.

Loose mode::

    {"type": "string"}               required: non-optional params only

Strict mode (default)::

    {"type": ["string", "null"]}     required: every param
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from llmtool_sdk.tools.errors import UnsupportedTypeError

if TYPE_CHECKING:
    from llmtool_sdk.tools.registry import ToolDef, ToolParam

logger = logging.getLogger("llmtool_sdk.tools")


# ──────────────────────────────────────────────
# Normalized model
# ──────────────────────────────────────────────


@dataclass
class NormalizedProperty:
    """One property; ``types`` is ``[base]`` or ``[base, "null"]``."""

    types: List[str]
    description: Optional[str] = None
    enum: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        prop: Dict[str, Any] = {
            "type": self.types[0] if len(self.types) == 1 else list(self.types),
        }
        if self.description:
            prop["description"] = self.description
        if self.enum:
            prop["enum"] = list(self.enum)
        return prop


@dataclass
class NormalizedParameters:
    properties: Dict[str, NormalizedProperty] = field(default_factory=dict)
    required: List[str] = field(default_factory=list)
    additional_properties: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {k: v.to_dict() for k, v in self.properties.items()},
            "required": list(self.required),
            "additionalProperties": self.additional_properties,
        }


@dataclass
class NormalizedFunctionSchema:
    """Provider-agnostic description of one tool in a given mode."""

    name: str
    description: Optional[str]
    strict: bool
    parameters: NormalizedParameters


def _enum_for(param: ToolParam) -> Optional[List[str]]:
    if param.enum:
        return list(param.enum)
    if param.enum_ref is not None:
        try:
            return param.enum_ref.values()
        except UnsupportedTypeError:
            logger.debug(
                "Enum %r for parameter %r not resolvable yet, omitting values",
                param.enum_ref.type_name,
                param.name,
            )
    return None


def normalize(tool: ToolDef, strict: bool = True) -> NormalizedFunctionSchema:
    """Apply the loose/strict rules to *tool*."""
    properties: Dict[str, NormalizedProperty] = {}
    for p in tool.parameters:
        types = [p.type]
        if strict and p.optional:
            types.append("null")
        properties[p.name] = NormalizedProperty(
            types=types,
            description=p.description or None,
            enum=_enum_for(p) or None,
        )

    required = [p.name for p in tool.parameters] if strict else list(tool.required)

    return NormalizedFunctionSchema(
        name=tool.name,
        description=tool.description or None,
        strict=strict,
        parameters=NormalizedParameters(properties=properties, required=required),
    )


# ──────────────────────────────────────────────
# Derived shapes
# ──────────────────────────────────────────────


def _function_body(model: NormalizedFunctionSchema) -> Dict[str, Any]:
    body: Dict[str, Any] = {"name": model.name}
    if model.description:
        body["description"] = model.description
    body["strict"] = model.strict
    body["parameters"] = model.parameters.to_dict()
    return body


def render_function_schema(tool: ToolDef, strict: bool = True) -> Dict[str, Any]:
    """Unwrapped shape: ``{name, description?, strict, parameters}``."""
    return _function_body(normalize(tool, strict))


def render_openai_tool(tool: ToolDef, strict: bool = True) -> Dict[str, Any]:
    """Wrapped shape: ``{"type": "function", "function": {...}}``."""
    return {"type": "function", "function": _function_body(normalize(tool, strict))}


def to_json_string(tool: ToolDef, strict: bool = True) -> str:
    """Minified JSON of the unwrapped shape."""
    return json.dumps(
        render_function_schema(tool, strict),
        ensure_ascii=False,
        separators=(",", ":"),
    )
