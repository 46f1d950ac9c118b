"""
Type mapping: Python annotation → JSON Schema type (+ enum values).

Supported: ``str``, ``int``, ``float``, ``bool``, ``Optional[...]`` thereof,
``Enum`` subclasses with string values, and ``Literal[...]`` of strings.
Forward references that cannot be evaluated yet become an :class:`EnumRef`
resolved lazily from the defining module.
"""

from __future__ import annotations

import ast
import builtins
import enum
import logging
import re
import types
from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    ForwardRef,
    List,
    Literal,
    Mapping,
    Optional,
    Sequence,
    Union,
    get_args,
    get_origin,
)

from llmtool_sdk.tools.errors import UnsupportedTypeError

logger = logging.getLogger("llmtool_sdk.tools")

_PY_TO_JSON_TYPE: Dict[type, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
}

_UNION_TYPES = tuple(
    t for t in (Union, getattr(types, "UnionType", None)) if t is not None
)

# "Optional[X]", "typing.Optional[X]", "Union[X, None]", "X | None", "None | X"
_OPTIONAL_TEXT = (
    re.compile(r"^(?:typing\.)?Optional\[\s*(?P<inner>.+?)\s*\]$"),
    re.compile(r"^(?:typing\.)?Union\[\s*(?P<inner>[^,\[\]]+?)\s*,\s*None\s*\]$"),
    re.compile(r"^(?P<inner>.+?)\s*\|\s*None$"),
    re.compile(r"^None\s*\|\s*(?P<inner>.+?)$"),
)
_DOTTED_NAME = re.compile(r"^[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*$")
_LITERAL_TEXT = re.compile(r"^(?:typing\.)?Literal\[(?P<args>.+)\]$")


# ──────────────────────────────────────────────
# Deferred enum reference
# ──────────────────────────────────────────────


@dataclass
class EnumRef:
    """An enum named by a forward reference, looked up when needed.

    Attributes:
        type_name: The (possibly dotted) name as written in the annotation.
        namespace: Globals of the module that declared the callable.
    """

    type_name: str
    namespace: Mapping[str, Any] = field(default_factory=dict, repr=False)

    def resolve(self) -> type:
        """Return the live enum class.

        Raises:
            UnsupportedTypeError: If the name is still undefined or does not
                name a string enumeration.
        """
        try:
            obj = lookup_name(self.type_name, self.namespace)
        except LookupError:
            raise UnsupportedTypeError(self.type_name) from None
        if enum_values(obj) is None:
            raise UnsupportedTypeError(self.type_name)
        return obj

    def values(self) -> List[str]:
        return enum_values(self.resolve()) or []


def lookup_name(name: str, namespace: Mapping[str, Any]) -> Any:
    """Resolve a dotted *name* in *namespace*, falling back to builtins."""
    head, *rest = name.split(".")
    if head in namespace:
        obj = namespace[head]
    elif hasattr(builtins, head):
        obj = getattr(builtins, head)
    else:
        raise LookupError(name)
    for attr in rest:
        if not hasattr(obj, attr):
            raise LookupError(name)
        obj = getattr(obj, attr)
    return obj


def enum_values(tp: Any) -> Optional[List[str]]:
    """Return the allowed strings of a closed string enumeration, else None."""
    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        members = list(tp)
        if members and all(isinstance(m.value, str) for m in members):
            return [m.value for m in members]
        return None
    if get_origin(tp) is Literal:
        args = get_args(tp)
        if args and all(isinstance(a, str) for a in args):
            return list(args)
    return None


# ──────────────────────────────────────────────
# TypeInfo / map_type
# ──────────────────────────────────────────────


@dataclass
class TypeInfo:
    """Schema view of one annotation."""

    type: str
    enum: Optional[List[str]] = None
    optional: bool = False
    enum_ref: Optional[EnumRef] = None
    enum_class: Optional[type] = None


def type_name(tp: Any) -> str:
    if isinstance(tp, str):
        return tp
    if isinstance(tp, ForwardRef):
        return tp.__forward_arg__
    if isinstance(tp, type) and get_origin(tp) is None:
        return tp.__qualname__
    return repr(tp).replace("typing.", "")


def _unwrap_optional(tp: Any) -> "tuple[Any, bool]":
    if get_origin(tp) in _UNION_TYPES:
        args = [a for a in get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0], True
        raise UnsupportedTypeError(type_name(tp))
    return tp, False


def _unwrap_optional_text(text: str) -> "tuple[str, bool]":
    """Strip every Optional layer from a forward-reference string."""
    text = text.strip()
    optional = False
    while True:
        for pattern in _OPTIONAL_TEXT:
            m = pattern.match(text)
            if m:
                text, optional = m.group("inner").strip(), True
                break
        else:
            return text, optional


def _literal_values(args: str) -> Optional[List[str]]:
    try:
        values = ast.literal_eval(f"({args},)")
    except (ValueError, SyntaxError):
        return None
    if values and all(isinstance(v, str) for v in values):
        return list(values)
    return None


def _map_forward_ref(
    text: str,
    namespace: Mapping[str, Any],
    case_tables: Mapping[str, Sequence[str]],
) -> TypeInfo:
    text, optional = _unwrap_optional_text(text)

    if text in case_tables:
        return TypeInfo("string", enum=list(case_tables[text]), optional=optional)
    literal = _LITERAL_TEXT.match(text)
    if literal:
        values = _literal_values(literal.group("args"))
        if values is None:
            raise UnsupportedTypeError(text)
        return TypeInfo("string", enum=values, optional=optional)
    if not _DOTTED_NAME.match(text):
        raise UnsupportedTypeError(text)

    try:
        obj = lookup_name(text, namespace)
    except LookupError:
        obj = None
    if obj is not None:
        info = map_type(obj, namespace=namespace, case_tables=case_tables)
        info.optional = info.optional or optional
        return info

    logger.debug("Deferring enum resolution for %r", text)
    return TypeInfo(
        "string",
        optional=optional,
        enum_ref=EnumRef(type_name=text, namespace=namespace),
    )


def map_type(
    annotation: Any,
    *,
    namespace: Optional[Mapping[str, Any]] = None,
    case_tables: Optional[Mapping[str, Sequence[str]]] = None,
) -> TypeInfo:
    """Map one parameter annotation to a :class:`TypeInfo`.

    Args:
        annotation: The evaluated annotation, or the raw string of a forward
            reference that could not be evaluated.
        namespace: Module globals used to resolve deferred enum references.
        case_tables: Explicit ``type name -> allowed values`` tables that take
            precedence over lookup for forward references.

    Raises:
        UnsupportedTypeError: If the annotation cannot be mapped.
    """
    namespace = namespace if namespace is not None else {}
    case_tables = case_tables or {}

    if isinstance(annotation, (str, ForwardRef)):
        return _map_forward_ref(type_name(annotation), namespace, case_tables)

    inner, optional = _unwrap_optional(annotation)
    if isinstance(inner, (str, ForwardRef)):
        info = _map_forward_ref(type_name(inner), namespace, case_tables)
        info.optional = True
        return info

    json_type = _PY_TO_JSON_TYPE.get(inner) if isinstance(inner, type) else None
    if json_type is not None:
        return TypeInfo(json_type, optional=optional)

    values = enum_values(inner)
    if values is not None:
        is_enum_class = isinstance(inner, type) and issubclass(inner, enum.Enum)
        return TypeInfo(
            "string",
            enum=values,
            optional=optional,
            enum_class=inner if is_enum_class else None,
        )

    if isinstance(inner, type) and type_name(inner) in case_tables:
        return TypeInfo("string", enum=list(case_tables[type_name(inner)]), optional=optional)

    raise UnsupportedTypeError(type_name(inner))
