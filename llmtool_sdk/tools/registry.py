"""
ToolRegistry — 工具注册表、@tool 装饰器、schema 导出与调用分发。

LLM-agnostic：不绑定任何特定 LLM provider。
通过 list_tools() / to_openai_schema() 导出后可对接任意 LLM，
LLM 返回的 ``(name, arguments)`` 交给 dispatch() 校验、转换并执行。
"""

from __future__ import annotations

import inspect
import logging
import types
from dataclasses import dataclass, field, replace
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Union,
    get_type_hints,
)

from llmtool_sdk.core.config import ToolConfig
from llmtool_sdk.tools.coercion import coerce_arguments, split_call_args
from llmtool_sdk.tools.docs import DocComment, extract_doc, parse_doc_comment
from llmtool_sdk.tools.errors import FunctionNotFoundError, ToolDefinitionError
from llmtool_sdk.tools.schema import render_function_schema, render_openai_tool, to_json_string
from llmtool_sdk.tools.types import EnumRef, map_type

logger = logging.getLogger("llmtool_sdk.tools")

CaseTables = Mapping[str, Sequence[str]]

_EMPTY = inspect.Parameter.empty


# ──────────────────────────────────────────────
# ToolParam
# ──────────────────────────────────────────────


@dataclass
class ToolParam:
    """Description of a single tool parameter.

    Attributes:
        name: Parameter name (unique within a tool).
        type: JSON Schema type: ``string``, ``integer``, ``number`` or ``boolean``.
        description: From the doc comment, possibly empty.
        enum: Allowed values for enumeration-typed parameters.
        optional: Nullable annotation or has a default.
        has_default: Whether ``default`` is meaningful.
        default: Used at dispatch time only, never serialized.
        enum_ref: Deferred enum, resolved at render/dispatch time.
        enum_class: Enum class the coerced string is converted into.
        keyword_only: Passed by name rather than position.
    """

    name: str
    type: str
    description: str = ""
    enum: Optional[List[str]] = None
    optional: bool = False
    has_default: bool = False
    default: Any = None
    enum_ref: Optional[EnumRef] = None
    enum_class: Optional[type] = None
    keyword_only: bool = False

    @property
    def required(self) -> bool:
        return not self.optional


@dataclass
class ParamSpec:
    """Explicit parameter declaration for :func:`make_tool`."""

    name: str
    annotation: Any = str
    default: Any = _EMPTY
    keyword_only: bool = False


# ──────────────────────────────────────────────
# ToolDef
# ──────────────────────────────────────────────


@dataclass
class ToolDef:
    """A registered tool definition.

    Attributes:
        name: Unique tool name.
        description: Human-readable description (shown to LLM).
        parameters: Parameter definitions in declaration order.
        handler: The actual callable to execute.
        is_async: Whether the handler is async.
        binding: ``"instance"``, ``"class"`` or ``"static"``; decides how the
            handler is bound when the tool is read from an instance.

    A ``ToolDef`` stored on a class behaves like the method it wraps:
    reading it from an instance yields a copy bound to that instance.
    """

    name: str
    description: str = ""
    parameters: List[ToolParam] = field(default_factory=list)
    handler: Optional[Callable] = None
    is_async: bool = True
    binding: str = "instance"

    @property
    def required(self) -> List[str]:
        """Names of non-optional parameters, in declaration order."""
        return [p.name for p in self.parameters if not p.optional]

    def __get__(self, instance: Any, owner: Optional[type] = None) -> ToolDef:
        if self.handler is None or self.binding == "static":
            return self
        if self.binding == "class":
            return replace(self, handler=types.MethodType(self.handler, owner or type(instance)), binding="static")
        if instance is None:
            return self
        return self.bind(instance)

    def bind(self, instance: Any) -> ToolDef:
        """Return a copy whose handler is bound to *instance* (by reference)."""
        return replace(
            self,
            handler=types.MethodType(self.handler, instance),
            binding="static",
        )

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        if self.handler is None:
            raise RuntimeError(f"Tool {self.name!r} has no handler")
        return self.handler(*args, **kwargs)

    # ─── Schema export ───

    def to_json_schema(self, strict: bool = True) -> Dict[str, Any]:
        """Export as ``{name, description?, strict, parameters}``."""
        return render_function_schema(self, strict)

    def to_openai_schema(self, strict: bool = True) -> Dict[str, Any]:
        """Export in OpenAI function calling format.

        Returns::

            {
                "type": "function",
                "function": { "name": ..., "description": ..., "strict": ..., "parameters": ... }
            }
        """
        return render_openai_tool(self, strict)

    def json_string(self, strict: bool = True) -> str:
        """Minified JSON of :meth:`to_json_schema`."""
        return to_json_string(self, strict)


# ──────────────────────────────────────────────
# Building ToolDefs
# ──────────────────────────────────────────────


def _resolve_hints(fn: Callable) -> Dict[str, Any]:
    """Evaluated type hints, or the raw annotations if some cannot be evaluated.

    Raw strings are resolved later by :func:`map_type`, by name.
    """
    try:
        return get_type_hints(fn)
    except (NameError, AttributeError, TypeError, SyntaxError):
        return dict(getattr(fn, "__annotations__", {}))


def _build_param(
    name: str,
    annotation: Any,
    default: Any,
    keyword_only: bool,
    doc: DocComment,
    namespace: Mapping[str, Any],
    case_tables: Optional[CaseTables],
) -> ToolParam:
    if annotation is _EMPTY:
        annotation = str
    info = map_type(annotation, namespace=namespace, case_tables=case_tables)
    has_default = default is not _EMPTY
    return ToolParam(
        name=name,
        type=info.type,
        description=doc.params.get(name, ""),
        enum=info.enum,
        optional=info.optional or has_default,
        has_default=has_default,
        default=default if has_default else None,
        enum_ref=info.enum_ref,
        enum_class=info.enum_class,
        keyword_only=keyword_only,
    )


def _unwrap_binding(fn: Any) -> "tuple[Callable, str]":
    if isinstance(fn, staticmethod):
        return fn.__func__, "static"
    if isinstance(fn, classmethod):
        return fn.__func__, "class"
    return fn, "instance"


def _extract_tool_def(
    fn: Callable,
    name: Optional[str] = None,
    description: Optional[str] = None,
    doc: Optional[str] = None,
    case_tables: Optional[CaseTables] = None,
) -> ToolDef:
    """Build a ToolDef from a function's signature, type hints and doc."""
    fn, binding = _unwrap_binding(fn)
    func_name = name or fn.__name__
    sig = inspect.signature(fn)
    hints = _resolve_hints(fn)
    namespace = getattr(fn, "__globals__", {})

    doc_comment = parse_doc_comment(doc) if doc is not None else extract_doc(fn)

    params: List[ToolParam] = []
    for index, (param_name, param) in enumerate(sig.parameters.items()):
        # Skip the receiver of methods
        if index == 0 and param_name in ("self", "cls") and binding != "static":
            continue
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            raise ToolDefinitionError(
                f"Tool {func_name!r}: variadic parameter {param_name!r} is not supported"
            )
        params.append(
            _build_param(
                param_name,
                hints.get(param_name, param.annotation),
                param.default,
                param.kind is param.KEYWORD_ONLY,
                doc_comment,
                namespace,
                case_tables,
            )
        )

    return ToolDef(
        name=func_name,
        description=description if description is not None else doc_comment.summary,
        parameters=params,
        handler=fn,
        is_async=inspect.iscoroutinefunction(fn),
        binding=binding,
    )


def tool(
    fn: Optional[Callable] = None,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    doc: Optional[str] = None,
    case_tables: Optional[CaseTables] = None,
) -> Union[ToolDef, Callable[[Callable], ToolDef]]:
    """Decorator that turns a function into a :class:`ToolDef`.

    Can be used with or without arguments::

        @tool
        async def my_tool(x: str) -> str: ...

        @tool(name="custom_name", description="override desc")
        async def another(x: int) -> int: ...

    ``doc`` replaces the docstring/comments as the doc source and
    ``case_tables`` supplies allowed values for enums that are only
    referenced by name. Methods are supported; see
    :meth:`ToolRegistry.from_object`.

    Raises:
        UnsupportedTypeError: If a parameter annotation cannot be mapped.
    """

    def decorator(func: Callable) -> ToolDef:
        return _extract_tool_def(
            func, name=name, description=description, doc=doc, case_tables=case_tables
        )

    if fn is not None:
        # @tool without parentheses
        return decorator(fn)
    # @tool(...) with arguments
    return decorator


def make_tool(
    handler: Callable,
    params: Sequence[ParamSpec],
    *,
    name: Optional[str] = None,
    doc: str = "",
    description: Optional[str] = None,
    case_tables: Optional[CaseTables] = None,
) -> ToolDef:
    """Build a :class:`ToolDef` from an explicit parameter list.

    No signature introspection: *params* fixes the order and types, *doc*
    is raw doc text in any supported comment syntax. The handler is called
    with one positional value per non-keyword-only parameter.

    Raises:
        ToolDefinitionError: On duplicate parameter names.
        UnsupportedTypeError: If a parameter annotation cannot be mapped.
    """
    seen = set()
    for spec in params:
        if spec.name in seen:
            raise ToolDefinitionError(f"Duplicate parameter name: {spec.name!r}")
        seen.add(spec.name)

    doc_comment = parse_doc_comment(doc)
    namespace = getattr(handler, "__globals__", {})
    return ToolDef(
        name=name or getattr(handler, "__name__", type(handler).__name__),
        description=description if description is not None else doc_comment.summary,
        parameters=[
            _build_param(
                spec.name,
                spec.annotation,
                spec.default,
                spec.keyword_only,
                doc_comment,
                namespace,
                case_tables,
            )
            for spec in params
        ],
        handler=handler,
        is_async=inspect.iscoroutinefunction(handler),
        binding="static",
    )


# ──────────────────────────────────────────────
# Registries
# ──────────────────────────────────────────────


class BaseToolRegistry:
    """Schema export and dispatch on top of :meth:`get` / :meth:`list`."""

    config: ToolConfig

    def get(self, name: str) -> Optional[ToolDef]:
        raise NotImplementedError

    def list(self) -> List[ToolDef]:
        raise NotImplementedError

    def names(self) -> List[str]:
        """Return all tool names."""
        return [t.name for t in self.list()]

    def __len__(self) -> int:
        return len(self.list())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __iter__(self) -> Iterator[ToolDef]:
        return iter(self.list())

    def filter(self, names: Iterable[str]) -> FilteredToolRegistry:
        """Return a read-only view exposing only *names*."""
        return FilteredToolRegistry(self, names)

    # ─── Schema export ───

    def _strict(self, strict: Optional[bool]) -> bool:
        return self.config.strict if strict is None else strict

    def list_tools(self, strict: Optional[bool] = None) -> List[Dict[str, Any]]:
        """Export all tools as unwrapped function schemas."""
        mode = self._strict(strict)
        return [t.to_json_schema(mode) for t in self.list()]

    def to_json_schema(self, strict: Optional[bool] = None) -> List[Dict[str, Any]]:
        """Alias of :meth:`list_tools`."""
        return self.list_tools(strict)

    def to_openai_schema(self, strict: Optional[bool] = None) -> List[Dict[str, Any]]:
        """Export all tools in OpenAI function calling format.

        Returns a list suitable for the ``tools`` parameter of
        ``openai.chat.completions.create()``.
        """
        mode = self._strict(strict)
        return [t.to_openai_schema(mode) for t in self.list()]

    # ─── Execution ───

    async def dispatch(
        self,
        name: str,
        args: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Validate *args* against tool *name* and invoke it.

        Parameters:
            name: Tool name (exact, case-sensitive).
            args: JSON-decoded argument bag.

        Returns:
            The handler's return value, unchanged (``None`` for no result).

        Raises:
            FunctionNotFoundError: Unknown tool, or hidden by a filter.
            MissingArgumentError / TypeMismatchError / InvalidEnumValueError:
                The arguments do not fit the declared parameters.

        Exceptions raised by the handler itself propagate unchanged.
        """
        tool_def = self.get(name)
        if tool_def is None:
            raise FunctionNotFoundError(name)

        if tool_def.handler is None:
            raise RuntimeError(f"Tool {name!r} has no handler")

        values = coerce_arguments(tool_def.parameters, args)
        positional, keywords = split_call_args(tool_def.parameters, values)
        logger.debug("Dispatching tool %s", name)

        if tool_def.is_async:
            return await tool_def.handler(*positional, **keywords)
        return tool_def.handler(*positional, **keywords)


class ToolRegistry(BaseToolRegistry):
    """Central registry for tools.

    Manages tool registration, schema export, and execution dispatch.

    Usage::

        registry = ToolRegistry()

        @tool
        async def greet(name: str) -> str:
            return f"Hello {name}"

        registry.register(greet)
        schema = registry.list_tools()
        result = await registry.dispatch("greet", {"name": "World"})
    """

    def __init__(self, config: Optional[ToolConfig] = None) -> None:
        self.config = config or ToolConfig()
        self._tools: Dict[str, ToolDef] = {}

    @classmethod
    def from_object(cls, obj: Any, config: Optional[ToolConfig] = None) -> ToolRegistry:
        """Collect every ``@tool`` member of ``type(obj)``, bound to *obj*.

        Tools are ordered by declaration, base classes first; a subclass
        attribute overrides the base one with the same attribute name, and
        a plain (non-tool) override removes the tool.
        """
        found: Dict[str, ToolDef] = {}
        for klass in reversed(type(obj).__mro__):
            for attr, value in vars(klass).items():
                if isinstance(value, ToolDef):
                    found[attr] = value
                else:
                    found.pop(attr, None)

        registry = cls(config)
        for value in found.values():
            registry.register(value.__get__(obj, type(obj)))
        return registry

    def register(
        self,
        tool_def: Union[ToolDef, Callable],
        *,
        name: Optional[str] = None,
    ) -> ToolDef:
        """Register a tool.

        Accepts a ``ToolDef`` (from ``@tool`` decorator) or a plain
        callable (will be auto-wrapped). *name* overrides the tool name.
        """
        if not isinstance(tool_def, ToolDef):
            tool_def = _extract_tool_def(tool_def)
        if name:
            tool_def = replace(tool_def, name=name)
        if tool_def.name in self._tools and self.config.warn_on_overwrite:
            logger.warning("Tool %r already registered, overwriting", tool_def.name)
        self._tools[tool_def.name] = tool_def
        logger.debug("Tool registered: %s", tool_def.name)
        return tool_def

    def get(self, name: str) -> Optional[ToolDef]:
        """Get a tool by name."""
        return self._tools.get(name)

    def list(self) -> List[ToolDef]:
        """Return all registered tools."""
        return list(self._tools.values())


class FilteredToolRegistry(BaseToolRegistry):
    """Read-only view of another registry restricted to an allow-set.

    Tools outside the allow-set are invisible: they are not listed and
    dispatching them raises :class:`FunctionNotFoundError`.
    """

    def __init__(self, base: BaseToolRegistry, names: Iterable[str]) -> None:
        self._base = base
        self._allowed = frozenset(names)
        self.config = base.config

    @property
    def base(self) -> BaseToolRegistry:
        return self._base

    @property
    def allowed(self) -> frozenset:
        return self._allowed

    def get(self, name: str) -> Optional[ToolDef]:
        if name not in self._allowed:
            return None
        return self._base.get(name)

    def list(self) -> List[ToolDef]:
        return [t for t in self._base.list() if t.name in self._allowed]
