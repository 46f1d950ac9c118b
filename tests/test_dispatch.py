"""
测试调用分发：from_object 绑定、过滤视图、make_tool、并发调用。
"""

import asyncio
import enum
from typing import Optional

import pytest
from llmtool_sdk.tools.errors import (
    FunctionNotFoundError,
    InvalidEnumValueError,
    MissingArgumentError,
    ToolDefinitionError,
    TypeMismatchError,
)
from llmtool_sdk.tools.registry import (
    FilteredToolRegistry,
    ParamSpec,
    ToolDef,
    ToolRegistry,
    make_tool,
    tool,
)


class Op(str, enum.Enum):
    ADD = "add"
    SUB = "sub"


class Calculator:
    def __init__(self):
        self.calls = 0

    @tool
    def add(self, a: int, b: int) -> int:
        """Add two integers."""
        self.calls += 1
        return a + b

    @tool
    def greet(self, name: str = "World") -> str:
        self.calls += 1
        return f"Hello, {name}!"

    @tool
    async def apply(self, op: Op, a: float, b: float) -> float:
        self.calls += 1
        await asyncio.sleep(0)
        return a + b if op is Op.ADD else a - b

    @tool
    @staticmethod
    def version() -> str:
        return "1.0"

    @tool
    @classmethod
    def kind(cls) -> str:
        return cls.__name__

    def not_a_tool(self) -> None:
        pass


class ScientificCalculator(Calculator):
    @tool
    def add(self, a: int, b: int) -> int:
        self.calls += 1
        return a + b + 1000

    @tool
    def power(self, base: float, exp: int = 2) -> float:
        return base ** exp


class PlainCalculator(Calculator):
    def add(self, a: int, b: int) -> str:
        return "plain"


@pytest.fixture
def calc():
    return Calculator()


@pytest.fixture
def registry(calc):
    return ToolRegistry.from_object(calc)


# ══════════════════════════════════════════════
# Dispatch
# ══════════════════════════════════════════════


class TestDispatch:
    """基本分发语义。"""

    @pytest.mark.asyncio
    async def test_add(self, registry):
        assert await registry.dispatch("add", {"a": 2, "b": 3}) == 5

    @pytest.mark.asyncio
    async def test_missing_argument_does_not_invoke(self, registry, calc):
        with pytest.raises(MissingArgumentError) as excinfo:
            await registry.dispatch("add", {"a": 2})
        assert excinfo.value == MissingArgumentError("b")
        assert calc.calls == 0

    @pytest.mark.asyncio
    async def test_type_mismatch_does_not_invoke(self, registry, calc):
        with pytest.raises(TypeMismatchError):
            await registry.dispatch("add", {"a": 2, "b": True})
        assert calc.calls == 0

    @pytest.mark.asyncio
    async def test_default_argument(self, registry):
        assert await registry.dispatch("greet", {}) == "Hello, World!"
        assert await registry.dispatch("greet", {"name": "Sam"}) == "Hello, Sam!"

    @pytest.mark.asyncio
    async def test_integral_float_accepted(self, registry):
        assert await registry.dispatch("add", {"a": 2.0, "b": 3}) == 5

    @pytest.mark.asyncio
    async def test_enum_argument(self, registry):
        assert await registry.dispatch("apply", {"op": "sub", "a": 5, "b": 2}) == 3.0
        with pytest.raises(InvalidEnumValueError):
            await registry.dispatch("apply", {"op": "mul", "a": 5, "b": 2})

    @pytest.mark.asyncio
    async def test_unknown_name(self, registry):
        with pytest.raises(FunctionNotFoundError) as excinfo:
            await registry.dispatch("nope", {})
        assert excinfo.value == FunctionNotFoundError("nope")
        assert isinstance(excinfo.value, LookupError)

    @pytest.mark.asyncio
    async def test_lookup_is_case_sensitive(self, registry):
        with pytest.raises(FunctionNotFoundError):
            await registry.dispatch("Add", {"a": 1, "b": 1})

    @pytest.mark.asyncio
    async def test_invoked_exactly_once(self, registry, calc):
        await registry.dispatch("add", {"a": 1, "b": 1})
        assert calc.calls == 1

    @pytest.mark.asyncio
    async def test_result_returned_unchanged(self):
        marker = object()
        registry = ToolRegistry()

        @tool
        def give() -> object:
            return marker

        @tool
        def nothing() -> None:
            return None

        registry.register(give)
        registry.register(nothing)
        assert await registry.dispatch("give", {}) is marker
        assert await registry.dispatch("nothing", {}) is None

    @pytest.mark.asyncio
    async def test_handler_exception_propagates(self):
        boom = ValueError("boom")
        registry = ToolRegistry()

        @tool
        async def explode() -> str:
            raise boom

        registry.register(explode)
        with pytest.raises(ValueError) as excinfo:
            await registry.dispatch("explode", {})
        assert excinfo.value is boom

    @pytest.mark.asyncio
    async def test_concurrent_dispatch(self, registry):
        results = await asyncio.gather(
            *(registry.dispatch("apply", {"op": "add", "a": i, "b": i}) for i in range(20))
        )
        assert results == [float(2 * i) for i in range(20)]

    @pytest.mark.asyncio
    async def test_handler_without_callable(self):
        registry = ToolRegistry()
        registry.register(ToolDef(name="schema_only"))
        with pytest.raises(RuntimeError):
            await registry.dispatch("schema_only", {})


# ══════════════════════════════════════════════
# from_object
# ══════════════════════════════════════════════


class TestFromObject:
    """从对象收集 @tool 方法。"""

    def test_collects_tools_in_declaration_order(self, registry):
        assert registry.names() == ["add", "greet", "apply", "version", "kind"]
        assert "not_a_tool" not in registry

    def test_receiver_not_a_parameter(self, registry):
        assert [p.name for p in registry.get("add").parameters] == ["a", "b"]
        assert registry.get("kind").parameters == []
        assert registry.get("version").parameters == []

    def test_class_attribute_is_tool_def(self):
        assert isinstance(Calculator.add, ToolDef)
        assert Calculator.add.name == "add"

    def test_method_access_binds(self, calc):
        assert calc.add(2, 3) == 5
        assert calc.calls == 1

    @pytest.mark.asyncio
    async def test_static_and_class_methods(self, registry):
        assert await registry.dispatch("version", {}) == "1.0"
        assert await registry.dispatch("kind", {}) == "Calculator"

    @pytest.mark.asyncio
    async def test_instances_are_independent(self):
        first, second = Calculator(), Calculator()
        r1, r2 = ToolRegistry.from_object(first), ToolRegistry.from_object(second)
        await r1.dispatch("add", {"a": 1, "b": 1})
        await r1.dispatch("greet", {})
        await r2.dispatch("greet", {})
        assert (first.calls, second.calls) == (2, 1)

    @pytest.mark.asyncio
    async def test_bound_by_reference(self, registry, calc):
        calc.calls = 10
        await registry.dispatch("add", {"a": 1, "b": 1})
        assert calc.calls == 11

    @pytest.mark.asyncio
    async def test_subclass_overrides(self):
        sci = ScientificCalculator()
        registry = ToolRegistry.from_object(sci)
        assert registry.names() == ["add", "greet", "apply", "version", "kind", "power"]
        assert await registry.dispatch("add", {"a": 1, "b": 1}) == 1002
        assert await registry.dispatch("kind", {}) == "ScientificCalculator"
        assert await registry.dispatch("power", {"base": 3}) == 9.0

    @pytest.mark.asyncio
    async def test_plain_override_removes_tool(self):
        plain = PlainCalculator()
        registry = ToolRegistry.from_object(plain)
        assert "add" not in registry
        assert registry.names() == ["greet", "apply", "version", "kind"]
        assert plain.add(1, 2) == "plain"
        with pytest.raises(FunctionNotFoundError):
            await registry.dispatch("add", {"a": 1, "b": 2})


# ══════════════════════════════════════════════
# Filtered views
# ══════════════════════════════════════════════


class TestFilteredRegistry:
    """按名称过滤的只读视图。"""

    def test_view_lists_only_allowed(self, registry):
        view = registry.filter({"add", "greet"})
        assert isinstance(view, FilteredToolRegistry)
        assert view.names() == ["add", "greet"]
        assert [s["name"] for s in view.list_tools()] == ["add", "greet"]
        assert len(view.to_openai_schema()) == 2

    def test_base_unchanged(self, registry):
        registry.filter(["add"])
        assert len(registry) == 5

    @pytest.mark.asyncio
    async def test_hidden_tool_not_found(self, registry):
        view = registry.filter(["greet"])
        with pytest.raises(FunctionNotFoundError):
            await view.dispatch("add", {"a": 1, "b": 2})
        assert await registry.dispatch("add", {"a": 1, "b": 2}) == 3
        assert await view.dispatch("greet", {}) == "Hello, World!"

    def test_unknown_names_ignored(self, registry):
        view = registry.filter(["add", "missing"])
        assert view.names() == ["add"]
        assert view.allowed == frozenset({"add", "missing"})

    def test_nested_filters_intersect(self, registry):
        view = registry.filter(["add", "greet"]).filter(["greet", "apply"])
        assert view.names() == ["greet"]

    def test_view_reflects_base(self):
        registry = ToolRegistry()
        view = registry.filter(["late"])
        assert view.names() == []

        @tool
        def late() -> str:
            return "here"

        registry.register(late)
        assert view.names() == ["late"]
        assert view.base is registry

    def test_view_uses_base_mode(self):
        from llmtool_sdk.core.config import ToolConfig

        registry = ToolRegistry(ToolConfig(strict=False))

        @tool
        def f(x: Optional[int]) -> int:
            return 0

        registry.register(f)
        view = registry.filter(["f"])
        assert view.list_tools()[0]["strict"] is False
        assert view.list_tools(strict=True)[0]["strict"] is True


# ══════════════════════════════════════════════
# make_tool
# ══════════════════════════════════════════════


class TestMakeTool:
    """显式参数列表构建 ToolDef。"""

    @pytest.mark.asyncio
    async def test_with_triple_slash_doc(self):
        def handler(location, unit):
            return f"{location} in {unit}"

        td = make_tool(
            handler,
            [ParamSpec("location"), ParamSpec("unit", "Unit", default="celsius")],
            name="get_current_weather",
            doc=(
                "/// Provides the current weather for a specified location.\n"
                '/// - Parameter location: The city and state, e.g., "San Francisco, CA".\n'
                "/// - Parameter unit: The temperature unit to use."
            ),
            case_tables={"Unit": ["celsius", "fahrenheit"]},
        )
        assert td.description == "Provides the current weather for a specified location."
        schema = td.to_json_schema(strict=False)
        props = schema["parameters"]["properties"]
        assert props["location"]["description"] == 'The city and state, e.g., "San Francisco, CA".'
        assert props["unit"]["enum"] == ["celsius", "fahrenheit"]
        assert schema["parameters"]["required"] == ["location"]

        registry = ToolRegistry()
        registry.register(td)
        assert await registry.dispatch("get_current_weather", {"location": "Oslo"}) == "Oslo in celsius"

    def test_name_defaults_to_handler(self):
        def lookup(q):
            return q

        assert make_tool(lookup, [ParamSpec("q")]).name == "lookup"

    def test_duplicate_parameter_names(self):
        with pytest.raises(ToolDefinitionError):
            make_tool(lambda a, b: a, [ParamSpec("a"), ParamSpec("a", int)])

    @pytest.mark.asyncio
    async def test_async_handler_and_keyword_only(self):
        async def handler(a, *, scale):
            return a * scale

        td = make_tool(
            handler,
            [ParamSpec("a", int), ParamSpec("scale", int, default=2, keyword_only=True)],
            name="scaled",
        )
        assert td.is_async is True
        registry = ToolRegistry()
        registry.register(td)
        assert await registry.dispatch("scaled", {"a": 4}) == 8
        assert await registry.dispatch("scaled", {"a": 4, "scale": 3}) == 12
