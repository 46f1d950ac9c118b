"""
Tool Calling 框架 — LLM-agnostic 的工具 schema 生成、参数校验与调用分发。

提供 ``@tool`` 装饰器从 type hints + 文档注释生成 JSON schema，
``ToolRegistry`` 统一管理、导出（strict / loose）并分发执行工具。

Quick Start::

    from llmtool_sdk.tools import tool, ToolRegistry

    @tool
    async def get_weather(city: str, unit: str = "celsius") -> str:
        \"\"\"获取指定城市的当前天气。

        - Parameter city: 城市名称
        \"\"\"
        return f"{city}: 25°C"

    registry = ToolRegistry()
    registry.register(get_weather)

    # 导出给 LLM
    schema = registry.list_tools(strict=True)

    # 执行
    result = await registry.dispatch("get_weather", {"city": "上海"})
"""

from llmtool_sdk.tools.errors import (
    FunctionNotFoundError,
    InvalidEnumValueError,
    LLMToolError,
    MissingArgumentError,
    ToolCallError,
    ToolDefinitionError,
    TypeMismatchError,
    UnsupportedTypeError,
)
from llmtool_sdk.tools.registry import (
    BaseToolRegistry,
    FilteredToolRegistry,
    ParamSpec,
    ToolDef,
    ToolParam,
    ToolRegistry,
    make_tool,
    tool,
)

__all__ = [
    "ToolRegistry",
    "FilteredToolRegistry",
    "BaseToolRegistry",
    "ToolDef",
    "ToolParam",
    "ParamSpec",
    "tool",
    "make_tool",
    "LLMToolError",
    "ToolCallError",
    "ToolDefinitionError",
    "FunctionNotFoundError",
    "MissingArgumentError",
    "TypeMismatchError",
    "InvalidEnumValueError",
    "UnsupportedTypeError",
]
