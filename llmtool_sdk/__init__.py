"""
llmtool-sdk — turn documented Python callables into LLM tools.

从函数签名与文档注释生成 LLM function calling schema（strict / loose），
并将 LLM 返回的 tool call 校验、转换后分发到对应函数。

Quick Start:
    from llmtool_sdk import ToolRegistry, tool

    class WeatherService:
        @tool
        def forecast(self, city: str) -> str:
            \"\"\"Get forecast
            - Parameter city: City name
            \"\"\"
            return f"{city}: sunny"

    registry = ToolRegistry.from_object(WeatherService())
    registry.list_tools()
    await registry.dispatch("forecast", {"city": "Paris"})
"""

__version__ = "0.1.0"

from llmtool_sdk.core.config import ToolConfig
from llmtool_sdk.tools.docs import DocComment, parse_doc_comment
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
from llmtool_sdk.tools.openai_adapter import OpenAIToolAdapter, ToolCallResult
from llmtool_sdk.tools.registry import (
    FilteredToolRegistry,
    ParamSpec,
    ToolDef,
    ToolParam,
    ToolRegistry,
    make_tool,
    tool,
)
from llmtool_sdk.utils.logger import setup_logging

__all__ = [
    "ToolConfig",
    "ToolRegistry",
    "FilteredToolRegistry",
    "ToolDef",
    "ToolParam",
    "ParamSpec",
    "tool",
    "make_tool",
    "DocComment",
    "parse_doc_comment",
    "OpenAIToolAdapter",
    "ToolCallResult",
    "LLMToolError",
    "ToolCallError",
    "ToolDefinitionError",
    "FunctionNotFoundError",
    "MissingArgumentError",
    "TypeMismatchError",
    "InvalidEnumValueError",
    "UnsupportedTypeError",
    "setup_logging",
    "__version__",
]
