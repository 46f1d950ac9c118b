"""
OpenAIToolAdapter — 将 ToolRegistry 对接 OpenAI function calling API。

纯转换层（不发起网络请求）：将注册的 tools 转为 OpenAI ``tools`` 参数格式，
并将 OpenAI 返回的 ``tool_calls`` 分发到 ``ToolRegistry.dispatch``。

Usage::

    from llmtool_sdk.tools import ToolRegistry, tool
    from llmtool_sdk.tools.openai_adapter import OpenAIToolAdapter

    registry = ToolRegistry()

    @tool
    async def get_weather(city: str) -> str:
        return f"{city}: 25°C"

    registry.register(get_weather)
    adapter = OpenAIToolAdapter(registry)

    # 1. 获取 OpenAI tools 参数
    tools_param = adapter.to_openai_tools()

    # 2. 调用 OpenAI（由调用方负责）
    response = await client.chat.completions.create(
        model="gpt-4o",
        messages=messages,
        tools=tools_param,
    )

    # 3. 处理 tool_calls
    if response.choices[0].message.tool_calls:
        results = await adapter.handle_tool_calls(
            response.choices[0].message.tool_calls
        )
        messages.extend(adapter.results_to_messages(results))
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from llmtool_sdk.tools.errors import LLMToolError
from llmtool_sdk.tools.registry import BaseToolRegistry

logger = logging.getLogger("llmtool_sdk.tools")


@dataclass
class ToolCallResult:
    """Result of a single tool call execution.

    Attributes:
        tool_call_id: The ID from the OpenAI tool_call.
        name: Tool name.
        content: Serialized result (string).
        error: Error message if execution failed.
        error_kind: ``LLMToolError.kind`` when the tool was never invoked,
            ``"tool_error"`` for exceptions raised by the tool itself.
    """

    tool_call_id: str
    name: str
    content: str = ""
    error: Optional[str] = None
    error_kind: Optional[str] = None

    def to_message(self) -> Dict[str, str]:
        """Convert to an OpenAI-compatible tool result message.

        Returns::

            {"role": "tool", "tool_call_id": "...", "content": "..."}
        """
        return {
            "role": "tool",
            "tool_call_id": self.tool_call_id,
            "content": self.error if self.error else self.content,
        }


def arguments_dict(raw: Any) -> Dict[str, Any]:
    """Decode a tool call's ``arguments`` (JSON string or mapping).

    Anything that does not decode to a JSON object yields ``{}``.
    """
    if raw is None:
        return {}
    if isinstance(raw, (str, bytes)):
        try:
            decoded = json.loads(raw or "{}")
        except (json.JSONDecodeError, UnicodeDecodeError):
            return {}
        return decoded if isinstance(decoded, dict) else {}
    try:
        return dict(raw)
    except (TypeError, ValueError):
        return {}


def serialize_result(result: Any) -> str:
    """Render a tool's return value as message content."""
    if result is None:
        return ""
    if isinstance(result, str):
        return result
    return json.dumps(result, ensure_ascii=False, default=str)


class OpenAIToolAdapter:
    """Adapter between a tool registry and the OpenAI function calling API.

    Parameters:
        registry: The tool registry (or filtered view) to use.
        strict: Schema mode for :meth:`to_openai_tools`.
    """

    def __init__(self, registry: BaseToolRegistry, strict: bool = True) -> None:
        self._registry = registry
        self._strict = strict

    @property
    def registry(self) -> BaseToolRegistry:
        return self._registry

    def to_openai_tools(self) -> List[Dict[str, Any]]:
        """Export tools in OpenAI ``tools`` parameter format.

        Returns a list of dicts ready for
        ``openai.chat.completions.create(tools=...)``::

            [{"type": "function", "function": {"name": ..., ...}}, ...]
        """
        return self._registry.to_openai_schema(self._strict)

    async def handle_tool_calls(self, tool_calls: Any) -> List[ToolCallResult]:
        """Execute tool calls returned by OpenAI and collect results.

        Parameters:
            tool_calls: The ``message.tool_calls`` list from an OpenAI
                response.  Each item should have ``.id``, ``.function.name``,
                and ``.function.arguments`` attributes (or dict equivalents).

        Returns:
            List of ToolCallResult, one per tool call.
        """
        results: List[ToolCallResult] = []

        for tc in tool_calls:
            # Support both object attributes and dict access
            call_id = _get(tc, "id", "")
            func = _get(tc, "function", tc)
            func_name = _get(func, "name", "")
            func_args = arguments_dict(_get(func, "arguments", "{}"))

            try:
                result = await self._registry.dispatch(func_name, func_args)
            except LLMToolError as e:
                logger.warning("Tool call rejected: %s(%s) -> %s", func_name, func_args, e)
                results.append(
                    ToolCallResult(
                        tool_call_id=call_id,
                        name=func_name,
                        error=str(e),
                        error_kind=e.kind,
                    )
                )
            except Exception as e:
                logger.error("Tool call failed: %s(%s) -> %s", func_name, func_args, e)
                results.append(
                    ToolCallResult(
                        tool_call_id=call_id,
                        name=func_name,
                        error=str(e) or type(e).__name__,
                        error_kind="tool_error",
                    )
                )
            else:
                results.append(
                    ToolCallResult(
                        tool_call_id=call_id,
                        name=func_name,
                        content=serialize_result(result),
                    )
                )

        return results

    def results_to_messages(self, results: List[ToolCallResult]) -> List[Dict[str, str]]:
        """Convert a list of ToolCallResult to OpenAI tool messages.

        Useful for appending to the messages list before the next API call.
        """
        return [r.to_message() for r in results]


def _get(obj: Any, key: str, default: Any = None) -> Any:
    """Get attribute or dict key, with fallback."""
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)
