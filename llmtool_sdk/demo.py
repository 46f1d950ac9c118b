"""
Sample client: a small weather service exposed as LLM tools.

Run with ``python -m llmtool_sdk``.
"""

from __future__ import annotations

import asyncio
import enum
import json
from typing import Any, Dict, List, Optional

from llmtool_sdk.core.config import ToolConfig
from llmtool_sdk.tools.openai_adapter import OpenAIToolAdapter
from llmtool_sdk.tools.registry import ToolRegistry, tool
from llmtool_sdk.utils.logger import setup_logging


class TemperatureUnit(str, enum.Enum):
    CELSIUS = "celsius"
    FAHRENHEIT = "fahrenheit"


class WeatherService:
    def __init__(self, base_temperature: float = 24.0) -> None:
        self.base_temperature = base_temperature
        self.lookups = 0

    # Provides the current weather for a specified location.
    # - Parameter location: The city and state, e.g., "San Francisco, CA".
    @tool
    def get_current_weather(
        self,
        location: str,
        unit: TemperatureUnit = TemperatureUnit.CELSIUS,
    ) -> str:
        """- Parameter unit: The temperature unit to use, either "celsius" or "fahrenheit"."""
        self.lookups += 1
        temp = self.base_temperature
        if unit is TemperatureUnit.FAHRENHEIT:
            temp = temp * 9 / 5 + 32
        return f"The weather in {location} is {temp:g}° {unit.value}."

    @tool
    async def forecast(self, city: str, days: int = 3, detailed: Optional[bool] = None) -> List[str]:
        """Get a multi-day forecast.

        Args:
            city: City name
            days: Number of days to forecast
            detailed: Include wind information
        """
        await asyncio.sleep(0)
        self.lookups += 1
        suffix = ", light wind" if detailed else ""
        return [f"{city} day {i + 1}: sunny{suffix}" for i in range(days)]


def build_registry(service: Optional[WeatherService] = None, config: Optional[ToolConfig] = None) -> ToolRegistry:
    return ToolRegistry.from_object(service or WeatherService(), config)


async def run(registry: ToolRegistry) -> Dict[str, Any]:
    """Print the schemas and answer a pair of canned tool calls."""
    adapter = OpenAIToolAdapter(registry, strict=registry.config.strict)
    tool_calls = [
        {
            "id": "call_1",
            "function": {
                "name": "get_current_weather",
                "arguments": json.dumps({"location": "San Francisco, CA", "unit": "fahrenheit"}),
            },
        },
        {"id": "call_2", "function": {"name": "forecast", "arguments": '{"city": "Paris", "days": 2.0}'}},
    ]
    results = await adapter.handle_tool_calls(tool_calls)
    return {
        "tools": [t.json_string(registry.config.strict) for t in registry.list()],
        "messages": adapter.results_to_messages(results),
    }


def main() -> None:
    config = ToolConfig.from_env()
    setup_logging(config)
    output = asyncio.run(run(build_registry(config=config)))
    for line in output["tools"]:
        print(line)
    for message in output["messages"]:
        print(json.dumps(message, ensure_ascii=False))
