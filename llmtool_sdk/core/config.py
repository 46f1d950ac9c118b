"""
SDK 配置管理。

支持从环境变量 (.env) 或代码直接构造。
Schema 模式: strict (默认，所有参数 required，可选参数允许 null) 或 loose。
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv


def _to_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class ToolConfig:
    """Tool registry 运行配置。"""

    # ── Schema ──
    strict: bool = True  # 默认导出模式

    # ── 注册 ──
    warn_on_overwrite: bool = True

    # ── 调试 ──
    debug: bool = False
    log_file: str = ""

    # ── 扩展配置 (业务层自行使用) ──
    extras: dict = field(default_factory=dict)

    @classmethod
    def from_env(cls, env_file: str = ".env") -> ToolConfig:
        """
        从 .env 文件和环境变量中加载配置。

        环境变量优先级高于 .env 文件。
        """
        load_dotenv(env_file, override=False)

        return cls(
            strict=_to_bool(os.getenv("LLMTOOL_STRICT"), default=True),
            warn_on_overwrite=_to_bool(
                os.getenv("LLMTOOL_WARN_ON_OVERWRITE"), default=True
            ),
            debug=_to_bool(os.getenv("LLMTOOL_DEBUG")),
            log_file=os.getenv("LLMTOOL_LOG_FILE", "").strip(),
        )

    def summary(self) -> str:
        """返回配置摘要。"""
        return (
            f"Schema mode: {'STRICT' if self.strict else 'LOOSE'}\n"
            f"Warn on overwrite: {self.warn_on_overwrite}\n"
            f"Debug: {self.debug}\n"
            f"Log file: {self.log_file or '未配置'}"
        )
