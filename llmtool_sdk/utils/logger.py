"""
SDK 日志配置工具。

根据 ToolConfig 的 debug / log_file 初始化 ``llmtool_sdk`` 日志。
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from llmtool_sdk.core.config import ToolConfig

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def setup_logging(
    config: Optional[ToolConfig] = None,
    level: int = logging.INFO,
) -> logging.Logger:
    """
    初始化统一的日志配置。

    Args:
        config: 读取 ``debug``（切换到 DEBUG 级别）与 ``log_file``（为空则仅输出到终端）。
        level: 非 debug 时的日志级别。

    Returns:
        ``llmtool_sdk`` Logger 实例。
    """
    config = config or ToolConfig()
    if config.debug:
        level = logging.DEBUG

    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)

    if config.log_file:
        log_dir = os.path.dirname(config.log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        fh = RotatingFileHandler(
            config.log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        fh.setLevel(level)
        logging.getLogger().addHandler(fh)

    sdk_logger = logging.getLogger("llmtool_sdk")
    sdk_logger.setLevel(level)
    return sdk_logger
