"""
统一的日志工具模块

提供统一的日志接口，替代直接使用 print。
支持日志级别阈值（LOG_LEVEL 环境变量或 set_level()），不包含 emoji。
"""
import os
import sys
from typing import Optional

_LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "SUCCESS": 25,
    "WARN": 30,
    "ERROR": 40,
}

# WARNING 是 WARN 的别名
_ALIASES = {"WARNING": "WARN"}

_threshold: Optional[int] = None


def _resolve_level(name: str) -> int:
    key = name.strip().upper()
    key = _ALIASES.get(key, key)
    if key not in _LEVELS:
        raise ValueError(f"Unknown log level: {name}")
    return _LEVELS[key]


def set_level(name: str) -> None:
    """设置全局日志级别阈值（DEBUG / INFO / WARN / ERROR）"""
    global _threshold
    _threshold = _resolve_level(name)


def get_level() -> int:
    """返回当前阈值；未显式设置时读取 LOG_LEVEL，默认 INFO"""
    if _threshold is not None:
        return _threshold
    try:
        return _resolve_level(os.getenv("LOG_LEVEL", "INFO"))
    except ValueError:
        return _LEVELS["INFO"]


class Logger:
    """简单的日志记录器，不依赖 logging 模块"""

    def __init__(self, prefix: str = ""):
        self.prefix = prefix

    def _format(self, level: str, message: str) -> str:
        """格式化日志消息"""
        if self.prefix:
            return f"[{level}] {self.prefix}: {message}"
        return f"[{level}] {message}"

    def _emit(self, level: str, message: str, stream) -> None:
        if _LEVELS[level] < get_level():
            return
        print(self._format(level, message), file=stream)

    def info(self, message: str):
        """信息级别日志"""
        self._emit("INFO", message, sys.stdout)

    def success(self, message: str):
        """成功级别日志"""
        self._emit("SUCCESS", message, sys.stdout)

    def warning(self, message: str):
        """警告级别日志"""
        self._emit("WARN", message, sys.stderr)

    def error(self, message: str):
        """错误级别日志"""
        self._emit("ERROR", message, sys.stderr)

    def debug(self, message: str):
        """调试级别日志"""
        self._emit("DEBUG", message, sys.stdout)


# 全局默认日志记录器
_default_logger = Logger()


def info(message: str):
    _default_logger.info(message)


def success(message: str):
    _default_logger.success(message)


def warning(message: str):
    _default_logger.warning(message)


def error(message: str):
    _default_logger.error(message)


def debug(message: str):
    _default_logger.debug(message)


def get_logger(prefix: str = "") -> Logger:
    """获取带前缀的日志记录器"""
    return Logger(prefix=prefix)
