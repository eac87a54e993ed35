"""
工具模块

提供日志、SRT 解析与原子写入等纯工具函数。
"""
from .logger import info, success, warning, error, debug, get_logger, set_level

__all__ = [
    "info",
    "success",
    "warning",
    "error",
    "debug",
    "get_logger",
    "set_level",
]
