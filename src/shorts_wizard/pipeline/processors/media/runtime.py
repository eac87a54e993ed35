"""
FFmpeg (PyAV) 一次性初始化

ensure_initialized() 由第一次打开容器时惰性调用，进程内只执行一次，
重复调用是安全的。这是 media 模块唯一的进程级可变状态。
"""
import os
import threading

import av
import av.logging

from shorts_wizard.utils.logger import debug

_AV_LOG_LEVELS = {
    "quiet": None,
    "panic": av.logging.PANIC,
    "fatal": av.logging.FATAL,
    "error": av.logging.ERROR,
    "warning": av.logging.WARNING,
    "info": av.logging.INFO,
    "verbose": av.logging.VERBOSE,
    "debug": av.logging.DEBUG,
}

_init_lock = threading.Lock()
_initialized = False


def ensure_initialized() -> None:
    """
    初始化 FFmpeg 日志级别并记录库版本。

    日志级别来自 SHORTS_AV_LOG_LEVEL（默认 error）。
    """
    global _initialized
    if _initialized:
        return
    with _init_lock:
        if _initialized:
            return

        level_name = os.getenv("SHORTS_AV_LOG_LEVEL", "error").strip().lower()
        if level_name not in _AV_LOG_LEVELS:
            raise ValueError(
                f"Unknown SHORTS_AV_LOG_LEVEL: {level_name} "
                f"(expected one of {', '.join(_AV_LOG_LEVELS)})"
            )
        av.logging.set_level(_AV_LOG_LEVELS[level_name])

        versions = ", ".join(
            f"{name} {'.'.join(str(v) for v in version)}"
            for name, version in sorted(av.library_versions.items())
        )
        debug(f"PyAV {av.__version__} initialized ({versions})")
        _initialized = True


def is_initialized() -> bool:
    return _initialized
