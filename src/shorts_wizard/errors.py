"""
错误类型：shorts_wizard 所有可预期失败的统一分类

- DemuxError / MuxError：容器层失败（致命）
- NoStreamOfKind：源文件缺少所需类型的流
- StyleError 及其子类：字幕样式校验失败（在打开输出容器之前抛出）
- PacketWriteError：单个 packet 写入失败（可恢复，由 relay 计数）
- SubtitleGenerationFailed：外部语音识别进程失败
- MuxStateError：调用顺序错误（编程错误，不属于可恢复分类）
"""
from __future__ import annotations

from enum import Enum


class ShortsWizardError(Exception):
    """Base error for the shorts_wizard pipeline."""


class DemuxFailure(str, Enum):
    NOT_FOUND = "not_found"
    UNSUPPORTED_FORMAT = "unsupported_format"
    CORRUPT = "corrupt"


class DemuxError(ShortsWizardError):
    """Raised when a source container cannot be opened or read."""

    def __init__(self, reason: DemuxFailure, path: str, detail: str = ""):
        self.reason = reason
        self.path = path
        self.detail = detail
        message = f"Cannot demux {path} ({reason.value})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class NoStreamOfKind(ShortsWizardError):
    """Raised when the source has no stream of the requested medium."""

    def __init__(self, medium: str, path: str = ""):
        self.medium = medium
        self.path = path
        where = f" in {path}" if path else ""
        super().__init__(f"No {medium} stream found{where}")


class StyleError(ShortsWizardError, ValueError):
    """Raised when a subtitle style field fails validation."""


class UnsupportedColor(StyleError):
    pass


class InvalidAlignment(StyleError):
    pass


class InvalidFontSize(StyleError):
    pass


class InvalidFilterPath(StyleError):
    pass


class MuxError(ShortsWizardError):
    """Raised when the destination container cannot be opened, extended or finalized."""


class MuxStateError(RuntimeError):
    """Raised when sink lifecycle methods are called out of order."""


class PacketWriteError(ShortsWizardError):
    """Raised by a sink when a single packet cannot be written."""

    def __init__(self, message: str, output_index: int | None = None):
        self.output_index = output_index
        super().__init__(message)


class SubtitleGenerationFailed(ShortsWizardError):
    """Raised when the speech-to-text collaborator does not produce an SRT file."""

    def __init__(self, message: str, diagnostics: str = ""):
        self.diagnostics = diagnostics
        if diagnostics:
            message = f"{message}\n{diagnostics}"
        super().__init__(message)
