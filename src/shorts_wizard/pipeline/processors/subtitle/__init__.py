"""
字幕样式模块

职责：
- SubtitleStyle 校验
- 生成 subtitles 滤镜表达式（供 burn 阶段重新编码时使用）
"""
from .style import (
    FilterExpression,
    SubtitleFilter,
    SubtitleStyle,
    alignment_code,
    build_filter_expression,
    encode_color,
    escape_filter_path,
    render_filter_args,
)

__all__ = [
    "FilterExpression",
    "SubtitleFilter",
    "SubtitleStyle",
    "alignment_code",
    "build_filter_expression",
    "encode_color",
    "escape_filter_path",
    "render_filter_args",
]
