"""
字幕样式编码：SubtitleStyle → subtitles 滤镜表达式

职责：
- 颜色：名称 / #RRGGBB → ASS 的 BBGGRR 打包格式
- 对齐：(垂直, 水平) → ASS 数字键盘对齐码 1-9
- 路径转义：冒号在滤镜语法中是分隔符，必须加反斜杠
- 字体：force_style 的 Fontfile 字段 + subtitles 滤镜的 fontsdir（字体所在目录，供 libass 加载）
- 表达式构造：先校验为结构化的 SubtitleFilter，再在 render() 一处序列化

所有函数均为纯函数：相同输入永远得到逐字节相同的输出。
"""
from __future__ import annotations

import os
import string
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

from shorts_wizard.errors import (
    InvalidAlignment,
    InvalidFilterPath,
    InvalidFontSize,
    UnsupportedColor,
)

# BBGGRR 打包（ASS 颜色字节序）
NAMED_COLORS: Dict[str, str] = {
    "white": "FFFFFF",
    "black": "000000",
    "red": "0000FF",
    "green": "00FF00",
    "blue": "FF0000",
}

# ASS alpha：00 = 完全不透明，FF = 完全透明
OPAQUE_ALPHA = "00"

# 数字键盘布局：底行 1-3，中行 4-6，顶行 7-9
ALIGNMENT_CODES: Dict[Tuple[str, str], int] = {
    ("bottom", "left"): 1,
    ("bottom", "center"): 2,
    ("bottom", "right"): 3,
    ("center", "left"): 4,
    ("center", "center"): 5,
    ("center", "right"): 6,
    ("top", "left"): 7,
    ("top", "center"): 8,
    ("top", "right"): 9,
}

_VERTICAL_SYNONYMS = {"middle": "center"}


def encode_color(value: str) -> str:
    """
    将颜色名称或十六进制 RRGGBB 转换为 ASS 的 BBGGRR（大写）。

    Args:
        value: "white" / "Red" / "#1A2B3C" / "1a2b3c"

    Returns:
        6 位十六进制 BBGGRR，例如 "#1A2B3C" -> "3C2B1A"

    Raises:
        UnsupportedColor: 未知名称、长度不是 6、或包含非十六进制字符
    """
    if not isinstance(value, str):
        raise UnsupportedColor(f"Unsupported color value: {value!r}")

    raw = value.strip()
    named = NAMED_COLORS.get(raw.lower())
    if named is not None:
        return named

    hex_part = raw[1:] if raw.startswith("#") else raw
    if len(hex_part) != 6 or any(ch not in string.hexdigits for ch in hex_part):
        raise UnsupportedColor(
            f"Unsupported color string: {value!r}. Use one of "
            f"{', '.join(sorted(NAMED_COLORS))} or #RRGGBB hex."
        )

    rr, gg, bb = hex_part[0:2], hex_part[2:4], hex_part[4:6]
    return f"{bb}{gg}{rr}".upper()


def alignment_code(vertical: str, horizontal: str) -> int:
    """
    将对齐方式映射为 ASS Alignment 值（1-9）。

    vertical: top / center / middle / bottom（大小写不敏感）
    horizontal: left / center / right
    """
    v = str(vertical).strip().lower()
    v = _VERTICAL_SYNONYMS.get(v, v)
    h = str(horizontal).strip().lower()
    code = ALIGNMENT_CODES.get((v, h))
    if code is None:
        raise InvalidAlignment(
            f"Invalid alignment combination: vertical={vertical!r}, horizontal={horizontal!r}. "
            f"Use 'top/center/bottom' and 'left/center/right'."
        )
    return code


def escape_filter_path(path: str, *, forbid: str = "") -> str:
    """
    转义嵌入滤镜文本的文件路径。

    反斜杠先加倍，再给每个冒号加反斜杠前缀（Windows 盘符 C: 也会被转义）。
    单引号会被选项解析当作引号起点，换行会截断表达式，直接拒绝；forbid 中的字符同样拒绝。
    """
    path = str(path)
    for ch in "'\n\r" + forbid:
        if ch in path:
            raise InvalidFilterPath(f"Path cannot be embedded in a filter expression ({ch!r}): {path}")
    return path.replace("\\", "\\\\").replace(":", "\\:")


def render_filter_args(options: Sequence[Tuple[str, str]]) -> str:
    """
    按 key=value 以冒号连接滤镜选项。

    值必须已经过 escape_filter_path 转义：avfilter 对选项字符串只解析一遍，
    不加引号时 \\: 与 \\\\ 才会被还原；引号内的反斜杠会原样保留。
    """
    return ":".join(f"{key}={value}" for key, value in options)


@dataclass(frozen=True)
class SubtitleStyle:
    font_path: str
    font_size: int
    color: str = "white"
    vertical: str = "bottom"
    horizontal: str = "center"


@dataclass(frozen=True)
class FilterExpression:
    """已完全转义的滤镜表达式（name=args），构造后不可变。"""

    name: str
    args: str

    @property
    def text(self) -> str:
        return f"{self.name}={self.args}"

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class SubtitleFilter:
    """校验与转义后的 subtitles 滤镜字段。"""

    filename: str
    fontsdir: str
    fontfile: str
    font_size: int
    colour: str  # BBGGRR
    alignment: int

    @classmethod
    def from_style(cls, style: SubtitleStyle, subtitle_path: str) -> "SubtitleFilter":
        size = style.font_size
        if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
            raise InvalidFontSize(f"Font size must be a positive integer: {size!r}")

        # 颜色与对齐先于路径校验，错误信息更贴近用户输入
        colour = encode_color(style.color)
        alignment = alignment_code(style.vertical, style.horizontal)

        # force_style 字段以逗号分隔
        fontfile = escape_filter_path(style.font_path, forbid=",")
        return cls(
            filename=escape_filter_path(subtitle_path),
            fontsdir=escape_filter_path(os.path.dirname(str(style.font_path)) or "."),
            fontfile=fontfile,
            font_size=size,
            colour=colour,
            alignment=alignment,
        )

    def render(self) -> FilterExpression:
        force_style = (
            f"Fontfile={self.fontfile},"
            f"FontSize={self.font_size},"
            f"PrimaryColour=&H{OPAQUE_ALPHA}{self.colour},"
            f"Alignment={self.alignment}"
        )
        return FilterExpression(
            name="subtitles",
            args=render_filter_args([
                ("filename", self.filename),
                ("fontsdir", self.fontsdir),
                ("force_style", force_style),
            ]),
        )


def build_filter_expression(style: SubtitleStyle, subtitle_path: str) -> FilterExpression:
    """根据样式和字幕文件路径构造 subtitles 滤镜表达式。"""
    return SubtitleFilter.from_style(style, subtitle_path).render()
