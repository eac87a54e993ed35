"""
SRT 文件解析器：将语音识别产出的 SRT 文件转换为 cue 列表
"""
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List

_TIMING = re.compile(
    r"^(\d{2}:\d{2}:\d{2},\d{3})\s*-->\s*(\d{2}:\d{2}:\d{2},\d{3})"
)


@dataclass(frozen=True)
class SrtCue:
    index: int
    start: float  # 秒
    end: float  # 秒
    text: str


def parse_srt(srt_path: str) -> List[SrtCue]:
    """
    解析 SRT 文件，返回 cue 列表。

    Args:
        srt_path: SRT 文件路径

    Returns:
        SrtCue 列表（按文件顺序）

    Raises:
        FileNotFoundError: 文件不存在
        ValueError: 某个块缺少序号或时间轴

    SRT 格式示例：
        1
        00:00:01,234 --> 00:00:03,456
        第一行字幕
        第二行字幕

        2
        00:00:04,567 --> 00:00:06,789
        第二段字幕
    """
    srt_file = Path(srt_path)
    if not srt_file.exists():
        raise FileNotFoundError(f"SRT file not found: {srt_path}")

    # whisper 在部分平台输出 BOM / CRLF
    content = srt_file.read_text(encoding="utf-8-sig").replace("\r\n", "\n")

    cues: List[SrtCue] = []
    for block in re.split(r"\n\s*\n", content.strip()):
        lines = [line for line in block.split("\n") if line.strip()]
        if not lines:
            continue
        if len(lines) < 2 or not lines[0].strip().isdigit():
            raise ValueError(f"Invalid SRT block in {srt_path}: {block[:80]!r}")

        match = _TIMING.match(lines[1].strip())
        if not match:
            raise ValueError(f"Invalid SRT timing line in {srt_path}: {lines[1]!r}")

        cues.append(SrtCue(
            index=int(lines[0].strip()),
            start=srt_time_to_seconds(match.group(1)),
            end=srt_time_to_seconds(match.group(2)),
            text="\n".join(line.strip() for line in lines[2:]),
        ))

    return cues


def srt_time_to_seconds(time_str: str) -> float:
    """
    将 SRT 时间格式 (HH:MM:SS,mmm) 转换为秒（float）。

    Args:
        time_str: SRT 时间字符串，例如 "00:01:23,456"

    Returns:
        秒数（float），例如 83.456
    """
    parts = time_str.split(',')
    if len(parts) != 2:
        raise ValueError(f"Invalid SRT time format: {time_str}")

    time_parts = parts[0].split(':')
    if len(time_parts) != 3:
        raise ValueError(f"Invalid SRT time format: {time_str}")

    hours, minutes, seconds = (int(p) for p in time_parts)
    return hours * 3600 + minutes * 60 + seconds + int(parts[1]) / 1000.0
