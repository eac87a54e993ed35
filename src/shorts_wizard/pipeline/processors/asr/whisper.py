"""
Whisper 字幕生成：调用外部 whisper CLI，从音频生成 SRT

约定：
- 命令：<whisper_bin> <audio> --model <model> --output_dir <dir> --output_format srt
- 产物：<dir>/<audio 文件名 stem>.srt

失败（找不到可执行文件 / 非零退出码 / 产物缺失）统一抛 SubtitleGenerationFailed，
并附带捕获的 stdout / stderr。
"""
import subprocess
from pathlib import Path
from typing import Optional

from shorts_wizard.config.settings import get_whisper_bin
from shorts_wizard.errors import SubtitleGenerationFailed
from shorts_wizard.utils.logger import error, info, warning
from shorts_wizard.utils.srt_parser import parse_srt

# 诊断信息只保留输出末尾
_DIAG_TAIL = 2000


def _diagnostics(stdout: Optional[str], stderr: Optional[str]) -> str:
    parts = []
    if stdout:
        parts.append(f"stdout: {stdout[-_DIAG_TAIL:]}")
    if stderr:
        parts.append(f"stderr: {stderr[-_DIAG_TAIL:]}")
    return "\n".join(parts)


def generate_subtitle_file(
    audio_path: str,
    model: str,
    output_dir: str,
    *,
    whisper_bin: Optional[str] = None,
) -> str:
    """
    调用 whisper 生成字幕文件。

    Args:
        audio_path: 输入音频（.wav）
        model: whisper 模型名称或模型文件路径（tiny / base / small / medium / large ...）
        output_dir: 输出目录（不存在时创建）
        whisper_bin: whisper 可执行文件（默认读取 WHISPER_BIN，回退到 "whisper"）

    Returns:
        生成的 SRT 文件路径

    Raises:
        SubtitleGenerationFailed: 音频不存在、whisper 不可用、退出码非零或 SRT 未生成
        NotADirectoryError: output_dir 已存在但不是目录
    """
    audio_file = Path(audio_path)
    out_dir = Path(output_dir)

    if not audio_file.exists():
        raise SubtitleGenerationFailed(f"Audio input path does not exist: {audio_path}")

    if out_dir.exists() and not out_dir.is_dir():
        raise NotADirectoryError(f"Output directory path exists but is not a directory: {output_dir}")
    out_dir.mkdir(parents=True, exist_ok=True)

    cmd = [
        whisper_bin or get_whisper_bin(),
        str(audio_file),
        "--model", str(model),
        "--output_dir", str(out_dir),
        "--output_format", "srt",
    ]

    info(f"Transcribing {audio_file.name} with whisper (model: {model})...")
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as e:
        raise SubtitleGenerationFailed(
            f"Whisper executable not found: {cmd[0]}. "
            f"Install openai-whisper or set WHISPER_BIN."
        ) from e

    if result.returncode != 0:
        error(f"Whisper failed:")
        error(f"  Command: {' '.join(cmd)}")
        error(f"  Return code: {result.returncode}")
        raise SubtitleGenerationFailed(
            f"Whisper command failed with status {result.returncode}",
            _diagnostics(result.stdout, result.stderr),
        )

    srt_path = out_dir / f"{audio_file.stem}.srt"
    if not srt_path.exists():
        raise SubtitleGenerationFailed(
            f"Subtitle file not found at expected path: {srt_path}",
            _diagnostics(result.stdout, result.stderr),
        )

    try:
        cues = parse_srt(str(srt_path))
    except ValueError as e:
        warning(f"Generated SRT could not be parsed ({e}); burning it as-is")
    else:
        if not cues:
            warning(f"Whisper produced an empty subtitle file: {srt_path.name}")
        else:
            info(f"Subtitles generated: {srt_path.name} ({len(cues)} cues, last ends at {cues[-1].end:.2f}s)")

    return str(srt_path)
