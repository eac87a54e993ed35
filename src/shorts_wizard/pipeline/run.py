"""
Pipeline 编排：trim -> (extract audio -> whisper -> burn) -> output

临时目录：<输出目录>/<输入 stem>_processing_temp_<毫秒时间戳>/
- 成功：删除临时目录
- 失败：保留临时目录（中间文件留给调用方排查 / 清理），异常继续向上抛
"""
import shutil
import time
from pathlib import Path
from typing import Dict

from shorts_wizard.config.settings import AppConfig
from shorts_wizard.pipeline.processors.asr import generate_subtitle_file
from shorts_wizard.pipeline.processors.media import burn_subtitles, extract_audio, trim_video
from shorts_wizard.utils.logger import info, warning


def make_temp_dir(input_path: Path, output_path: Path) -> Path:
    """在输出文件所在目录下创建本次运行的临时目录（同名目录先清理）。"""
    output_dir = output_path.parent
    temp_dir = output_dir / f"{input_path.stem}_processing_temp_{int(time.time() * 1000)}"
    if temp_dir.exists():
        shutil.rmtree(temp_dir)
    temp_dir.mkdir(parents=True)
    return temp_dir


def _move_file(src: Path, dst: Path) -> None:
    """rename 失败（例如跨设备）时回退为 copy + 删除。"""
    try:
        src.replace(dst)
    except OSError as e:
        warning(f"Failed to move {src} (attempting copy instead): {e}")
        shutil.copy2(src, dst)
        src.unlink()


def process_video(config: AppConfig) -> Dict[str, str]:
    """
    按配置生成一个 short。

    Returns:
        产物路径字典：
        - output: 最终视频
        - subtitles: 输出视频旁保留的 SRT 副本（仅当启用字幕时）
    """
    video_cfg = config.video
    sub_cfg = config.subtitles

    input_path = Path(video_cfg.input_path)
    output_path = Path(video_cfg.output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    temp_dir = make_temp_dir(input_path, output_path)
    info(f"Temporary processing directory created at: {temp_dir}")

    stem = input_path.stem
    outputs: Dict[str, str] = {}

    # 1. Trim
    trimmed_path = temp_dir / f"{stem}_trimmed.mp4"
    trim_video(
        str(input_path),
        str(trimmed_path),
        0.0,
        float(video_cfg.short_duration_secs),
    )

    if sub_cfg.use_subtitles:
        # 2. Extract audio
        audio_path = temp_dir / f"{stem}_extracted_audio.wav"
        extract_audio(str(trimmed_path), str(audio_path))

        # 3. Whisper -> SRT
        srt_path = Path(generate_subtitle_file(
            str(audio_path),
            sub_cfg.whisper_model_path,
            str(temp_dir),
        ))

        # 4. Burn
        burn_subtitles(
            str(trimmed_path),
            str(srt_path),
            str(output_path),
            sub_cfg.font_path,
            sub_cfg.font_size,
            sub_cfg.font_color,
            sub_cfg.subtitle_position_vertical_alignment,
            sub_cfg.subtitle_position_horizontal_alignment,
        )

        kept_srt = output_path.with_suffix(".srt")
        shutil.copy2(srt_path, kept_srt)
        outputs["subtitles"] = str(kept_srt)
    else:
        info(f"Subtitle generation disabled. Moving trimmed video to output: {output_path}")
        _move_file(trimmed_path, output_path)

    outputs["output"] = str(output_path)

    info(f"Cleaning up temporary directory: {temp_dir}")
    shutil.rmtree(temp_dir)
    return outputs
