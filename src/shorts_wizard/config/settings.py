import json
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict

from shorts_wizard.utils.atomic import atomic_write


def load_env_file(env_path: str | Path | None = None) -> None:
    """
    加载项目级 .env 文件（不覆盖已存在的环境变量）。

    如果 env_path 为 None，从当前工作目录向上查找 .env 文件。

    Args:
        env_path: .env 文件路径（None = 自动查找）
    """
    from dotenv import find_dotenv, load_dotenv

    if env_path is None:
        found = find_dotenv(usecwd=True)
        if not found:
            return
        env_path = found

    env_path = Path(env_path)
    if env_path.exists():
        load_dotenv(env_path, override=False)


def get_whisper_bin() -> str:
    """
    whisper 可执行文件。
    环境变量：WHISPER_BIN（默认 "whisper"）
    """
    return os.getenv("WHISPER_BIN") or "whisper"


def get_whisper_model() -> str | None:
    """
    默认 whisper 模型（命令行未指定时使用）。
    环境变量：WHISPER_MODEL
    """
    return os.getenv("WHISPER_MODEL")


@dataclass
class VideoConfig:
    input_path: str
    output_path: str
    short_duration_secs: int = 60  # 每个 short 的时长（秒）

    def __post_init__(self):
        if self.short_duration_secs <= 0:
            raise ValueError(f"short_duration_secs must be > 0: {self.short_duration_secs}")


@dataclass
class SubtitleConfig:
    whisper_model_path: str = ""  # whisper 模型名称（tiny.en / base / small ...）或模型路径
    font_path: str = ""  # 字幕字体文件（.ttf / .otf）
    use_subtitles: bool = True
    font_size: int = 24
    font_color: str = "white"  # 颜色名称或 #RRGGBB
    subtitle_position_vertical_alignment: str = "bottom"  # top / center / bottom
    subtitle_position_horizontal_alignment: str = "center"  # left / center / right

    def __post_init__(self):
        if not self.whisper_model_path:
            self.whisper_model_path = get_whisper_model() or ""
        if self.use_subtitles and not self.whisper_model_path:
            raise ValueError("whisper_model_path is required when subtitles are enabled")
        if self.use_subtitles and not self.font_path:
            raise ValueError("font_path is required when subtitles are enabled")


def _build(cls, data: Dict[str, Any], section: str):
    if not isinstance(data, dict):
        raise ValueError(f"Config section '{section}' must be an object")
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown keys in config section '{section}': {', '.join(sorted(unknown))}")
    try:
        return cls(**data)
    except TypeError as e:
        raise ValueError(f"Invalid config section '{section}': {e}") from e


@dataclass
class AppConfig:
    video: VideoConfig
    subtitles: SubtitleConfig = field(default_factory=lambda: SubtitleConfig(use_subtitles=False))

    def to_dict(self) -> Dict[str, Any]:
        return {"video": asdict(self.video), "subtitles": asdict(self.subtitles)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        if not isinstance(data, dict):
            raise ValueError("Config must be a JSON object")
        missing = {"video", "subtitles"} - set(data)
        if missing:
            raise ValueError(f"Missing config sections: {', '.join(sorted(missing))}")
        unknown = set(data) - {"video", "subtitles"}
        if unknown:
            raise ValueError(f"Unknown config sections: {', '.join(sorted(unknown))}")
        return cls(
            video=_build(VideoConfig, data["video"], "video"),
            subtitles=_build(SubtitleConfig, data["subtitles"], "subtitles"),
        )

    def save_to_file(self, path: str | Path) -> None:
        atomic_write(json.dumps(self.to_dict(), ensure_ascii=False, indent=2), Path(path))

    @classmethod
    def load_from_file(cls, path: str | Path) -> "AppConfig":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)
