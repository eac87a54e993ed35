from .settings import AppConfig, SubtitleConfig, VideoConfig, load_env_file

__all__ = ["AppConfig", "SubtitleConfig", "VideoConfig", "load_env_file"]
