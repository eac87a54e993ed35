"""
Core package for the shorts generator.

Pipeline:
    Video
      ↓
    trim (stream copy)
      ↓
    extract audio (PCM 16-bit WAV)
      ↓
    whisper CLI (SRT)
      ↓
    burn subtitles (subtitles filter + libx264, audio copy)
"""

from .config.settings import load_env_file
from .pipeline.processors.asr import generate_subtitle_file
from .pipeline.processors.media import burn_subtitles, extract_audio, trim_video

__all__ = [
    "load_env_file",
    "generate_subtitle_file",
    "burn_subtitles",
    "extract_audio",
    "trim_video",
]
