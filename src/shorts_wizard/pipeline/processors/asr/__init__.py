"""
ASR 模块（外部协作方）

公共 API：
- generate_subtitle_file(): 调用 whisper CLI，将音频转写为 SRT
"""
from .whisper import generate_subtitle_file

__all__ = ["generate_subtitle_file"]
