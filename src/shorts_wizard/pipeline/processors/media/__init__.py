"""
Media Processor 模块

公共 API：
- trim_video(): 按时间窗口 stream copy 视频 / 音频
- extract_audio(): 提取最佳音轨为 PCM16LE WAV
- burn_subtitles(): 烧录字幕（视频重新编码，音频 copy）

内部模块：
- runtime.py: FFmpeg 一次性初始化
- demux.py / select.py / mux.py / relay.py: 解复用、选流、复用、packet 转发
"""
from .processor import burn_subtitles, extract_audio, trim_video
from .relay import PacketFailurePolicy

__all__ = ["burn_subtitles", "extract_audio", "trim_video", "PacketFailurePolicy"]
