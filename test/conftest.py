"""
测试夹具：用 PyAV 合成小体积的测试视频 / 音频

- mpeg4 视频（160x120, 25fps, 每秒一个关键帧）
- aac 单声道音频（44.1kHz, 正弦波）
"""
import math
import sys
from pathlib import Path

import av
import numpy as np
import pytest

# 添加项目路径（未 pip install -e 时也能运行）
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

FPS = 25
WIDTH = 160
HEIGHT = 120
SAMPLE_RATE = 44100
AAC_FRAME = 1024


def make_media(
    path: Path,
    seconds: int = 10,
    *,
    video: bool = True,
    audio: bool = True,
    title: str = "fixture",
) -> Path:
    """合成一个 mp4 测试文件。"""
    container = av.open(str(path), mode="w")
    container.metadata["title"] = title

    vstream = astream = None
    if video:
        vstream = container.add_stream("mpeg4", rate=FPS)
        vstream.codec_context.width = WIDTH
        vstream.codec_context.height = HEIGHT
        vstream.codec_context.pix_fmt = "yuv420p"
        vstream.codec_context.gop_size = FPS
    if audio:
        astream = container.add_stream("aac", rate=SAMPLE_RATE)
        astream.codec_context.layout = "mono"

    if vstream is not None:
        for i in range(seconds * FPS):
            img = np.full((HEIGHT, WIDTH, 3), (i * 7) % 256, dtype=np.uint8)
            img[:, : (i % WIDTH)] = 255
            frame = av.VideoFrame.from_ndarray(img, format="rgb24").reformat(format="yuv420p")
            frame.pts = i
            for packet in vstream.encode(frame):
                container.mux(packet)
        for packet in vstream.encode(None):
            container.mux(packet)

    if astream is not None:
        total = seconds * SAMPLE_RATE
        for start in range(0, total, AAC_FRAME):
            n = min(AAC_FRAME, total - start)
            t = (np.arange(start, start + n) / SAMPLE_RATE).astype(np.float32)
            samples = (0.3 * np.sin(2 * math.pi * 440.0 * t)).astype(np.float32).reshape(1, -1)
            frame = av.AudioFrame.from_ndarray(samples, format="fltp", layout="mono")
            frame.sample_rate = SAMPLE_RATE
            frame.pts = start
            for packet in astream.encode(frame):
                container.mux(packet)
        for packet in astream.encode(None):
            container.mux(packet)

    container.close()
    return path


@pytest.fixture(scope="session")
def media_dir(tmp_path_factory) -> Path:
    return tmp_path_factory.mktemp("media")


@pytest.fixture(scope="session")
def av_source(media_dir) -> Path:
    """10 秒，一个视频流 + 一个音频流。"""
    return make_media(media_dir / "source.mp4", seconds=10)


@pytest.fixture(scope="session")
def video_only_source(media_dir) -> Path:
    return make_media(media_dir / "video_only.mp4", seconds=3, audio=False)


@pytest.fixture
def srt_file(tmp_path) -> Path:
    path = tmp_path / "subs.srt"
    path.write_text(
        "1\n00:00:00,500 --> 00:00:02,000\nHello there\n\n"
        "2\n00:00:02,500 --> 00:00:04,000\nSecond line\n",
        encoding="utf-8",
    )
    return path
