"""
容器解复用：打开源文件，暴露有序的流、元数据和惰性 packet 序列

- streams：可重复遍历的 StreamInfo 元组（容器原始顺序）
- metadata：容器级元数据副本
- packets()：单次、不可重启的 (source_index, packet) 生成器，按容器原生交织顺序
"""
from __future__ import annotations

from dataclasses import dataclass, field
from fractions import Fraction
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

import av
import av.error

from shorts_wizard.errors import DemuxError, DemuxFailure
from shorts_wizard.utils.logger import debug

from .runtime import ensure_initialized

MEDIA_TYPES = ("video", "audio", "subtitle")


@dataclass(frozen=True)
class StreamInfo:
    """源容器中的一个流；av_stream 是 copy 模式复制 codec 参数的模板。"""

    index: int
    medium: str  # video | audio | subtitle | data
    codec_name: Optional[str]
    time_base: Optional[Fraction]
    extradata: Optional[bytes] = None
    av_stream: Any = field(default=None, compare=False, repr=False)


def _stream_info(stream) -> StreamInfo:
    medium = stream.type if stream.type in MEDIA_TYPES else "data"
    ctx = stream.codec_context
    codec_name = ctx.name if ctx is not None else None
    extradata = ctx.extradata if ctx is not None else None
    return StreamInfo(
        index=stream.index,
        medium=medium,
        codec_name=codec_name,
        time_base=stream.time_base,
        extradata=bytes(extradata) if extradata else None,
        av_stream=stream,
    )


class MediaSource:
    """只读源容器。"""

    def __init__(self, path: str, container):
        self.path = path
        self._container = container
        self._streams: Tuple[StreamInfo, ...] = tuple(
            _stream_info(s) for s in container.streams
        )
        self._packets_started = False
        self._closed = False

    @property
    def streams(self) -> Tuple[StreamInfo, ...]:
        return self._streams

    @property
    def metadata(self) -> Dict[str, str]:
        return dict(self._container.metadata)

    @property
    def duration(self) -> Optional[float]:
        """容器时长（秒），未知时为 None。"""
        if self._container.duration is None:
            return None
        return self._container.duration / av.time_base

    def stream(self, index: int) -> StreamInfo:
        return self._streams[index]

    def best_stream(self, medium: str) -> Optional[int]:
        """FFmpeg 的 best stream 启发式（默认音轨优先），没有时返回 None。"""
        best = self._container.streams.best(medium)
        return best.index if best is not None else None

    def seek(self, seconds: float) -> None:
        """向后 seek 到 seconds 之前最近的关键帧；必须在 packets() 之前调用。"""
        if self._packets_started:
            raise RuntimeError("seek() must be called before packets()")
        if seconds <= 0:
            return
        try:
            self._container.seek(int(seconds * av.time_base), backward=True, any_frame=False)
        except av.error.FFmpegError as e:
            raise DemuxError(DemuxFailure.CORRUPT, self.path, f"seek to {seconds}s failed: {e}") from e
        debug(f"Seeked {Path(self.path).name} to keyframe at or before {seconds}s")

    def packets(self) -> Iterator[Tuple[int, Any]]:
        """
        按交织顺序产出 (source_index, packet)。

        只能调用一次：消费会不可逆地推进文件位置。
        demuxer 结束时的 flush packet（dts 为 None）不产出。
        """
        if self._packets_started:
            raise RuntimeError(f"packets() already consumed for {self.path}")
        self._packets_started = True
        return self._iter_packets()

    def _iter_packets(self) -> Iterator[Tuple[int, Any]]:
        try:
            for packet in self._container.demux():
                if packet.dts is None:
                    continue
                yield packet.stream.index, packet
        except av.error.FFmpegError as e:
            raise DemuxError(DemuxFailure.CORRUPT, self.path, str(e)) from e

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._container.close()

    def __enter__(self) -> "MediaSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def open_source(path: str) -> MediaSource:
    """
    打开源容器。

    Raises:
        DemuxError: NOT_FOUND / UNSUPPORTED_FORMAT / CORRUPT
        OSError: 其他文件系统错误（权限、目录等）
    """
    ensure_initialized()
    path = str(path)
    try:
        container = av.open(path, mode="r")
    except FileNotFoundError as e:
        raise DemuxError(DemuxFailure.NOT_FOUND, path, str(e)) from e
    except (av.error.InvalidDataError, av.error.DemuxerNotFoundError) as e:
        raise DemuxError(DemuxFailure.UNSUPPORTED_FORMAT, path, str(e)) from e
    except OSError:
        raise
    except av.error.FFmpegError as e:
        raise DemuxError(DemuxFailure.CORRUPT, path, str(e)) from e

    source = MediaSource(path, container)
    debug(
        f"Opened {path}: "
        + ", ".join(f"#{s.index} {s.medium}/{s.codec_name}" for s in source.streams)
    )
    return source
