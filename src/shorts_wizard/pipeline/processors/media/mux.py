"""
容器复用：打开目标文件，按操作级选项创建输出流、写头/写尾

生命周期（顺序错误抛 MuxStateError，属于编程错误）：
    OPENED --write_header()--> HEADER_WRITTEN --write_trailer()--> CLOSED

每个输出流对应一个 writer：
- copy：packet 原样写入，只改写所属流
- reencode（视频）：decode → 可选滤镜（subtitles）→ libx264 encode
- pcm_s16le（音频）：decode → 重采样为 s16 → pcm_s16le encode
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from fractions import Fraction
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import av
import av.error
import av.filter

from shorts_wizard.errors import MuxError, MuxStateError, PacketWriteError
from shorts_wizard.utils.logger import debug, warning

from ..subtitle.style import FilterExpression
from .demux import StreamInfo
from .runtime import ensure_initialized

REENCODE_VIDEO_CODEC = "libx264"
REENCODE_PIX_FMT = "yuv420p"
PCM_SAMPLE_FORMAT = "s16"

# 滤镜图暂时没有可输出的帧 / 已结束
_GRAPH_DRAINED = (av.error.BlockingIOError, av.error.EOFError)


class CodecMode(str, Enum):
    COPY = "copy"
    REENCODE = "reencode"
    PCM_S16LE = "pcm_s16le"


class SinkState(str, Enum):
    OPENED = "opened"
    HEADER_WRITTEN = "header_written"
    CLOSED = "closed"


@dataclass(frozen=True)
class MuxOptions:
    start: Optional[float] = None  # 秒
    duration: Optional[float] = None  # 秒
    video_mode: CodecMode = CodecMode.COPY
    audio_mode: CodecMode = CodecMode.COPY
    video_filter: Optional[FilterExpression] = None
    video_codec: str = REENCODE_VIDEO_CODEC

    def __post_init__(self):
        if self.start is not None and self.start < 0:
            raise ValueError(f"start must be >= 0: {self.start}")
        if self.duration is not None and self.duration <= 0:
            raise ValueError(f"duration must be > 0: {self.duration}")
        if self.video_mode not in (CodecMode.COPY, CodecMode.REENCODE):
            raise ValueError(f"Unsupported video mode: {self.video_mode}")
        if self.audio_mode not in (CodecMode.COPY, CodecMode.PCM_S16LE):
            raise ValueError(f"Unsupported audio mode: {self.audio_mode}")
        if self.video_filter is not None and self.video_mode is not CodecMode.REENCODE:
            raise ValueError("video_filter requires video_mode=reencode")

    def mode_for(self, medium: str) -> CodecMode:
        if medium == "video":
            return self.video_mode
        if medium == "audio":
            return self.audio_mode
        return CodecMode.COPY


class _TimeWindow:
    """[start, start + duration) 时间窗口；写入的 packet 时间戳平移到从 0 开始。"""

    def __init__(self, start: Optional[float], duration: Optional[float]):
        self.start = start or 0.0
        self.end = self.start + duration if duration is not None else None
        self._origin: Optional[Fraction] = None
        # dts 已越过窗口终点的输出流；dts 单调，之后的 packet 都会被丢弃
        self.past_end: Set[int] = set()

    def admit(self, packet, output_index: int) -> bool:
        if self.end is None:
            return True
        if packet.dts * packet.time_base >= self.end:
            self.past_end.add(output_index)
        ts = packet.pts if packet.pts is not None else packet.dts
        return ts * packet.time_base < self.end

    def shift(self, packet) -> None:
        if self.start <= 0:
            return
        # 以第一个写入 packet 的 dts 作为全局零点（seek 落在关键帧上）
        if self._origin is None:
            self._origin = packet.dts * packet.time_base
        offset = round(self._origin / packet.time_base)
        packet.dts -= offset
        if packet.pts is not None:
            packet.pts -= offset


class _CopyWriter:
    def __init__(self, container, out_stream, output_index: int):
        self.container = container
        self.out_stream = out_stream
        self.output_index = output_index

    def write(self, packet) -> None:
        packet.stream = self.out_stream
        try:
            self.container.mux(packet)
        except av.error.FFmpegError as e:
            raise PacketWriteError(f"mux failed on output #{self.output_index}: {e}", self.output_index) from e

    def flush(self) -> None:
        pass


class _FilterStage:
    def __init__(self, graph):
        self.graph = graph

    def push(self, frame) -> List[Any]:
        self.graph.push(frame)
        return self._drain()

    def flush(self) -> List[Any]:
        self.graph.push(None)
        return self._drain()

    def _drain(self) -> List[Any]:
        frames = []
        while True:
            try:
                frames.append(self.graph.pull())
            except _GRAPH_DRAINED:
                return frames


class _ResampleStage:
    def __init__(self, resampler):
        self.resampler = resampler

    def push(self, frame) -> List[Any]:
        return self.resampler.resample(frame)

    def flush(self) -> List[Any]:
        return self.resampler.resample(None)


class _TranscodeWriter:
    """decode → stage（滤镜 / 重采样）→ encode → mux"""

    def __init__(self, container, decoder, out_stream, output_index: int, stage=None):
        self.container = container
        self.decoder = decoder
        self.out_stream = out_stream
        self.output_index = output_index
        self.stage = stage

    def write(self, packet) -> None:
        try:
            for frame in self.decoder.decode(packet):
                self._process(frame)
        except av.error.FFmpegError as e:
            raise PacketWriteError(
                f"transcode failed on output #{self.output_index}: {e}", self.output_index
            ) from e

    def flush(self) -> None:
        for frame in self.decoder.decode(None):
            self._process(frame)
        if self.stage is not None:
            for frame in self.stage.flush():
                self._encode(frame)
        self._encode(None)

    def _process(self, frame) -> None:
        if self.stage is None:
            self._encode(frame)
            return
        for out in self.stage.push(frame):
            self._encode(out)

    def _encode(self, frame) -> None:
        for packet in self.out_stream.encode(frame):
            self.container.mux(packet)


def _build_filter_graph(source: StreamInfo, expression: FilterExpression):
    graph = av.filter.Graph()
    buffer = graph.add_buffer(template=source.av_stream)
    node = graph.add(expression.name, expression.args)
    sink = graph.add("buffersink")
    buffer.link_to(node)
    node.link_to(sink)
    graph.configure()
    return graph


class MediaSink:
    """可写目标容器。"""

    def __init__(self, path: str, container, options: MuxOptions):
        self.path = path
        self.options = options
        self.state = SinkState.OPENED
        self._container = container
        self._writers: List[Any] = []
        self._window = _TimeWindow(options.start, options.duration)
        self._flushed = False

    def _require(self, state: SinkState, action: str) -> None:
        if self.state is not state:
            raise MuxStateError(f"{action} requires sink state {state.value}, current state is {self.state.value}")

    @property
    def stream_count(self) -> int:
        return len(self._writers)

    @property
    def past_window_end(self) -> bool:
        """所有输出流都已越过时间窗口终点（之后的 packet 不会再写入）。"""
        return bool(self._writers) and len(self._window.past_end) == len(self._writers)

    def add_stream(self, source: StreamInfo) -> int:
        """为一个已映射的源流创建输出流，返回输出序号。"""
        self._require(SinkState.OPENED, "add_stream()")
        output_index = len(self._writers)
        mode = self.options.mode_for(source.medium)
        try:
            if mode is CodecMode.COPY:
                writer = self._add_copy_stream(source, output_index)
            elif mode is CodecMode.REENCODE:
                writer = self._add_video_encoder(source, output_index)
            else:
                writer = self._add_pcm_encoder(source, output_index)
        except (av.error.FFmpegError, ValueError, TypeError) as e:
            raise MuxError(
                f"Cannot create output stream #{output_index} ({mode.value}) "
                f"for source #{source.index} {source.medium}/{source.codec_name} in {self.path}: {e}"
            ) from e

        self._writers.append(writer)
        debug(f"Output #{output_index} <- source #{source.index} {source.medium}/{source.codec_name} ({mode.value})")
        return output_index

    def _add_copy_stream(self, source: StreamInfo, output_index: int) -> _CopyWriter:
        out = self._container.add_stream_from_template(source.av_stream)
        out.metadata.update(source.av_stream.metadata)
        return _CopyWriter(self._container, out, output_index)

    def _add_video_encoder(self, source: StreamInfo, output_index: int) -> _TranscodeWriter:
        src = source.av_stream
        rate = src.average_rate or src.guessed_rate or Fraction(25)
        out = self._container.add_stream(self.options.video_codec, rate=rate)
        ctx = out.codec_context
        ctx.width = src.codec_context.width
        ctx.height = src.codec_context.height
        ctx.pix_fmt = REENCODE_PIX_FMT
        if src.codec_context.sample_aspect_ratio:
            ctx.sample_aspect_ratio = src.codec_context.sample_aspect_ratio
        out.metadata.update(src.metadata)

        stage = None
        if self.options.video_filter is not None:
            stage = _FilterStage(_build_filter_graph(source, self.options.video_filter))

        return _TranscodeWriter(self._container, src.codec_context, out, output_index, stage)

    def _add_pcm_encoder(self, source: StreamInfo, output_index: int) -> _TranscodeWriter:
        src = source.av_stream
        decoder = src.codec_context
        out = self._container.add_stream(CodecMode.PCM_S16LE.value, rate=decoder.sample_rate)
        out.codec_context.layout = decoder.layout
        out.codec_context.format = PCM_SAMPLE_FORMAT
        out.metadata.update(src.metadata)

        resampler = av.AudioResampler(
            format=PCM_SAMPLE_FORMAT,
            layout=decoder.layout,
            rate=decoder.sample_rate,
        )
        return _TranscodeWriter(self._container, decoder, out, output_index, _ResampleStage(resampler))

    def set_metadata(self, metadata: Dict[str, str]) -> None:
        self._require(SinkState.OPENED, "set_metadata()")
        self._container.metadata.update(metadata)

    def write_header(self) -> None:
        self._require(SinkState.OPENED, "write_header()")
        if not self._writers:
            raise MuxError(f"No output streams created for {self.path}")
        try:
            self._container.start_encoding()
        except av.error.FFmpegError as e:
            raise MuxError(f"Failed to write header for {self.path}: {e}") from e
        self.state = SinkState.HEADER_WRITTEN

    def write_packet(self, output_index: int, packet) -> bool:
        """
        写入一个已映射的 packet。

        Returns:
            False 表示 packet 落在时间窗口之外（未写入）

        Raises:
            PacketWriteError: 单个 packet 写入失败（可恢复）
        """
        self._require(SinkState.HEADER_WRITTEN, "write_packet()")
        if not self._window.admit(packet, output_index):
            return False
        self._window.shift(packet)
        self._writers[output_index].write(packet)
        return True

    def flush(self) -> None:
        """排空解码器 / 滤镜 / 编码器中缓存的帧。"""
        self._require(SinkState.HEADER_WRITTEN, "flush()")
        if self._flushed:
            return
        try:
            for writer in self._writers:
                writer.flush()
        except av.error.FFmpegError as e:
            raise MuxError(f"Failed to flush encoders for {self.path}: {e}") from e
        self._flushed = True

    def write_trailer(self) -> None:
        self._require(SinkState.HEADER_WRITTEN, "write_trailer()")
        self.flush()
        try:
            self._container.close()
        except av.error.FFmpegError as e:
            raise MuxError(f"Failed to write trailer for {self.path}: {e}") from e
        finally:
            self.state = SinkState.CLOSED

    def close(self) -> None:
        """关闭容器；已写头但未写尾时 FFmpeg 仍会落盘，部分文件留给调用方处理。"""
        if self.state is SinkState.CLOSED:
            return
        self.state = SinkState.CLOSED
        try:
            self._container.close()
        except av.error.FFmpegError as e:
            raise MuxError(f"Failed to close {self.path}: {e}") from e

    def __enter__(self) -> "MediaSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
            return
        # 已有异常在传播，关闭失败只记录
        try:
            self.close()
        except MuxError as e:
            warning(str(e))


def open_sink(path: str, options: MuxOptions) -> MediaSink:
    """
    打开目标容器（格式由扩展名决定）。

    Raises:
        MuxError: 无法创建输出容器
    """
    ensure_initialized()
    path = str(path)
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    try:
        container = av.open(path, mode="w")
    except (av.error.FFmpegError, ValueError) as e:
        raise MuxError(f"Cannot open {path} for writing: {e}") from e
    return MediaSink(path, container, options)
