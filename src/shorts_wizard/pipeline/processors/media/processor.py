"""
Media Processor：trim / extract audio / burn subtitles（唯一对外入口）

职责：
- 打开源容器 → 选择流 → 打开目标容器 → 写头 → relay → 写尾
- 映射与滤镜表达式在打开目标容器之前算好（样式错误不会留下半个输出文件）
- 返回 ProcessorResult（metrics 为 relay 统计）

架构原则：
- processor.py 是唯一对外接口
- demux / select / mux / relay 是内部实现
"""
from pathlib import Path

from shorts_wizard.errors import NoStreamOfKind
from shorts_wizard.utils.logger import info

from .._types import ProcessorResult
from ..subtitle.style import SubtitleStyle, build_filter_expression
from .demux import MediaSource, open_source
from .mux import REENCODE_VIDEO_CODEC, CodecMode, MuxOptions, open_sink
from .relay import PacketFailurePolicy, RelayStats, relay_packets
from .select import StreamMapping, index_predicate, media_predicate, select_streams


def _remux(
    source: MediaSource,
    output_path: str,
    mapping: StreamMapping,
    options: MuxOptions,
    policy: PacketFailurePolicy,
) -> RelayStats:
    with open_sink(output_path, options) as sink:
        for source_index, output_index in mapping.mapped():
            created = sink.add_stream(source.stream(source_index))
            assert created == output_index, "output streams must follow mapping order"
        sink.set_metadata(source.metadata)
        sink.write_header()
        stats = relay_packets(source.packets(), mapping, sink, policy)
        sink.write_trailer()
    return stats


def _result(output_path: str, mapping: StreamMapping, stats: RelayStats) -> ProcessorResult:
    output_file = Path(output_path)
    size_mb = output_file.stat().st_size / 1024 / 1024
    return ProcessorResult(
        outputs=[str(output_file)],
        data={
            "output_path": str(output_file),
            "stream_count": mapping.output_count,
        },
        metrics={
            **stats.to_dict(),
            "output_size_mb": size_mb,
        },
    )


def trim_video(
    input_path: str,
    output_path: str,
    start_secs: float,
    duration_secs: float,
    *,
    policy: PacketFailurePolicy = PacketFailurePolicy.BEST_EFFORT,
) -> ProcessorResult:
    """
    截取 [start_secs, start_secs + duration_secs) 的视频和音频流（stream copy，不重新编码）。

    起点对齐到 start_secs 之前最近的关键帧。

    Raises:
        DemuxError: 源文件无法打开
        NoStreamOfKind: 源文件没有视频或音频流
        MuxError: 目标文件无法创建或写入
    """
    options = MuxOptions(
        start=start_secs,
        duration=duration_secs,
        video_mode=CodecMode.COPY,
        audio_mode=CodecMode.COPY,
    )

    with open_source(input_path) as source:
        mapping = select_streams(source.streams, media_predicate("video", "audio"))
        if mapping.output_count == 0:
            raise NoStreamOfKind("video or audio", input_path)

        info(f"Trimming {Path(input_path).name}: start={start_secs}s duration={duration_secs}s "
             f"({mapping.output_count} stream(s), copy)")
        source.seek(start_secs)
        stats = _remux(source, output_path, mapping, options, policy)

    result = _result(output_path, mapping, stats)
    info(f"Trimmed video written: {Path(output_path).name} "
         f"(packets: {stats.written} written, {stats.failed} failed, "
         f"size: {result.metrics['output_size_mb']:.2f} MB)")
    return result


def extract_audio(
    input_path: str,
    output_path: str,
    *,
    policy: PacketFailurePolicy = PacketFailurePolicy.BEST_EFFORT,
) -> ProcessorResult:
    """
    提取最佳音轨为 PCM 16-bit little-endian WAV（解码后重新编码）。

    Raises:
        NoStreamOfKind: 没有音频流（此时不会创建输出文件）
    """
    options = MuxOptions(audio_mode=CodecMode.PCM_S16LE)

    with open_source(input_path) as source:
        best_audio = source.best_stream("audio")
        if best_audio is None:
            raise NoStreamOfKind("audio", input_path)
        mapping = select_streams(source.streams, index_predicate(best_audio))

        audio = source.stream(best_audio)
        info(f"Extracting audio from {Path(input_path).name}: source #{best_audio} ({audio.codec_name}) -> pcm_s16le")
        stats = _remux(source, output_path, mapping, options, policy)

    result = _result(output_path, mapping, stats)
    info(f"Audio extracted: {Path(output_path).name} (size: {result.metrics['output_size_mb']:.2f} MB)")
    return result


def burn_subtitles(
    trimmed_video_path: str,
    subtitle_file_path: str,
    output_path: str,
    font_path: str,
    font_size: int,
    color: str,
    vertical_alignment: str,
    horizontal_alignment: str,
    *,
    policy: PacketFailurePolicy = PacketFailurePolicy.BEST_EFFORT,
    video_codec: str = REENCODE_VIDEO_CODEC,
) -> ProcessorResult:
    """
    将字幕烧录进视频：视频经 subtitles 滤镜后重新编码，音频 stream copy。

    Raises:
        UnsupportedColor / InvalidAlignment / InvalidFontSize / InvalidFilterPath:
            样式校验失败（在打开任何容器之前）
        FileNotFoundError: 字幕文件不存在
    """
    style = SubtitleStyle(
        font_path=font_path,
        font_size=font_size,
        color=color,
        vertical=vertical_alignment,
        horizontal=horizontal_alignment,
    )
    expression = build_filter_expression(style, subtitle_file_path)

    if not Path(subtitle_file_path).is_file():
        raise FileNotFoundError(f"Subtitle file not found: {subtitle_file_path}")

    options = MuxOptions(
        video_mode=CodecMode.REENCODE,
        audio_mode=CodecMode.COPY,
        video_filter=expression,
        video_codec=video_codec,
    )

    with open_source(trimmed_video_path) as source:
        mapping = select_streams(source.streams, media_predicate("video", "audio"))
        if mapping.output_count == 0:
            raise NoStreamOfKind("video or audio", trimmed_video_path)

        info(f"Burning subtitles {Path(subtitle_file_path).name} into {Path(trimmed_video_path).name} "
             f"(codec: {video_codec})")
        info(f"Filter: {expression.text}")
        stats = _remux(source, output_path, mapping, options, policy)

    result = _result(output_path, mapping, stats)
    result.data["filter"] = expression.text
    info(f"Burn completed: {Path(output_path).name} (size: {result.metrics['output_size_mb']:.2f} MB)")
    return result
