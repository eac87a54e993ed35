"""
Packet relay：按 StreamMapping 把源 packet 转发到目标容器

- 未映射的 packet：丢弃，不算错误
- 已映射的 packet：写入对应输出流
- 单个 packet 写入失败：由 PacketFailurePolicy 决定继续（计数 + 警告）还是立即抛出

严格单遍，不回退、不缓存超过一个 packet。
所有输出流都越过时间窗口终点后提前停止读取（剩余 packet 只会被丢弃）。
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Tuple

from shorts_wizard.errors import PacketWriteError
from shorts_wizard.utils.logger import debug, warning

from .select import StreamMapping

# 失败日志只打印前 N 条，之后只计数
MAX_LOGGED_FAILURES = 20


class PacketFailurePolicy(str, Enum):
    BEST_EFFORT = "best_effort"
    FAIL_FAST = "fail_fast"


@dataclass
class RelayStats:
    read: int = 0
    written: int = 0
    discarded: int = 0  # 未映射或落在时间窗口之外
    failed: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def relay_packets(
    packets: Iterable[Tuple[int, Any]],
    mapping: StreamMapping,
    sink,
    policy: PacketFailurePolicy = PacketFailurePolicy.BEST_EFFORT,
) -> RelayStats:
    """
    转发 packet 直到源序列耗尽（或所有输出流越过时间窗口终点）。

    Args:
        packets: (source_index, packet) 序列（MediaSource.packets()）
        mapping: 源流 -> 输出流映射
        sink: 已写头的 MediaSink（write_packet(output_index, packet) -> bool）
              past_window_end 为 True 时停止读取
        policy: 单个 packet 失败时的策略

    Returns:
        RelayStats
    """
    stats = RelayStats()
    for source_index, packet in packets:
        stats.read += 1
        output_index = mapping.get(source_index)
        if output_index is None:
            stats.discarded += 1
            continue

        try:
            written = sink.write_packet(output_index, packet)
        except PacketWriteError as e:
            if policy is PacketFailurePolicy.FAIL_FAST:
                raise
            stats.failed += 1
            if stats.failed <= MAX_LOGGED_FAILURES:
                warning(f"Dropped packet from source #{source_index}: {e}")
            elif stats.failed == MAX_LOGGED_FAILURES + 1:
                warning("Too many packet write failures; further failures are counted only")
            continue

        if written:
            stats.written += 1
        else:
            stats.discarded += 1
            if sink.past_window_end:
                debug(f"All output streams are past the time window end; stopped after {stats.read} packet(s)")
                break

    if stats.failed:
        warning(f"Relay finished with {stats.failed} failed packet(s) out of {stats.read}")
    return stats
