#!/usr/bin/env python3
"""测试 packet relay：映射、丢弃与失败策略"""
import pytest

from shorts_wizard.errors import PacketWriteError
from shorts_wizard.pipeline.processors.media.relay import (
    PacketFailurePolicy,
    RelayStats,
    relay_packets,
)
from shorts_wizard.pipeline.processors.media.select import StreamMapping


class FakePacket:
    def __init__(self, name, payload=b""):
        self.name = name
        self.payload = payload


class RecordingSink:
    """
    记录写入；fail_on 中的 packet 抛 PacketWriteError，outside 中的返回 False。
    写到 end_on 中的 packet 之后 past_window_end 变为 True。
    """

    def __init__(self, fail_on=(), outside=(), end_on=()):
        self.written = []
        self.fail_on = set(fail_on)
        self.outside = set(outside)
        self.end_on = set(end_on)
        self.past_window_end = False

    def write_packet(self, output_index, packet):
        if packet.name in self.fail_on:
            raise PacketWriteError(f"boom {packet.name}", output_index)
        if packet.name in self.end_on:
            self.past_window_end = True
        if packet.name in self.outside:
            return False
        self.written.append((output_index, packet.name, packet.payload))
        return True


def _packets(*items):
    return ((src, FakePacket(name, name.encode())) for src, name in items)


def test_mapped_packets_are_written_to_output_index():
    mapping = StreamMapping((0, None, 1))
    sink = RecordingSink()

    stats = relay_packets(_packets((0, "v1"), (1, "s1"), (2, "a1"), (0, "v2")), mapping, sink)

    assert sink.written == [(0, "v1", b"v1"), (1, "a1", b"a1"), (0, "v2", b"v2")]
    assert stats == RelayStats(read=4, written=3, discarded=1, failed=0)


def test_best_effort_counts_failures_and_continues():
    mapping = StreamMapping((0, 1))
    sink = RecordingSink(fail_on={"v2", "a1"})

    stats = relay_packets(
        _packets((0, "v1"), (1, "a1"), (0, "v2"), (0, "v3"), (1, "a2")),
        mapping,
        sink,
        PacketFailurePolicy.BEST_EFFORT,
    )

    assert [name for _, name, _ in sink.written] == ["v1", "v3", "a2"]
    assert stats.failed == 2
    assert stats.written == 3
    assert stats.read == 5


def test_fail_fast_reraises_first_failure():
    mapping = StreamMapping((0,))
    sink = RecordingSink(fail_on={"v2"})

    with pytest.raises(PacketWriteError):
        relay_packets(_packets((0, "v1"), (0, "v2"), (0, "v3")), mapping, sink,
                      PacketFailurePolicy.FAIL_FAST)
    assert [name for _, name, _ in sink.written] == ["v1"]


def test_packets_outside_window_are_discarded():
    mapping = StreamMapping((0,))
    sink = RecordingSink(outside={"v3"})

    stats = relay_packets(_packets((0, "v1"), (0, "v2"), (0, "v3")), mapping, sink)

    assert stats.written == 2
    assert stats.discarded == 1


def test_relay_stops_once_every_stream_is_past_window_end():
    mapping = StreamMapping((0, 1))
    sink = RecordingSink(outside={"v3", "a3"}, end_on={"a3"})
    packets = _packets((0, "v1"), (1, "a1"), (0, "v2"), (1, "a2"), (0, "v3"), (1, "a3"), (0, "v4"), (1, "a4"))

    stats = relay_packets(packets, mapping, sink)

    assert stats == RelayStats(read=6, written=4, discarded=2, failed=0)
    # 剩余 packet 不再读取
    assert next(packets)[1].name == "v4"


def test_window_end_does_not_stop_on_written_packets():
    mapping = StreamMapping((0,))
    sink = RecordingSink(end_on={"v1"})

    stats = relay_packets(_packets((0, "v1"), (0, "v2")), mapping, sink)

    assert stats.written == 2


def test_relay_consumes_a_single_pass_generator():
    mapping = StreamMapping((0,))
    sink = RecordingSink()
    packets = _packets((0, "v1"), (0, "v2"))

    relay_packets(packets, mapping, sink)

    assert next(packets, None) is None


def test_many_failures_do_not_abort(capsys):
    mapping = StreamMapping((0,))
    names = [f"p{i}" for i in range(50)]
    sink = RecordingSink(fail_on=set(names))

    stats = relay_packets(_packets(*[(0, n) for n in names]), mapping, sink)

    assert stats.failed == 50
    assert stats.written == 0
    err = capsys.readouterr().err
    assert "further failures are counted only" in err


def test_stats_to_dict():
    assert RelayStats(read=3, written=2, discarded=1).to_dict() == {
        "read": 3, "written": 2, "discarded": 1, "failed": 0,
    }
