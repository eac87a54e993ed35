"""
流选择：按谓词过滤源流并分配稳定的输出序号

输出序号按源流出现顺序递增分配，未匹配的流映射为 None（静默丢弃）。
映射一经构建不再重排。
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Optional, Tuple

from .demux import StreamInfo

StreamPredicate = Callable[[StreamInfo], bool]


@dataclass(frozen=True)
class StreamMapping:
    """source index -> output index | None"""

    table: Tuple[Optional[int], ...]

    def get(self, source_index: int) -> Optional[int]:
        if 0 <= source_index < len(self.table):
            return self.table[source_index]
        return None

    def __getitem__(self, source_index: int) -> Optional[int]:
        return self.get(source_index)

    @property
    def output_count(self) -> int:
        return sum(1 for out in self.table if out is not None)

    def mapped(self) -> Iterator[Tuple[int, int]]:
        """按输出顺序产出 (source_index, output_index)。"""
        for source_index, out in enumerate(self.table):
            if out is not None:
                yield source_index, out


def select_streams(streams: Iterable[StreamInfo], predicate: StreamPredicate) -> StreamMapping:
    table = []
    next_output = 0
    for position, stream in enumerate(streams):
        if stream.index != position:
            raise ValueError(f"Streams must be in container order: got #{stream.index} at position {position}")
        if predicate(stream):
            table.append(next_output)
            next_output += 1
        else:
            table.append(None)
    return StreamMapping(tuple(table))


def media_predicate(*media: str) -> StreamPredicate:
    """匹配指定 medium 的流，例如 media_predicate("video", "audio")。"""
    wanted = frozenset(media)
    return lambda stream: stream.medium in wanted


def index_predicate(index: int) -> StreamPredicate:
    """只匹配单个源流（用于 best audio stream）。"""
    return lambda stream: stream.index == index
