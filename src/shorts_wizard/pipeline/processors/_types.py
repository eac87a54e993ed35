"""
Processor 返回值类型
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class ProcessorResult:
    """
    Processor 执行结果。

    - outputs: 产出的文件路径
    - data: 业务数据（例如 output_path）
    - metrics: 统计信息（例如 relay 的 packet 计数）
    """

    outputs: List[str] = field(default_factory=list)
    data: Dict[str, Any] = field(default_factory=dict)
    metrics: Dict[str, Any] = field(default_factory=dict)
