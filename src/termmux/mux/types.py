"""Multiplexer 数据类型

包含：
- StreamSource: 可按行读取的输出源（抽象基类）
- StreamStatus: stream 生命周期状态
- ReadOutcome: 单次限时读取的结果
- Stream: 调度器持有的单个 stream 记录
"""

import codecs
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from termmux.style.canonical import StyleState


class StreamSource(ABC):
    """输出源基类

    每个输出源负责：
    1. 按行交付合并后的 stdout/stderr 字节
    2. 结束时返回 b""（EOF）

    readline() 可能在任意 await 点被超时取消，取消后再次调用必须能继续，
    不能丢失数据。
    """

    @abstractmethod
    async def readline(self) -> bytes:
        """读取一行（含换行符）；EOF 时返回空 bytes"""


class StreamStatus(Enum):
    """Stream 状态

    - ACTIVE: 仍在轮转中
    - RETIRED: 已 EOF（或读取出错），移出轮转
    """

    ACTIVE = "active"
    RETIRED = "retired"


class ReadOutcome(Enum):
    """限时读取结果"""

    DATA = "data"
    TIMEOUT = "timeout"
    END = "end"


def _utf8_decoder() -> codecs.IncrementalDecoder:
    return codecs.getincrementaldecoder("utf-8")(errors="replace")


@dataclass
class Stream:
    """单个 stream 记录

    Attributes:
        index: 在命令列表中的位置（0 起），决定缩进深度
        source: 输出源
        indent: 缩进前缀（index × 每列缩进宽度 个空格）
        style_state: 当前生效的样式 token 序列
        status: 生命周期状态
        lines_read: 已读取的输入行数
    """

    index: int
    source: StreamSource
    indent: str = ""
    style_state: StyleState = ()
    status: StreamStatus = StreamStatus.ACTIVE
    lines_read: int = 0
    decoder: codecs.IncrementalDecoder = field(default_factory=_utf8_decoder, repr=False)

    @property
    def closed(self) -> bool:
        return self.status is StreamStatus.RETIRED

    def decode(self, data: bytes) -> str:
        """解码一行字节并去掉行尾换行符

        使用增量解码器，被截断在多字节字符中间的超长行不会产生乱码。
        """
        text = self.decoder.decode(data)
        if text.endswith("\n"):
            text = text[:-1]
            if text.endswith("\r"):
                text = text[:-1]
        return text

    def flush(self) -> str:
        """结束解码：EOF 前被截断的多字节字符以 U+FFFD 交付"""
        return self.decoder.decode(b"", final=True)

    def retire(self) -> None:
        self.status = StreamStatus.RETIRED
