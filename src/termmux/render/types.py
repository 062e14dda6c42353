"""Render 数据类型

Line Wrapper 与调度器之间传递的数据类型。
"""

from dataclasses import dataclass, field

from termmux.style.canonical import StyleState
from termmux.style.tokens import RESET_SEQUENCE, SGR_PATTERN, serialize


@dataclass(frozen=True)
class Chunk:
    """一行输入被切分后的定宽片段

    Attributes:
        indent: 列缩进（前导空格）
        prefix: 进入该片段时生效的样式（片段开头要重放的 token）
        raw_text: 片段原文，包含其中的转义序列
        visible_text: 去除转义序列后的可见字符
        state_after: 片段结束后携带给下一片段的样式
        reset_at_end: 是否在片段末尾追加 reset，避免样式渗出到下一行
    """

    indent: str
    prefix: StyleState
    raw_text: str
    visible_text: str
    state_after: StyleState
    reset_at_end: bool = True

    @property
    def is_styled(self) -> bool:
        """片段开头有样式前缀，或片段内含 SGR 代码"""
        return bool(self.prefix) or SGR_PATTERN.search(self.raw_text) is not None

    def render(self) -> str:
        """渲染为终端输出行（不含换行符）"""
        text = f"{self.indent}{serialize(self.prefix)}{self.raw_text}"
        if self.reset_at_end and self.is_styled:
            text += RESET_SEQUENCE
        return text

    def render_debug(self) -> str:
        """调试行：样式前缀 + 原文的 repr"""
        return f"{self.indent}{serialize(self.prefix)}{self.raw_text!r}{RESET_SEQUENCE}"


@dataclass
class WrapResult:
    """一行输入的切分结果"""

    chunks: list[Chunk] = field(default_factory=list)
    style_state: StyleState = ()

    @property
    def lines_written(self) -> int:
        return len(self.chunks)
