"""Pytest 配置"""

import asyncio

import pytest

from termmux.mux.types import StreamSource
from termmux.telemetry import metrics

# ScriptedSource 中表示"本次读取一直阻塞"的占位
BLOCK = None


class ScriptedSource(StreamSource):
    """按脚本交付数据的输出源

    脚本项：
    - bytes: 作为一行返回
    - BLOCK: 本次读取永久阻塞（由调度器超时取消）
    - Exception 实例: 本次读取抛出该异常
    脚本耗尽后返回 b""（EOF）。
    """

    def __init__(self, items):
        self.items = list(items)
        self.calls = 0

    async def readline(self) -> bytes:
        self.calls += 1
        if not self.items:
            return b""
        item = self.items.pop(0)
        if item is BLOCK:
            await asyncio.Event().wait()
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def scripted_source():
    """ScriptedSource 工厂"""
    return ScriptedSource


@pytest.fixture(autouse=True)
def reset_metrics():
    """每次测试前重置指标"""
    metrics.reset()
    yield
    metrics.reset()
