"""Telemetry - 统一日志和指标入口

提供统一的日志工厂和指标 facade，便于观测性追踪。

日志格式: [module:stream#N] msg
指标示例: stream.lines, stream.timeouts, stream.retired, style.canonicalize
"""

import logging

from . import config

# 全局日志配置
_LOG_FORMAT = "[%(name)s] %(levelname)s %(message)s"


def get_logger(name: str) -> logging.Logger:
    """获取带模块前缀的 logger

    Args:
        name: 模块名（通常使用 __name__）

    Returns:
        配置好的 Logger 实例
    """
    logger = logging.getLogger(name)
    return logger


def configure_logging(level: str | None = None) -> None:
    """配置根 logger（输出到 stderr，不与列输出交错在 stdout 上）"""
    logging.basicConfig(level=(level or config.LOG_LEVEL).upper(), format=_LOG_FORMAT)


def format_stream_log(module: str, index: int, msg: str) -> str:
    """格式化带 stream 序号的日志消息

    Args:
        module: 模块名
        index: stream 序号（0 起）
        msg: 日志消息

    Returns:
        格式化的消息: [module:stream#index] msg
    """
    return f"[{module}:stream#{index}] {msg}"


def truncate_command(command: str, max_len: int | None = None) -> str:
    """截断过长的命令文本（用于日志）"""
    max_len = max_len or config.LOG_MAX_CMD_LEN
    if len(command) <= max_len:
        return command
    return command[: max_len - 3] + "..."


# 运行结束时汇总的计数器（按输出顺序）
RUN_SUMMARY_COUNTERS = (
    "stream.lines",
    "stream.chunks",
    "stream.timeouts",
    "stream.retired",
    "stream.read_errors",
    "style.canonicalize",
)

MetricKey = tuple[str, tuple[tuple[str, str], ...]]


class Metrics:
    """一次运行的内存指标

    计数器按 (name, labels) 区分；gauge 只保留最新值。
    运行结束时由 orchestrator 通过 summary() 写入日志。
    """

    def __init__(self):
        self._counters: dict[MetricKey, int] = {}
        self._gauges: dict[MetricKey, float] = {}

    @staticmethod
    def _key(name: str, labels: dict[str, str] | None) -> MetricKey:
        return name, tuple(sorted((labels or {}).items()))

    def inc(self, name: str, labels: dict[str, str] | None = None, value: int = 1) -> None:
        """递增计数器

        Args:
            name: 指标名（如 "stream.lines"）
            labels: 可选标签（如 {"op": "append"}）
            value: 递增值，默认 1
        """
        key = self._key(name, labels)
        self._counters[key] = self._counters.get(key, 0) + value

    def gauge(self, name: str, value: float, labels: dict[str, str] | None = None) -> None:
        self._gauges[self._key(name, labels)] = value

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> int:
        return self._counters.get(self._key(name, labels), 0)

    def get_gauge(self, name: str, labels: dict[str, str] | None = None) -> float:
        return self._gauges.get(self._key(name, labels), 0.0)

    def total(self, name: str) -> int:
        """某计数器在所有标签下的合计"""
        return sum(value for (key_name, _), value in self._counters.items() if key_name == name)

    def summary(self) -> str:
        """运行汇总，如 "lines=12 chunks=20 timeouts=3 ..."

        exit_log.error 只在出现过写入失败时附加。
        """
        parts = [f"{name.split('.')[-1]}={self.total(name)}" for name in RUN_SUMMARY_COUNTERS]
        errors = self.total("exit_log.error")
        if errors:
            parts.append(f"exit_log_errors={errors}")
        return " ".join(parts)

    def reset(self) -> None:
        """重置所有指标（每次运行开始及测试中使用）"""
        self._counters.clear()
        self._gauges.clear()


# 全局指标实例
metrics = Metrics()
