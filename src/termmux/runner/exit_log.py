"""退出码日志

每次运行一个文件，路径包含运行时间戳：
    <EXIT_CODES_DIR>/<YYYYmmdd-HHMMSS.ffffff>

每条记录一行：
    Exit code for <描述左对齐 12 位> = <退出码右对齐 3 位>  # <原始命令>

写入失败只记录日志，不中断运行。
"""

from datetime import datetime
from pathlib import Path

from .. import config
from ..telemetry import get_logger, metrics

logger = get_logger(__name__)


def format_entry(description: str, exit_status: int | str, command: str) -> str:
    """格式化一条退出码记录（不含换行符）"""
    description = f"{description:<{config.EXIT_CODE_DESCRIPTION_WIDTH}}"
    status = f"{exit_status!s:>{config.EXIT_CODE_STATUS_WIDTH}}"
    return f"Exit code for {description} = {status}  # {command}"


def default_log_path(directory: Path | str | None = None, now: datetime | None = None) -> Path:
    """生成本次运行的日志路径"""
    directory = Path(directory or config.EXIT_CODES_DIR)
    now = now or datetime.now()
    return directory / now.strftime("%Y%m%d-%H%M%S.%f")


class ExitCodeLog:
    """退出码日志文件

    负责：
    - 创建目录并清空文件
    - 追加记录
    """

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path else default_log_path()

    def open(self) -> bool:
        """创建目录并截断文件

        Returns:
            是否成功
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("", encoding="utf-8")
            return True
        except OSError as e:
            logger.error(f"[ExitCodeLog] Cannot create {self.path}: {e}")
            metrics.inc("exit_log.error", {"op": "open"})
            return False

    def append(self, description: str, exit_status: int | str, command: str) -> str:
        """追加一条记录

        Returns:
            写入的记录行
        """
        entry = format_entry(description, exit_status, command)
        try:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(entry + "\n")
        except OSError as e:
            logger.error(f"[ExitCodeLog] Append failed: {e}")
            metrics.inc("exit_log.error", {"op": "append"})
        return entry
