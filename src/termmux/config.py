"""termmux 配置

配置分为以下几类：
- 读取配置：单行读取的超时与长度上限
- 渲染配置：tab 展开宽度
- 样式配置：规范化触发阈值与迭代上限
- 进程配置：命令执行所用 shell
- 退出码日志配置
- 调试与日志配置
"""

import os

# === 读取配置 ===
READ_TIMEOUT_SECONDS = 0.2  # 单行读取等待上限（秒）
MAX_LINE_BYTES = 5000  # 单次读取的最大字节数，超长行分段交付

# === 渲染配置 ===
TAB_SIZE = 8  # 制表位间隔，tab 展开为空格后再按列宽切分

# === 样式配置 ===
CANONICALIZE_TOKEN_THRESHOLD = 12  # 累积 token 数达到该值时触发规范化
CANONICALIZE_MAX_ITERATIONS = 10  # 不动点迭代上限

# === 进程配置 ===
COMMAND_SHELL = os.environ.get("TERMMUX_SHELL", "bash")  # 命令以 [shell, "-c", cmd] 执行

# === 退出码日志配置 ===
EXIT_CODES_DIR = os.environ.get("TERMMUX_EXIT_CODES_DIR", "/tmp/multiplexer-exit-codes")
EXIT_CODE_DESCRIPTION_WIDTH = 12  # 描述字段左对齐宽度
EXIT_CODE_STATUS_WIDTH = 3  # 退出码右对齐宽度
MONITOR_DESCRIPTION = "monitor"
MONITOR_COMMAND_TEXT = "(internal command)"

# === 退出状态 ===
INTERRUPTED_EXIT_STATUS = 130  # 外部中断时进程的退出码
INTERNAL_ERROR_EXIT_STATUS = 1  # 调度器内部错误（如规范化不收敛）

# === 调试配置 ===
DEBUG_STYLES = os.environ.get("TERMMUX_DEBUG_STYLES", "0") == "1"  # 每个 chunk 后追加 repr 调试行

# === 日志配置 ===
LOG_LEVEL = os.environ.get("TERMMUX_LOG_LEVEL", "WARNING")  # 日志级别（输出到 stderr）
LOG_MAX_CMD_LEN = 120  # 命令日志截断长度
