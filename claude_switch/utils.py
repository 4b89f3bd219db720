import logging
import sys
from pathlib import Path

import click


# Windows GBK terminals cannot encode the status symbols
_ASCII_FALLBACKS = {
    "✓": "[OK]",
    "✗": "[X]",
    "⚠": "[WARN]",
    "ℹ": "[i]",
    "→": "->",
}


def safe_echo(message, **kwargs):
    """在Windows GBK终端下安全输出Unicode字符"""
    try:
        click.echo(message, **kwargs)
    except UnicodeEncodeError:
        for symbol, fallback in _ASCII_FALLBACKS.items():
            message = message.replace(symbol, fallback)
        click.echo(message, **kwargs)


def colorize(text: str, color: str, stream=None) -> str:
    """为文本添加颜色（仅在支持的终端中）"""
    stream = stream or sys.stdout
    if not stream.isatty():
        return text

    colors = {
        "red": "\033[31m",
        "green": "\033[32m",
        "yellow": "\033[33m",
        "blue": "\033[34m",
        "magenta": "\033[35m",
        "cyan": "\033[36m",
        "white": "\033[37m",
        "reset": "\033[0m",
    }

    if color.lower() in colors:
        return f"{colors[color.lower()]}{text}{colors['reset']}"

    return text


def success_message(text: str) -> str:
    return colorize(f"✓ {text}", "green")


def error_message(text: str) -> str:
    return colorize(f"✗ {text}", "red")


def warning_message(text: str) -> str:
    return colorize(f"⚠ {text}", "yellow")


def info_message(text: str) -> str:
    return colorize(f"ℹ {text}", "cyan")


def get_file_permissions(file_path: Path) -> str:
    """获取文件权限字符串表示"""
    try:
        stat_info = file_path.stat()
        return oct(stat_info.st_mode)[-3:]
    except OSError:
        return "unknown"


class ClickEchoHandler(logging.Handler):
    """Send log records to stderr through click, styled like the CLI's own messages."""

    def emit(self, record: logging.LogRecord):
        try:
            text = self.format(record)
            if record.levelno >= logging.ERROR:
                text = colorize(f"✗ {text}", "red", sys.stderr)
            elif record.levelno >= logging.WARNING:
                text = colorize(f"⚠ {text}", "yellow", sys.stderr)
            safe_echo(text, err=True)
        except Exception:
            self.handleError(record)


def configure_logging(verbose: bool = False):
    root = logging.getLogger("claude_switch")
    for handler in list(root.handlers):
        if isinstance(handler, ClickEchoHandler):
            root.removeHandler(handler)

    handler = ClickEchoHandler()
    if verbose:
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(message)s"))

    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
