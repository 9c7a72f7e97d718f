"""
User-visible notices.
"""
import logging
from typing import Protocol

logger = logging.getLogger("notifications")

INFO = "info"
SUCCESS = "success"
ERROR = "error"

_ICONS = {
    INFO: "ℹ️",
    SUCCESS: "✅",
    ERROR: "❌",
}


class Notifier(Protocol):
    def notify(self, level: str, message: str) -> None: ...


class ConsoleNotifier:
    """Prints notices to the terminal."""

    def notify(self, level: str, message: str) -> None:
        logger.info(f"[{level}] {message}")
        print(f"{_ICONS.get(level, '•')} {message}")
