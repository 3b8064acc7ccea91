"""
Logging setup for the faculty roles dashboard.

- setup_logging(): one stdout handler on the root logger, plain or JSON lines
- get_logger(): a logger that tags every message with the request id and the
  dashboard component handling it, e.g. "[req:1f3a9c2e] [form] ..."

DEBUG_MODE=true turns on debug output for tagged loggers.
"""

import json
import logging
import os
import sys
from typing import Optional

_debug_mode = os.getenv("DEBUG_MODE", "false").lower() == "true"


def set_global_debug_mode(enabled: bool) -> None:
    global _debug_mode
    _debug_mode = enabled


def is_debug_mode() -> bool:
    return _debug_mode


class DashboardLogger(logging.LoggerAdapter):
    """
    Logger adapter carrying request context.

    Args:
        name: Logger name (usually __name__)
        request_id: Request identifier; only the first 8 characters are shown
        component: Dashboard component ("listings", "form", "notifications", ...)
        debug_mode: Force DEBUG level on; None follows the global setting
    """

    def __init__(
        self,
        name: str,
        request_id: Optional[str] = None,
        component: Optional[str] = None,
        debug_mode: Optional[bool] = None,
    ):
        super().__init__(logging.getLogger(name), {"request_id": request_id, "component": component})
        self.request_id = request_id
        self.component = component
        if debug_mode if debug_mode is not None else is_debug_mode():
            self.logger.setLevel(logging.DEBUG)

    @property
    def level(self) -> int:
        return self.logger.level

    def process(self, msg, kwargs):
        tags = []
        if self.request_id:
            tags.append(f"[req:{self.request_id[:8]}]")
        if self.component:
            tags.append(f"[{self.component}]")
        return (" ".join(tags + [str(msg)]), kwargs)


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record, for hosted log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(level: str = "INFO", format: str = "simple") -> None:
    """
    Replace the root logger's handlers with a single stdout handler.

    Args:
        level: DEBUG, INFO, WARNING or ERROR (unknown names fall back to INFO)
        format: "simple" or "json"
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format == "json":
        formatter: logging.Formatter = JsonLineFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)


def get_logger(
    name: str,
    request_id: Optional[str] = None,
    component: Optional[str] = None,
    debug_mode: Optional[bool] = None,
) -> DashboardLogger:
    return DashboardLogger(name, request_id, component, debug_mode)
