"""Structured logging: console plus a JSON-lines event log."""

import json
import logging
import os
import sys
import threading
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from calamar.core.config import config


def _format_duration(seconds: float) -> str:
    if seconds < 0:
        return "0s"
    if seconds >= 1:
        return f"{seconds:.1f}s"
    if seconds > 0:
        return f"{seconds * 1000:.0f}ms"
    return "0s"


def _use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    try:
        return sys.stdout.isatty()
    except Exception:
        return False


def _c(role: str) -> str:
    if not _use_color():
        return ""
    codes = {
        "dim": "\033[38;5;239m",
        "kind": "\033[38;5;81m",  # cyan for entity kinds
        "ok": "\033[38;5;78m",
        "fail": "\033[38;5;203m",
        "duration": "\033[38;5;221m",
    }
    return codes.get(role, "")


def _reset() -> str:
    if not _use_color():
        return ""
    return "\033[0m"


@dataclass
class LogEvent:
    event_type: str
    timestamp: str
    data: dict[str, Any]

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class CalamarLogger:
    def __init__(self):
        config.logs_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = config.logs_dir / "search.log"
        self._file_lock = threading.Lock()
        self._log_file_handle = open(self.log_file, "a", encoding="utf-8")
        self._setup_console_logger()

    def _setup_console_logger(self):
        self.console = logging.getLogger("calamar")
        self.console.setLevel(logging.DEBUG)
        self._console_formatter = logging.Formatter(
            "%(asctime)s │ %(message)s", datefmt="%H:%M:%S"
        )
        if not self.console.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(logging.INFO)
            handler.setFormatter(self._console_formatter)
            self.console.addHandler(handler)
        # httpx logs every request at INFO
        logging.getLogger("httpx").setLevel(logging.WARNING)

    def log_event(self, event: LogEvent) -> None:
        with self._file_lock:
            self._log_file_handle.write(event.to_json() + "\n")
            self._log_file_handle.flush()

    def _timestamp(self) -> str:
        return datetime.now().isoformat()

    def search_started(self, query: str, networks: list[str]):
        self.log_event(
            LogEvent(
                event_type="SEARCH_STARTED",
                timestamp=self._timestamp(),
                data={"query": query, "networks": networks},
            )
        )
        self.console.info(
            f"🔎 Search {query!r} on {', '.join(networks) or '(no networks)'}"
        )

    def kind_settled(
        self,
        kind: str,
        total_count: int,
        duration_seconds: float,
        failed_networks: list[str] | None = None,
        error: str | None = None,
    ):
        self.log_event(
            LogEvent(
                event_type="KIND_SETTLED",
                timestamp=self._timestamp(),
                data={
                    "kind": kind,
                    "total_count": total_count,
                    "duration_seconds": round(duration_seconds, 3),
                    "failed_networks": failed_networks or [],
                    "error": error,
                },
            )
        )
        status = (
            f"{_c('fail')}[failed]{_reset()}"
            if error
            else f"{_c('ok')}[{total_count}]{_reset()}"
        )
        degraded = f" (down: {', '.join(failed_networks)})" if failed_networks else ""
        self.console.info(
            f"  │ {_c('kind')}{kind}{_reset()} {status} "
            f"{_c('duration')}{_format_duration(duration_seconds)}{_reset()}{degraded}"
        )

    def search_settled(self, query: str, total_count: int, redirect: str | None = None):
        self.log_event(
            LogEvent(
                event_type="SEARCH_SETTLED",
                timestamp=self._timestamp(),
                data={"query": query, "total_count": total_count, "redirect": redirect},
            )
        )
        suffix = f" → {redirect}" if redirect else ""
        self.console.info(f"✓ {query!r}: {total_count} result(s){suffix}")

    def error(self, message: str, *args, exception: Exception | None = None, **kwargs):
        event = LogEvent(
            event_type="ERROR",
            timestamp=self._timestamp(),
            data={
                "message": message,
                "exception": str(exception) if exception else None,
            },
        )
        self.log_event(event)

        # Filter kwargs for standard logger
        allowed = {"exc_info", "stack_info", "stacklevel", "extra"}
        log_kwargs = {k: v for k, v in kwargs.items() if k in allowed}
        if exception and "exc_info" not in log_kwargs:
            log_kwargs["exc_info"] = exception

        self.console.error(f"❌ Error: {message}", *args, **log_kwargs)

    def info(self, message: str, *args, **kwargs):
        allowed = {"exc_info", "stack_info", "stacklevel", "extra"}
        log_kwargs = {k: v for k, v in kwargs.items() if k in allowed}
        self.console.info(message, *args, **log_kwargs)

    def warning(self, message: str, *args, **kwargs):
        event = LogEvent(
            event_type="WARNING",
            timestamp=self._timestamp(),
            data={"message": message[:500]},
        )
        self.log_event(event)

        allowed = {"exc_info", "stack_info", "stacklevel", "extra"}
        log_kwargs = {k: v for k, v in kwargs.items() if k in allowed}
        self.console.warning(f"⚠️ {message}", *args, **log_kwargs)

    def debug(self, message: str, *args, **kwargs):
        allowed = {"exc_info", "stack_info", "stacklevel", "extra"}
        log_kwargs = {k: v for k, v in kwargs.items() if k in allowed}
        self.console.debug(message, *args, **log_kwargs)


logger = CalamarLogger()
