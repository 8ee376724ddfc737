"""
Notebook log panel fed by the ``outfile_viewer`` loggers.

Ingestion runs in library code that only talks to ``logging``; the panel
installs an :class:`HtmlLogHandler` and shows what arrives, one row per
message, coloured by severity.  Repeated messages collapse into one row with a
``(xN)`` counter and the oldest rows fall off once ``max_entries`` is reached.
"""

from __future__ import annotations

import html
import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional

import ipywidgets as w


_LEVEL_COLORS = {"error": "#b00020", "warning": "#b26a00", "info": "#222222"}


def _level_name(levelno: int) -> str:
    if levelno >= logging.ERROR:
        return "error"
    if levelno >= logging.WARNING:
        return "warning"
    return "info"


@dataclass
class LogEntry:
    level: str
    message: str
    count: int = 1

    def to_html(self) -> str:
        suffix = f" (x{self.count})" if self.count > 1 else ""
        color = _LEVEL_COLORS.get(self.level, _LEVEL_COLORS["info"])
        return (
            f"<div style='color:{color}; white-space:pre-wrap; "
            f"font-family:ui-monospace, Menlo, Consolas, monospace;'>"
            f"{html.escape(self.message + suffix)}</div>"
        )


class HtmlLog:
    """Scrollable HTML log widget; ``panel`` is what goes into the layout."""

    def __init__(self, *, title: Optional[str] = None, height_px: int = 180, max_entries: int = 1000) -> None:
        self._rows: Deque[LogEntry] = deque(maxlen=int(max_entries))
        self._height_px = int(height_px)
        self.widget = w.HTML()
        header = [w.HTML(f"<b>{html.escape(title)}</b>")] if title else []
        self.panel = w.VBox(header + [self.widget]) if header else self.widget
        self._render()

    @property
    def entries(self) -> List[LogEntry]:
        return list(self._rows)

    def clear(self) -> None:
        self._rows.clear()
        self._render()

    def write(self, levelno: int, message: str) -> None:
        level = _level_name(levelno)
        msg = str(message)
        last = self._rows[-1] if self._rows else None
        if last is not None and last.level == level and last.message == msg:
            last.count += 1
        else:
            self._rows.append(LogEntry(level, msg))
        self._render()

    def info(self, message: str) -> None:
        self.write(logging.INFO, message)

    def warning(self, message: str) -> None:
        self.write(logging.WARNING, message)

    def error(self, message: str) -> None:
        self.write(logging.ERROR, message)

    def handler(self, level: int = logging.INFO) -> "HtmlLogHandler":
        return HtmlLogHandler(self, level=level)

    def _render(self) -> None:
        body = "".join(e.to_html() for e in self._rows) or "<div style='color:#666;'>No messages yet.</div>"
        self.widget.value = (
            f"<div style='border:1px solid #ddd; padding:8px; height:{self._height_px}px; "
            f"overflow-y:auto; background:#fff;'>{body}</div>"
        )


class HtmlLogHandler(logging.Handler):
    """``logging`` handler writing formatted records into an HtmlLog."""

    def __init__(self, log: HtmlLog, level: int = logging.INFO) -> None:
        super().__init__(level=level)
        self.log = log
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.log.write(record.levelno, self.format(record))
        except Exception:
            self.handleError(record)


def attach_to_logger(log: HtmlLog, logger_name: str = "outfile_viewer", level: int = logging.INFO) -> Optional[HtmlLogHandler]:
    """
    Route ``logger_name`` (and its children) into ``log``.

    Returns the new handler, or None when ``log`` is already attached.  Handlers
    of previously built panels are removed so closed widgets stop receiving records.
    """
    lg = logging.getLogger(logger_name)
    for h in list(lg.handlers):
        if isinstance(h, HtmlLogHandler):
            if h.log is log:
                return None
            lg.removeHandler(h)
    handler = log.handler(level)
    lg.addHandler(handler)
    if lg.level == logging.NOTSET or lg.level > level:
        lg.setLevel(level)
    return handler
