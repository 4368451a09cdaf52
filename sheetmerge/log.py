"""
sheetmerge/log.py — Logging setup and the ordered merge trace.

The merge trace (MergeLog) is what callers see: an ordered list of
human-readable lines carried in MergeResult.logs. Every line is mirrored to a
stdlib logger so the same decisions show up in application logs.
"""
from __future__ import annotations

import logging
import os
import sys
from typing import List, Optional


_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Install a console handler on the package logger (once)."""
    name = (level or os.getenv("SHEETMERGE_LOG_LEVEL") or "INFO").upper()
    root = logging.getLogger("sheetmerge")
    root.setLevel(getattr(logging, name, logging.INFO))
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class MergeLog:
    """
    Ordered trace of every decision taken during one merge call.

    Warnings are prefixed "Warning:" and errors "Error:" so the trace stays
    readable as plain text.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.lines: List[str] = []
        self._logger = logger or logging.getLogger("sheetmerge.merge")

    def info(self, line: str) -> None:
        self.lines.append(line)
        self._logger.info(line.strip())

    def warning(self, line: str, indent: str = "") -> None:
        text = f"{indent}Warning: {line}"
        self.lines.append(text)
        self._logger.warning(text.strip())

    def error(self, line: str, indent: str = "") -> None:
        text = f"{indent}Error: {line}"
        self.lines.append(text)
        self._logger.error(text.strip())

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self):
        return iter(self.lines)
