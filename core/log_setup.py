"""Centralized logging setup — file + console output.

Each launch creates a new timestamped log file in ``logs/`` (e.g.
``logs/chainscout_2026-02-19_15-30-00.log``) with a ``latest.log``
symlink to it. Old logs beyond ``_MAX_LOG_FILES`` are removed.

A RedactingFilter strips API keys and wallet private keys from log
messages before they reach disk or the terminal.
"""

from __future__ import annotations

import logging
import os
import re
from datetime import datetime
from pathlib import Path

_LOG_DIR = Path("logs")
_LOG_PREFIX = "chainscout_"
_MAX_LOG_FILES = 10
_FMT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"

_configured = False

_REDACT_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"(api[_-]?key|private[_-]?key|secret|password|authorization)\s*[:=]\s*\S+", re.I),
    re.compile(r"(sk-[a-zA-Z0-9]{20,})"),
    re.compile(r"(Bearer\s+[a-zA-Z0-9._\-]+)", re.I),
    # 32-byte hex secrets (EVM private keys); 20-byte addresses are left alone
    re.compile(r"\b(0x)?[0-9a-fA-F]{64}\b"),
]

_REDACTED = "[REDACTED]"


def redact(text: str) -> str:
    for pattern in _REDACT_PATTERNS:
        text = pattern.sub(_REDACTED, text)
    return text


class RedactingFilter(logging.Filter):
    """Strip sensitive patterns from log records before output."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(redact(a) if isinstance(a, str) else a for a in record.args)
        return True


def _cleanup_old_logs(log_dir: Path) -> None:
    """Remove oldest log files when count exceeds _MAX_LOG_FILES."""
    log_files = sorted(
        (f for f in log_dir.iterdir() if f.name.startswith(_LOG_PREFIX) and f.suffix == ".log"),
        key=lambda f: f.stat().st_mtime,
    )
    while len(log_files) > _MAX_LOG_FILES:
        log_files.pop(0).unlink(missing_ok=True)


def setup_logging(*, debug: bool = False, log_dir: Path | None = None) -> None:
    """Configure the root logger with a timestamped file handler and console.

    Safe to call multiple times — subsequent calls are no-ops.
    """
    global _configured
    if _configured:
        return
    _configured = True

    log_dir = log_dir or _LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    log_file = log_dir / f"{_LOG_PREFIX}{timestamp}.log"

    latest_link = log_dir / "latest.log"
    try:
        if latest_link.is_symlink() or latest_link.exists():
            latest_link.unlink()
        os.symlink(log_file.name, latest_link)
    except OSError:
        pass  # Symlinks may not work on all platforms

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    redact_filter = RedactingFilter()
    fmt = logging.Formatter(_FMT, datefmt=_DATE_FMT)

    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(fmt)
    fh.addFilter(redact_filter)
    root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG if debug else logging.WARNING)
    ch.setFormatter(fmt)
    ch.addFilter(redact_filter)
    root.addHandler(ch)

    # litellm and httpx are chatty at INFO
    for noisy in ("LiteLLM", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    _cleanup_old_logs(log_dir)
