"""
Logging Setup

Root logger configuration for the CLI and embedding applications. Library
modules only create module loggers; handlers are installed here.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO, Union

from ..config.models import LogLevel

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that are chatty at DEBUG level
QUIET_LOGGERS = ("numexpr", "openpyxl")


def _rotate_log_file(log_file: Path) -> Optional[Path]:
    """
    Move a log file left by a previous run out of the way.

    model.log becomes model_20250101_120000.log. Returns the new path, or
    None when there was nothing to move or the move failed.
    """
    if not log_file.exists():
        return None

    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    target = log_file.with_name(f"{log_file.stem}_{stamp}{log_file.suffix}")
    try:
        log_file.rename(target)
    except OSError as e:
        # File logging is not configured yet
        print(f"Warning: could not rotate log file {log_file}: {e}", file=sys.stderr)
        return None
    return target


class UTF8StreamHandler(logging.StreamHandler):
    """
    Stream handler writing UTF-8 regardless of the console encoding.

    Utterances and entity texts arrive in any language, so records go as
    UTF-8 bytes to the underlying buffer when the stream has one.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        super().__init__(stream if stream is not None else sys.stderr)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record) + self.terminator
            buffer = getattr(self.stream, "buffer", None)
            if buffer is None:
                self.stream.write(line)
                self.stream.flush()
                return
            buffer.write(line.encode("utf-8"))
            buffer.flush()
        except Exception:
            self.handleError(record)


def setup_logging(
    level: Union[LogLevel, str] = LogLevel.INFO,
    log_file: Optional[Path] = None,
    enable_console: bool = True
) -> None:
    """
    Configure the root logger.

    Args:
        level: Logging level, enum member or its name
        log_file: Optional log file; an existing one is rotated first
        enable_console: Log to stderr, leaving stdout to command output
    """
    level = LogLevel(level)
    root = logging.getLogger()
    root.setLevel(level.value)
    root.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)
    handlers = []
    if enable_console:
        handlers.append(UTF8StreamHandler(sys.stderr))
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        rotated = _rotate_log_file(log_file)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    else:
        rotated = None

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    if level != LogLevel.DEBUG:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    if rotated:
        logging.getLogger(__name__).info(f"Rotated previous log file to: {rotated}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance"""
    return logging.getLogger(name)
