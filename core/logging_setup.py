"""Logging configuration for the check-in bot.

Sets up a dual-handler logging pipeline on the root logger:

1. **Console** -- :class:`SafeStreamHandler`, which survives consoles that
   cannot encode the status emoji used in log lines.
2. **File** -- :class:`CompressedRotatingFileHandler` writing to
   ``logs/checkin_bot.log`` (configurable) with gzip rotation
   (5 MiB per file, 3 backups).

Components never configure logging themselves; they accept an optional
``logger`` argument and otherwise use their module logger.

Usage::

    from core.logging_setup import setup_logging
    setup_logging("DEBUG", "logs/checkin_bot.log")
"""

import gzip
import logging
import os
import shutil
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
DEFAULT_LOG_FILE = os.path.join("logs", "checkin_bot.log")

# Libraries whose INFO output only adds noise to a run
NOISY_LOGGERS = ("aiohttp.access", "asyncio")


class CompressedRotatingFileHandler(RotatingFileHandler):
    """RotatingFileHandler that gzip-compresses rotated log files."""

    def rotation_filename(self, default_name: str) -> str:
        return f"{default_name}.gz"

    def rotate(self, source: str, dest: str) -> None:
        """Compress *source* into *dest* and remove *source*.

        Args:
            source: Path to the uncompressed log file.
            dest: Destination path for the compressed file.
        """
        with open(source, 'rb') as f_in:
            with gzip.open(dest, 'wb') as f_out:
                shutil.copyfileobj(f_in, f_out)
        os.remove(source)


class SafeStreamHandler(logging.StreamHandler):
    """StreamHandler that degrades unencodable characters.

    Consoles with a narrow code page (Windows ``cp1252``, some CI
    runners) cannot print emoji.  Instead of raising, the message is
    re-encoded with replacement characters using the stream's own
    encoding.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            stream = self.stream
            try:
                stream.write(msg + self.terminator)
            except UnicodeEncodeError:
                encoding = getattr(stream, "encoding", None) or "ascii"
                safe_msg = msg.encode(
                    encoding, errors='replace',
                ).decode(encoding)
                stream.write(safe_msg + self.terminator)
            self.flush()
        except Exception:
            self.handleError(record)


def setup_logging(
    log_level: str = "INFO", log_file: Optional[str] = None,
) -> None:
    """Configure the root logger with console and file handlers.

    Args:
        log_level: Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).
            Unknown names fall back to ``INFO``.
        log_file: Path of the rotating log file.  Defaults to
            ``logs/checkin_bot.log`` relative to the working directory.
    """
    level = getattr(logging, str(log_level).upper(), None)
    if not isinstance(level, int):
        level = logging.INFO

    log_path = log_file or DEFAULT_LOG_FILE
    log_dir = os.path.dirname(log_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    file_handler = CompressedRotatingFileHandler(
        log_path,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding='utf-8',
    )
    stream_handler = SafeStreamHandler(sys.stdout)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[file_handler, stream_handler],
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
