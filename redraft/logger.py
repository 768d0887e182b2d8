"""
Diagnostics logger — a file logger that stays silent unless debug mode is on.

stdout carries protocol responses, so nothing here ever writes to it.
"""

import logging
import os
import sys

MAX_CONTENT_SIZE = 5000


def setup_logger(log_file: str | None = None, enabled: bool = False) -> logging.Logger:
    """Attach a file handler to the ``redraft`` logger when debugging.

    Safe to call more than once; previously attached file handlers are
    replaced.
    """
    logger = logging.getLogger("redraft")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()

    if not enabled or not log_file:
        return logger

    try:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, mode=0o700, exist_ok=True)
        if not os.path.exists(log_file):
            fd = os.open(log_file, os.O_CREAT | os.O_WRONLY, 0o600)
            os.close(fd)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(
            "[%(asctime)s] [%(levelname)s] [py:%(module)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logger.addHandler(fh)
    except OSError as e:
        print(f"[nvim-redraft] Failed to initialize log file: {e}", file=sys.stderr)

    return logger


def truncate_content(content: str, limit: int = MAX_CONTENT_SIZE) -> str:
    if limit == 0 or len(content) <= limit:
        return content
    remaining = len(content) - limit
    return f"{content[:limit]}\n... (truncated, {remaining} more chars)"


def log_content(level: int, message: str, content: str | None = None) -> None:
    """Log *message*, followed by an indented, truncated copy of *content*."""
    if not log.isEnabledFor(level):
        return
    if content:
        body = "\n".join(f"  {line}" for line in truncate_content(content).split("\n"))
        message = f"{message}\n{body}"
    log.log(level, message, stacklevel=2)


# Global logger instance; handlers are attached by the server at start-up.
log = logging.getLogger("redraft")
log.addHandler(logging.NullHandler())
