from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

_HANDLER_NAME = "noiselab"
_FORMAT = "[%(command)s] %(levelname)s: %(message)s"

_current_command: ContextVar[str] = ContextVar("noiselab_current_command", default="noiselab")


class _CommandFilter(logging.Filter):
    """Attach a command label to each record for the prefix."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.command = getattr(record, "command", None) or _current_command.get()
        return True


def _find_handler(root: logging.Logger) -> Optional[logging.Handler]:
    for handler in root.handlers:
        if handler.get_name() == _HANDLER_NAME:
            return handler
    return None


def setup_logging(level: str | int = "WARNING", capture_warnings: bool = True) -> logging.Handler:
    """
    Install the noiselab stderr handler on the root logger.

    Handlers installed by others (pytest's caplog, an embedding application)
    are left alone; only the handler named "noiselab" is reused, so repeated
    calls change the level without stacking output. With `capture_warnings`,
    `warnings.warn` calls (numpy's among them) are routed through the same
    handler instead of printed raw.
    """
    if isinstance(level, str):
        numeric_level = _LEVELS.get(level.lower(), logging.WARNING)
    else:
        numeric_level = int(level)
    root = logging.getLogger()
    handler = _find_handler(root)
    if handler is None:
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler.addFilter(_CommandFilter())
        root.addHandler(handler)
    root.setLevel(numeric_level)
    logging.captureWarnings(capture_warnings)
    return handler


def set_command_context(command: str) -> None:
    _current_command.set(command)


@contextmanager
def command_context(command: str) -> Iterator[None]:
    """Label records with `command` inside the block, restoring the previous label after."""
    token = _current_command.set(command)
    try:
        yield
    finally:
        _current_command.reset(token)


def resolve_log_level(verbose: bool, debug: bool) -> str:
    """Derive the level name from CLI flags."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    return "WARNING"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name if name is not None else "noiselab")
