"""Logging for runetree, built on loguru.

runetree logs through the module-level loguru ``logger`` and is disabled at
import. ``enable_logging()`` attaches a sink that only receives runetree records
and returns a ``LoggingHandle`` that detaches it again.

Three verbosities are useful while growing a tree:

- ``INFO``: one record when a fit starts and one when it ends.
- ``DEBUG``: one record per node (the chosen split, or why a leaf was made).
- ``SPLIT``: one record per scored split candidate. The search is exhaustive,
  so this is ``n_rows * n_features`` records per node.

Structured fields (``rows``, ``feature``, ``threshold``, ``score``, ...) are
passed as loguru ``extra`` values and rendered after the message.

Note:
    Importing this module removes loguru's default stderr handler (ID 0) so
    that ``enable_logging()`` does not print every record twice. If handler 0
    was already removed by the application the call is a no-op.
"""

from __future__ import annotations

import contextlib
import sys
import threading
import warnings
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, Final, Literal, TextIO

from loguru import logger

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

PACKAGE_NAME: Final[str] = __name__.split(".")[0]

with contextlib.suppress(ValueError):
    logger.remove(0)

# Sits between DEBUG (10) and INFO (20)
SPLIT_LEVEL: Final[str] = "SPLIT"
SPLIT_LEVEL_NUMBER: Final[int] = 15

type LogLevel = Literal["TRACE", "DEBUG", "SPLIT", "INFO", "WARNING", "ERROR", "CRITICAL"]
type LogFormat = Literal["short", "full"]
type LogSink = TextIO | str | Path

_TIME_AND_LEVEL: Final[str] = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <7}</level> | "  # noqa: RUF027 - loguru format string
)
_FORMATS: Final[dict[str, str]] = {
    "short": _TIME_AND_LEVEL + "<level>{message}</level> <dim>{extra}</dim>",
    "full": (
        _TIME_AND_LEVEL
        + "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level> <dim>{extra}</dim>"
    ),
}


def _register_split_level() -> None:
    """Add the SPLIT level to loguru unless it is already there.

    loguru cannot renumber an existing level, so a clash with another
    package's SPLIT level only produces a warning.
    """
    try:
        existing = logger.level(SPLIT_LEVEL)
    except ValueError:
        logger.level(SPLIT_LEVEL, no=SPLIT_LEVEL_NUMBER, color="<magenta>", icon="🌿")
        return
    if existing.no != SPLIT_LEVEL_NUMBER:
        warnings.warn(
            f"Log level {SPLIT_LEVEL} is already registered as {existing.no}, expected {SPLIT_LEVEL_NUMBER}",
            stacklevel=2,
        )


_register_split_level()


class LoggingHandle:
    """An attached runetree log sink.

    Handles are independent: each one owns a single loguru handler. The
    ``runetree`` logger stays enabled while any handle is active and is
    disabled again when the last one is released.

    Attributes:
        handler_id (int | None): loguru handler ID, or None once disabled.
        level (str): Minimum level the sink receives.

    Examples:
        >>> with enable_logging(level="DEBUG"):  # doctest: +SKIP
        ...     model = DecisionTreeClassifier().fit(x, y)
    """

    _active_ids: ClassVar[set[int]] = set()
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, handler_id: int, level: str = "INFO") -> None:
        self.handler_id: int | None = handler_id
        self.level = level
        with LoggingHandle._lock:
            LoggingHandle._active_ids.add(handler_id)

    def __repr__(self) -> str:
        state = "disabled" if self.handler_id is None else f"handler_id={self.handler_id}"
        return f"LoggingHandle({state}, level={self.level!r})"

    @property
    def active(self) -> bool:
        """Whether the sink is still attached."""
        return self.handler_id is not None

    def disable(self) -> None:
        """Detach the sink. Calling this more than once is harmless."""
        with LoggingHandle._lock:
            if self.handler_id is None:
                return
            LoggingHandle._active_ids.discard(self.handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.handler_id)
            self.handler_id = None
            if not LoggingHandle._active_ids:
                logger.disable(PACKAGE_NAME)

    def __enter__(self) -> LoggingHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.disable()

    @classmethod
    def get_active_handle_count(cls) -> int:
        """Return how many handles are currently attached.

        Returns:
            int: Number of handles not yet disabled.
        """
        with cls._lock:
            return len(cls._active_ids)


def enable_logging(
    *,
    level: LogLevel = "INFO",
    log_format: LogFormat = "short",
    sink: LogSink | None = None,
) -> LoggingHandle:
    """Send runetree log records to a sink.

    Args:
        level (LogLevel): Minimum level to emit. Defaults to "INFO". Use
            "DEBUG" to follow node decisions and "SPLIT" to see every scored
            candidate.
        log_format (LogFormat): "short" (default) prints time, level, message
            and extra fields; "full" also prints module:function:line.
        sink (LogSink | None): Stream or file path to write to. Defaults to
            ``sys.stderr``.

    Returns:
        LoggingHandle: Handle that detaches the sink when disabled or when
            used as a context manager.

    Note:
        Disabling the last handle calls ``logger.disable("runetree")``, which
        also silences any runetree handler the application added itself.
    """
    logger.enable(PACKAGE_NAME)
    handler_id = logger.add(
        sys.stderr if sink is None else sink,
        level=level,
        filter=_is_runetree_record,
        format=_FORMATS[log_format],
    )
    return LoggingHandle(handler_id, level=level)


def _is_runetree_record(record: Record) -> bool:
    """Pass only records emitted from runetree modules.

    Args:
        record (Record): The loguru record.

    Returns:
        bool: True for runetree records.
    """
    name = record["name"]
    return name is not None and name.startswith(PACKAGE_NAME)
