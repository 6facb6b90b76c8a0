"""
Logging setup and small log-formatting helpers for Daylist.

Only entrypoints call configure_logging(); every other module just does
``logger = logging.getLogger(__name__)``. Each record carries a ``run_id``
attribute so lines from one CLI invocation can be grepped out of a shared
log file.
"""
import logging
import os
import sys
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Union

_logging_configured = False
_run_id: Optional[str] = None

# Attribute marking handlers owned by configure_logging()
_HANDLER_TAG = "_daylist_handler"

LEVEL_CHOICES = ("DEBUG", "INFO", "WARNING", "ERROR")

_SHORT_FORMAT = "%(asctime)s | %(levelname)-5s | %(name)s | %(message)s"
_SHORT_FORMAT_RUN = "%(asctime)s | %(levelname)-5s | %(name)s | run_id=%(run_id)s | %(message)s"
_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-5s | %(name)s | %(funcName)s:%(lineno)d "
    "| run_id=%(run_id)s | %(message)s"
)


class RunIdFilter(logging.Filter):
    """Stamp the current run id on each record ("-" outside a run)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _run_id or "-"
        return True


def set_run_id(run_id: Optional[str]) -> None:
    global _run_id
    _run_id = run_id


def get_run_id() -> Optional[str]:
    return _run_id


def new_run_id() -> str:
    """Eight hex characters, unique enough to tell runs apart in a log."""
    return uuid.uuid4().hex[:8]


def _level_value(name: str, fallback: int) -> int:
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else fallback


def _tagged(handler: logging.Handler, level: int, fmt: str, datefmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    handler.addFilter(RunIdFilter())
    setattr(handler, _HANDLER_TAG, True)
    return handler


def _drop_own_handlers(root: logging.Logger) -> None:
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            root.removeHandler(handler)
            handler.close()


def configure_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    file_level: str = "DEBUG",
    force: bool = False,
    run_id: Optional[str] = None,
    console: bool = True,
    show_run_id: bool = False,
) -> None:
    """
    Install the stdout and optional file handlers on the root logger.

    Only the first call takes effect unless ``force`` is set. A forced call
    replaces the handlers a previous call installed and leaves any others
    (pytest's caplog, for instance) alone.

    Args:
        level: Console level name; the ``LOG_LEVEL`` env var wins over it
        log_file: File to append to; falls back to the ``LOG_FILE`` env var
        file_level: Level for the file handler
        force: Reconfigure even after an earlier call
        run_id: Run identifier stamped on records
        console: Install the stdout handler
        show_run_id: Put the run id on console lines (implied at DEBUG)
    """
    global _logging_configured

    if run_id:
        set_run_id(run_id)
    if _logging_configured and not force:
        return

    console_level = os.getenv("LOG_LEVEL", level).upper()
    log_file = log_file if log_file is not None else os.getenv("LOG_FILE")

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    _drop_own_handlers(root)
    if not any(isinstance(f, RunIdFilter) for f in root.filters):
        root.addFilter(RunIdFilter())

    if console:
        fmt = _SHORT_FORMAT_RUN if (show_run_id or console_level == "DEBUG") else _SHORT_FORMAT
        root.addHandler(_tagged(
            logging.StreamHandler(sys.stdout),
            _level_value(console_level, logging.INFO),
            fmt,
            "%H:%M:%S",
        ))

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        root.addHandler(_tagged(
            logging.FileHandler(path, encoding="utf-8"),
            _level_value(file_level, logging.DEBUG),
            _FILE_FORMAT,
            "%Y-%m-%d %H:%M:%S",
        ))

    _logging_configured = True
    logging.getLogger(__name__).debug(
        "Logging ready: console=%s file=%s run_id=%s",
        console_level if console else "off",
        log_file or "none",
        _run_id or "-",
    )


def format_elapsed(seconds: float) -> str:
    """Render seconds as e.g. "350ms", "4.2s" or "3m 05s"."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, rest = divmod(int(round(seconds)), 60)
    return f"{minutes}m {rest:02d}s"


@contextmanager
def stage_timer(stage_name: str, logger: Optional[logging.Logger] = None) -> Iterator[None]:
    """
    Log the start and duration of a block at DEBUG.

    The completion line is written even when the block raises.
    """
    log = logger or logging.getLogger(__name__)
    log.debug("%s starting...", stage_name)
    started = time.perf_counter()
    try:
        yield
    finally:
        log.debug("%s completed in %s", stage_name, format_elapsed(time.perf_counter() - started))


def format_count(n: int, singular: str, plural: Optional[str] = None) -> str:
    """Render e.g. "1 track", "0 tracks" or "1,200 tracks"."""
    word = singular if n == 1 else (plural or f"{singular}s")
    return f"{n:,} {word}"


def truncate_list(items: Sequence[Any], max_items: int = 3, format_fn: Callable[[Any], str] = str) -> str:
    """Comma-join the first ``max_items`` entries, e.g. "rock, pop, jazz (+5 more)"."""
    if not items:
        return "(none)"
    shown = ", ".join(format_fn(item) for item in items[:max_items])
    hidden = len(items) - max_items
    return f"{shown} (+{hidden} more)" if hidden > 0 else shown


def add_logging_args(parser) -> None:
    """Attach --log-level/--debug/--quiet/--log-file/--show-run-id to an argparse parser."""
    group = parser.add_argument_group("logging")
    group.add_argument("--log-level", choices=LEVEL_CHOICES, default="INFO",
                       help="Console log level (default: INFO)")
    group.add_argument("--debug", action="store_true", help="Same as --log-level DEBUG")
    group.add_argument("--quiet", action="store_true", help="Same as --log-level WARNING")
    group.add_argument("--log-file", metavar="PATH", help="Also write a detailed log to PATH")
    group.add_argument("--show-run-id", action="store_true", help="Show the run id on console lines")


def resolve_log_level(args) -> str:
    """--debug beats --quiet, which beats --log-level."""
    if getattr(args, "debug", False):
        return "DEBUG"
    if getattr(args, "quiet", False):
        return "WARNING"
    return getattr(args, "log_level", "INFO")


MetricValue = Union[int, float, str]


class RunSummary:
    """
    Counters collected during a run and logged as one block at the end.

    Keys are rendered title-cased ("tracks_loaded" -> "Tracks Loaded"),
    floats with two decimals.
    """

    def __init__(self, title: str, logger: Optional[logging.Logger] = None):
        self.title = title
        self.logger = logger or logging.getLogger(__name__)
        self.metrics: Dict[str, MetricValue] = {}
        self._elapsed: Optional[float] = None
        self._started = time.perf_counter()

    def add(self, key: str, value: MetricValue) -> None:
        self.metrics[key] = value

    def increment(self, key: str, amount: int = 1) -> None:
        self.metrics[key] = self.metrics.get(key, 0) + amount

    def get(self, key: str, default: MetricValue = 0) -> MetricValue:
        return self.metrics.get(key, default)

    def set_timing(self, seconds: float) -> None:
        """Report ``seconds`` instead of the time since construction."""
        self._elapsed = seconds

    def lines(self) -> List[str]:
        elapsed = self._elapsed if self._elapsed is not None else time.perf_counter() - self._started
        body = [
            f"  {key.replace('_', ' ').title()}: {value:.2f}" if isinstance(value, float)
            else f"  {key.replace('_', ' ').title()}: {value}"
            for key, value in self.metrics.items()
        ]
        rule = "=" * 60
        return [rule, f"{self.title.upper()} SUMMARY", *body, f"  Total Time: {format_elapsed(elapsed)}", rule]

    def log(self, level: int = logging.INFO) -> None:
        for line in self.lines():
            self.logger.log(level, line)
