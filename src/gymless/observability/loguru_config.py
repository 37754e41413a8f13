"""Loguru setup for Gymless.

Every log record carries a ``component`` (store, pipeline, cli) in its extra
fields. The console shows records on stderr; when a log directory is
configured, records are also serialized to ``gymless.jsonl`` and to one
``<component>.jsonl`` file per component.
"""

from __future__ import annotations

import functools
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterator, TypeVar

from loguru import logger

if TYPE_CHECKING:
    from loguru import Record

__all__ = [
    "COMPONENTS",
    "configure_loguru",
    "get_logger",
    "log_timing",
    "timing_context",
]

F = TypeVar("F", bound=Callable[..., Any])

COMPONENTS = ("store", "pipeline", "cli")

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> "
    "<level>{level: <7}</level> "
    "<cyan>[{extra[component]}]</cyan> "
    "{message}"
)


def _has_component(record: Record) -> bool:
    return "component" in record["extra"]


def _component_filter(component: str) -> Callable[[Record], bool]:
    def accept(record: Record) -> bool:
        return record["extra"].get("component") == component

    return accept


def _add_jsonl_sink(
    path: Path,
    *,
    level: str,
    rotation: str,
    retention: str,
    record_filter: Callable[[Record], bool] | None = None,
) -> None:
    logger.add(
        path,
        format="{message}",
        serialize=True,
        level=level,
        rotation=rotation,
        retention=retention,
        filter=record_filter,
    )


def configure_loguru(
    *,
    log_dir: Path | None = None,
    level: str = "INFO",
    rotation: str = "10 MB",
    retention: str = "10 days",
    enable_console: bool = True,
) -> None:
    """Replace every loguru sink with the Gymless sinks.

    Parameters
    ----------
    log_dir
        Directory for JSONL files; console only when None
    level
        Minimum level for every sink
    rotation, retention
        Loguru rotation and retention policies of the JSONL files
    enable_console
        Write records to stderr (the CLI turns this off in --json mode)
    """
    logger.remove()

    if enable_console:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True, filter=_has_component)

    if log_dir is None:
        return

    log_dir.mkdir(parents=True, exist_ok=True)
    sink_options = {"level": level, "rotation": rotation, "retention": retention}

    _add_jsonl_sink(log_dir / "gymless.jsonl", **sink_options)
    for component in COMPONENTS:
        _add_jsonl_sink(log_dir / f"{component}.jsonl", record_filter=_component_filter(component), **sink_options)

    get_logger("cli").debug("Log files enabled", log_dir=str(log_dir), level=level)


def get_logger(component: str = "gymless") -> Any:
    """Logger bound to a component name."""
    return logger.bind(component=component)


@contextmanager
def timing_context(
    operation: str,
    *,
    component: str = "gymless",
    trace_id: str | None = None,
    **metadata: Any,
) -> Iterator[dict[str, Any]]:
    """Log START/END debug records around a block, with its duration.

    The yielded dict collects results of the block; its entries are added to
    the END record. The END record is written even when the block raises.

    Example
    -------
    >>> with timing_context("report", component="pipeline") as ctx:
    ...     ctx["weeks"] = len(aggregate(records).weekly)
    """
    timed = logger.bind(component=component, operation=operation, trace_id=trace_id, timing=True)
    results: dict[str, Any] = {}

    timed.debug(f"START: {operation}", phase="start", **metadata)
    started = time.perf_counter()
    try:
        yield results
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000
        timed.debug(f"END: {operation}", phase="end", duration_ms=elapsed_ms, **{**metadata, **results})


def _trace_id_of(args: tuple[Any, ...], kwargs: dict[str, Any]) -> str | None:
    if kwargs.get("trace_id"):
        return kwargs["trace_id"]
    if args:
        return getattr(args[0], "trace_id", None)
    return None


def log_timing(component: str = "gymless") -> Callable[[F], F]:
    """Decorate a function so each call runs inside ``timing_context``.

    The trace id is taken from a ``trace_id`` keyword argument or from the
    ``trace_id`` attribute of the first argument (``self``).
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def timed_call(*args: Any, **kwargs: Any) -> Any:
            with timing_context(func.__qualname__, component=component, trace_id=_trace_id_of(args, kwargs)):
                return func(*args, **kwargs)

        return timed_call  # type: ignore[return-value]

    return decorator
