"""Shared plumbing of the gymless commands.

Every command gets ``--json``, ``--trace-id`` and ``--verbose`` through
``cli_command``, builds its pipeline from settings through ``CLIContext``
and reports through ``handle_cli_success`` / ``handle_cli_error``, which
return the process exit code.

JSON mode prints one envelope per command::

    {"status": "success", "trace_id": "...", "data": ..., "meta": {...}}
    {"status": "error", "trace_id": "...", "error": "...", "meta": {"exit_code": 3, ...}}
"""

from __future__ import annotations

import functools
import json
import traceback
import uuid
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import click

from ..config.settings import ConfigError, load_settings
from ..core.insights import InvalidInsightError
from ..core.time import set_default_timezone
from ..core.validation import DuplicateDateError, InvalidRecordError
from ..observability.loguru_config import configure_loguru, get_logger
from ..pipelines.analytics_pipeline import (
    AnalyticsPipeline,
    InsightNotFoundError,
    RecordNotFoundError,
    create_analytics_pipeline,
)
from ..storage.base import StoreError
from ..storage.factory import create_store

logger = get_logger("cli")


class ExitCode(IntEnum):
    """Process exit codes; scripts may rely on them."""

    SUCCESS = 0
    VALIDATION_ERROR = 2  # also click usage errors
    CONFLICT = 3  # record for the date already exists
    NOT_FOUND = 4  # no record for the date, no insight with the id
    IO_ERROR = 5  # store unreadable or unwritable
    CONFIG_ERROR = 6
    UNKNOWN_ERROR = 7


# First matching class wins.
_EXIT_CODES: tuple[tuple[type[BaseException] | tuple[type[BaseException], ...], ExitCode], ...] = (
    ((InvalidRecordError, InvalidInsightError), ExitCode.VALIDATION_ERROR),
    (DuplicateDateError, ExitCode.CONFLICT),
    ((RecordNotFoundError, InsightNotFoundError), ExitCode.NOT_FOUND),
    ((StoreError, OSError), ExitCode.IO_ERROR),
    (ConfigError, ExitCode.CONFIG_ERROR),
)


def _new_trace_id() -> str:
    return f"trace-{uuid.uuid4().hex[:12]}"


@dataclass
class CLIContext:
    """Per-invocation options shared by every command.

    Attributes
    ----------
    json_output : bool
        Print JSON envelopes instead of text
    yes : bool
        Skip confirmation prompts
    trace_id : str
        Correlation id attached to output and log records
    verbose : bool
        Debug logging and tracebacks on errors
    """

    json_output: bool = False
    yes: bool = False
    trace_id: str = field(default_factory=_new_trace_id)
    verbose: bool = False

    def __post_init__(self) -> None:
        if not self.trace_id:
            self.trace_id = _new_trace_id()

    def build_pipeline(self) -> AnalyticsPipeline:
        """Load settings, set up logging and wire the configured store."""
        settings = load_settings()
        configure_loguru(
            log_dir=settings.log_dir,
            level="DEBUG" if self.verbose else settings.log_level,
            # stderr stays quiet in --json mode unless --verbose
            enable_console=self.verbose or not self.json_output,
        )
        set_default_timezone(settings.default_timezone)

        store = create_store(settings)
        logger.debug("Using store", store=store.describe(), trace_id=self.trace_id)

        return create_analytics_pipeline(
            store,
            thresholds=settings.trend_thresholds(),
            timezone=settings.default_timezone,
            trace_id=self.trace_id,
        )

    def envelope(
        self, data: Any = None, *, error: str | None = None, meta: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """JSON document of one command result."""
        document: dict[str, Any] = {"status": "error" if error else "success", "trace_id": self.trace_id}
        if error:
            document["error"] = error
        else:
            document["data"] = data
        if meta:
            document["meta"] = meta
        return document

    def output(
        self, data: Any, status: str = "success", error: str | None = None, meta: dict[str, Any] | None = None
    ) -> None:
        """Print a result.

        In text mode ``data`` is a message or a list of lines; errors go to
        stderr. In JSON mode ``data`` must already be JSON-shaped.
        """
        if status == "error" and error is None:
            error = "Unknown error"

        if self.json_output:
            click.echo(json.dumps(self.envelope(data, error=error, meta=meta), ensure_ascii=False, indent=2))
            return

        if error:
            click.echo(f"❌ {error}", err=True)
        elif isinstance(data, list):
            click.echo("\n".join(data))
        elif data is not None:
            click.echo(data)

    def confirm(self, message: str) -> bool:
        """Ask before a destructive action; ``--yes`` answers for the user."""
        if self.yes:
            return True
        if self.json_output:
            raise click.ClickException(f"{message} Pass --yes to confirm in --json mode.")
        return click.confirm(message)


def cli_command(func):
    """Give a command the ``--json``, ``--trace-id`` and ``--verbose`` options.

    The decorated function receives a ``CLIContext`` as first argument. A
    ``yes`` keyword (from a command's own ``--yes`` flag) is moved into the
    context.
    """

    @click.option("--json", "json_output", is_flag=True, help="Print a JSON envelope instead of text")
    @click.option("--trace-id", help="Correlation id for output and logs")
    @click.option("--verbose", "-v", is_flag=True, help="Debug logging and tracebacks")
    @functools.wraps(func)
    def with_context(json_output: bool, trace_id: str | None, verbose: bool, *args: Any, **kwargs: Any) -> Any:
        ctx = CLIContext(
            json_output=json_output,
            yes=kwargs.pop("yes", False),
            trace_id=trace_id or "",
            verbose=verbose,
        )
        return func(ctx, *args, **kwargs)

    return with_context


def exit_code_for(exc: BaseException) -> ExitCode:
    """Exit code of an exception raised by a command."""
    for exc_types, code in _EXIT_CODES:
        if isinstance(exc, exc_types):
            return code
    return ExitCode.UNKNOWN_ERROR


def handle_cli_error(ctx: CLIContext, exc: Exception, cmd: str) -> int:
    """Report a failed command and return its exit code."""
    exit_code = exit_code_for(exc)
    error_type = type(exc).__name__

    logger.debug("Command failed", command=cmd, error_type=error_type, exit_code=int(exit_code), trace_id=ctx.trace_id)

    ctx.output(None, status="error", error=str(exc), meta={"exit_code": int(exit_code), "error_type": error_type})

    if ctx.verbose and not ctx.json_output:
        click.echo("\nTraceback:", err=True)
        traceback.print_exc()

    return int(exit_code)


def handle_cli_success(ctx: CLIContext, data: Any, meta: dict[str, Any] | None = None) -> int:
    """Report a successful command and return 0."""
    ctx.output(data, meta=meta)
    return int(ExitCode.SUCCESS)
