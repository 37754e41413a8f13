#!/usr/bin/env python3
"""Main CLI module for Gymless analytics."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from ..config.settings import generate_example_env
from .gymless_insights import cli as insights_cli
from .gymless_records import cli as records_cli
from .gymless_report import month_command, report_command, week_command

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
EPILOG = """
Examples:
  gymless records seed                  # Seed three sample days and four insights
  gymless records add --date 2024-03-04 --calories-consumed 2100 --workout-minutes 45
  gymless records update --date 2024-03-04 --protein 110
  gymless report                        # Weekly and monthly rollups
  gymless week --date 2024-03-06        # Rollup of one ISO week
  gymless month --month 3 --year 2024   # Rollup of one month
  gymless insights list                 # Coaching insights
  gymless insights add --type diet --title "More protein" --description "Add a protein snack"
  gymless report --json                 # Machine-readable output
""".strip()


@click.group(
    context_settings=CONTEXT_SETTINGS,
    help="Gymless People analytics: daily records and weekly/monthly rollups",
    epilog=EPILOG,
)
def cli() -> None:
    """Root CLI command."""


@cli.command("config-example")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), help="Write the template to a file")
def config_example_command(output: Path | None) -> int:
    """Print an example .env file."""
    example = generate_example_env(output)
    if output:
        click.echo(f"✅ Wrote {output}")
    else:
        click.echo(example)
    return 0


cli.add_command(records_cli, "records")
cli.add_command(insights_cli, "insights")
cli.add_command(report_command)
cli.add_command(week_command)
cli.add_command(month_command)


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    if args is None:
        args = sys.argv[1:]

    try:
        return cli.main(args=list(args), prog_name="gymless", standalone_mode=False) or 0
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except SystemExit as exc:
        return int(exc.code) if exc.code is not None else 0


if __name__ == "__main__":
    sys.exit(main())
