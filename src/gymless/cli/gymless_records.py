#!/usr/bin/env python3
"""CLI commands for managing daily records."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import click

from ..core.records import DailyRecord
from .cli_common import CLIContext, cli_command, handle_cli_error, handle_cli_success

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

DATE_TYPE = click.DateTime(formats=["%Y-%m-%d"])

# (option, attribute, click type, help)
METRIC_OPTIONS: tuple[tuple[str, str, Any, str], ...] = (
    ("--calories-consumed", "calories_consumed", float, "Calories consumed (kcal)"),
    ("--calories-burned", "calories_burned", float, "Calories burned (kcal)"),
    ("--protein", "protein_grams", float, "Protein (g)"),
    ("--carbs", "carbs_grams", float, "Carbs (g)"),
    ("--fat", "fat_grams", float, "Fat (g)"),
    ("--water", "water_liters", float, "Water (L)"),
    ("--workout-minutes", "workout_duration_minutes", int, "Workout duration (min, 0 = rest day)"),
    ("--meals-tracked", "meals_tracked", int, "Meals tracked"),
    ("--meals-skipped", "meals_skipped", int, "Meals skipped"),
    ("--steps", "steps", int, "Step count"),
    ("--workout-type", "workout_type", str, "Workout label (e.g., Strength Training)"),
)


def metric_options(func):
    """Add one optional option per record metric."""
    for option, attr, option_type, help_text in reversed(METRIC_OPTIONS):
        func = click.option(option, attr, type=option_type, default=None, help=help_text)(func)
    return func


def _metric_values(kwargs: dict[str, Any]) -> dict[str, Any]:
    return {attr: kwargs[attr] for _, attr, _, _ in METRIC_OPTIONS if kwargs.get(attr) is not None}


def format_record(record: DailyRecord) -> str:
    workout = f"{record.workout_duration_minutes} min" if record.has_workout else "rest"
    if record.workout_type and record.has_workout:
        workout = f"{workout} {record.workout_type}"
    return (
        f"  {record.date.isoformat()}  {record.calories_consumed:.0f}/{record.calories_burned:.0f} kcal  "
        f"P{record.protein_grams:.0f} C{record.carbs_grams:.0f} F{record.fat_grams:.0f}  "
        f"{record.water_liters:.1f} L  {workout}  "
        f"meals {record.meals_tracked}/{record.meals_tracked + record.meals_skipped}"
    )


@click.group(context_settings=CONTEXT_SETTINGS, help="Manage daily records")
def cli() -> None:
    """Root command for daily records."""


@cli.command("list")
@cli_command
def list_command(ctx: CLIContext) -> int:
    """List stored daily records."""
    try:
        records = ctx.build_pipeline().list_daily_records()
    except Exception as exc:
        return handle_cli_error(ctx, exc, "records.list")

    if ctx.json_output:
        return handle_cli_success(ctx, [r.to_dict() for r in records], meta={"count": len(records)})
    if not records:
        return handle_cli_success(ctx, "ℹ️  No daily records yet")
    return handle_cli_success(ctx, [f"📋 {len(records)} daily records", *map(format_record, records)])


@cli.command("add")
@click.option("--date", "day", type=DATE_TYPE, required=True, help="Record date (YYYY-MM-DD)")
@metric_options
@cli_command
def add_command(ctx: CLIContext, day: datetime, **kwargs: Any) -> int:
    """Add the record of a new date (missing metrics default to 0)."""
    try:
        pipeline = ctx.build_pipeline()
        record = pipeline.add_daily_record(DailyRecord(date=day.date(), **_metric_values(kwargs)))
    except Exception as exc:
        return handle_cli_error(ctx, exc, "records.add")

    if ctx.json_output:
        return handle_cli_success(ctx, record.to_dict())
    return handle_cli_success(ctx, f"✅ Added record for {record.date.isoformat()}")


@cli.command("update")
@click.option("--date", "day", type=DATE_TYPE, required=True, help="Record date (YYYY-MM-DD)")
@metric_options
@cli_command
def update_command(ctx: CLIContext, day: datetime, **kwargs: Any) -> int:
    """Change metrics of an existing record."""
    changes = _metric_values(kwargs)
    try:
        if not changes:
            raise click.UsageError("Nothing to update: pass at least one metric option")
        pipeline = ctx.build_pipeline()
        record = pipeline.update_daily_record(day.date(), **changes)
    except click.UsageError:
        raise
    except Exception as exc:
        return handle_cli_error(ctx, exc, "records.update")

    if ctx.json_output:
        return handle_cli_success(ctx, record.to_dict(), meta={"changed": sorted(changes)})
    return handle_cli_success(ctx, f"✅ Updated {', '.join(sorted(changes))} for {record.date.isoformat()}")


@cli.command("remove")
@click.option("--date", "day", type=DATE_TYPE, required=True, help="Record date (YYYY-MM-DD)")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@cli_command
def remove_command(ctx: CLIContext, day: datetime) -> int:
    """Delete the record of a date."""
    target = day.date()
    try:
        pipeline = ctx.build_pipeline()
        if not ctx.confirm(f"Delete the record for {target.isoformat()}?"):
            return handle_cli_success(ctx, "Aborted")
        record = pipeline.remove_daily_record(target)
    except click.ClickException:
        raise
    except Exception as exc:
        return handle_cli_error(ctx, exc, "records.remove")

    if ctx.json_output:
        return handle_cli_success(ctx, record.to_dict())
    return handle_cli_success(ctx, f"🗑  Removed record for {target.isoformat()}")


@cli.command("seed")
@click.option("--today", "day", type=DATE_TYPE, help="Last sample date (default: today)")
@cli_command
def seed_command(ctx: CLIContext, day: datetime | None) -> int:
    """Seed three sample days and four sample insights into an empty store."""
    try:
        pipeline = ctx.build_pipeline()
        records = pipeline.seed_sample_data(day.date() if day else None)
    except Exception as exc:
        return handle_cli_error(ctx, exc, "records.seed")

    if ctx.json_output:
        return handle_cli_success(ctx, [r.to_dict() for r in records], meta={"seeded": len(records)})
    if not records:
        return handle_cli_success(ctx, "ℹ️  Store already holds records, nothing seeded")
    return handle_cli_success(ctx, [f"🌱 Seeded {len(records)} sample days", *map(format_record, records)])
