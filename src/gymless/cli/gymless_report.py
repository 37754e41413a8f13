#!/usr/bin/env python3
"""CLI commands for weekly and monthly rollup reports."""

from __future__ import annotations

import calendar
from datetime import datetime

import click

from ..core.time import get_today
from ..rollups.aggregator import AggregationResult, MetricAverages, MonthlySummary, WeeklySummary
from .cli_common import CLIContext, cli_command, handle_cli_error, handle_cli_success

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _format_percentage(value: float | None) -> str:
    return "n/a" if value is None else f"{value:.1f}%"


def _format_trend(value: str | None) -> str:
    return value or "-"


def _format_averages(averages: MetricAverages) -> list[str]:
    steps = "n/a" if averages.steps is None else f"{averages.steps:.0f}"
    return [
        f"   Calories: {averages.calories_consumed:.0f} in / {averages.calories_burned:.0f} out "
        f"(balance {averages.calorie_balance:+.0f})",
        f"   Macros: protein {averages.protein_grams:.1f} g, carbs {averages.carbs_grams:.1f} g, "
        f"fat {averages.fat_grams:.1f} g",
        f"   Water: {averages.water_liters:.2f} L, steps: {steps}",
    ]


def format_weekly_summary(week: WeeklySummary) -> list[str]:
    """Human-readable lines for one week."""
    trends = week.trends
    return [
        f"📅 Week of {week.week_start_date.isoformat()} ({week.day_count} days tracked)",
        *_format_averages(week.averages),
        f"   Workouts: {week.workout_frequency} days, {week.total_workout_duration_minutes} min total",
        f"   Meals tracked: {_format_percentage(week.meals_tracked_percentage)}",
        f"   Trends: balance {_format_trend(trends.calorie_balance_trend)}, "
        f"workouts {_format_trend(trends.workout_consistency)}, "
        f"nutrition {_format_trend(trends.nutrition_quality)}",
    ]


def format_monthly_summary(month: MonthlySummary) -> list[str]:
    """Human-readable lines for one month."""
    trends = month.trends
    return [
        f"🗓  {calendar.month_name[month.month + 1]} {month.year} ({month.week_count} weeks)",
        *_format_averages(month.monthly_averages),
        f"   Workouts: {month.workout_frequency} days, {month.total_workout_duration_minutes} min total",
        f"   Meals tracked: {_format_percentage(month.meals_tracked_percentage)}",
        f"   Trends: balance {_format_trend(trends.calorie_balance_trend)}, "
        f"workouts {_format_trend(trends.workout_consistency)}, "
        f"nutrition {_format_trend(trends.nutrition_quality)}",
    ]


def format_report(result: AggregationResult) -> list[str]:
    if not result:
        return ["ℹ️  No daily records yet"]

    lines = ["📊 Weekly summaries"]
    for week in result.weekly:
        lines.extend(format_weekly_summary(week))
    lines.append("")
    lines.append("📊 Monthly summaries")
    for month in result.monthly:
        lines.extend(format_monthly_summary(month))
    return lines


@click.command("report", context_settings=CONTEXT_SETTINGS, help="Show weekly and monthly rollups")
@cli_command
def report_command(ctx: CLIContext) -> int:
    """Aggregate every stored record."""
    try:
        pipeline = ctx.build_pipeline()
        result = pipeline.report()
    except Exception as exc:
        return handle_cli_error(ctx, exc, "report")

    if ctx.json_output:
        return handle_cli_success(
            ctx,
            result.to_dict(),
            meta={"weeks": len(result.weekly), "months": len(result.monthly)},
        )
    return handle_cli_success(ctx, format_report(result))


@click.command("week", context_settings=CONTEXT_SETTINGS, help="Show the rollup of one ISO week")
@click.option(
    "--date",
    "day",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Any date in the week (YYYY-MM-DD, default: today)",
)
@cli_command
def week_command(ctx: CLIContext, day: datetime | None) -> int:
    """Weekly summary of the week containing a date."""
    try:
        pipeline = ctx.build_pipeline()
        target = day.date() if day else get_today()
        week = pipeline.get_weekly_summary(target)
    except Exception as exc:
        return handle_cli_error(ctx, exc, "week")

    if ctx.json_output:
        return handle_cli_success(ctx, week.to_dict() if week else None, meta={"date": target.isoformat()})
    if week is None:
        return handle_cli_success(ctx, f"ℹ️  No daily records in the week of {target.isoformat()}")
    return handle_cli_success(ctx, format_weekly_summary(week))


@click.command("month", context_settings=CONTEXT_SETTINGS, help="Show the rollup of one calendar month")
@click.option("--month", type=click.IntRange(1, 12), help="Month 1-12 (default: current month)")
@click.option("--year", type=int, help="Year (default: current year)")
@cli_command
def month_command(ctx: CLIContext, month: int | None, year: int | None) -> int:
    """Monthly summary; weeks belong to the month of their Monday."""
    try:
        pipeline = ctx.build_pipeline()
        today = get_today()
        month_index = (month or today.month) - 1
        year = year or today.year
        summary = pipeline.get_monthly_summary(month_index, year)
    except Exception as exc:
        return handle_cli_error(ctx, exc, "month")

    label = f"{year}-{month_index + 1:02d}"
    if ctx.json_output:
        return handle_cli_success(ctx, summary.to_dict() if summary else None, meta={"month": label})
    if summary is None:
        return handle_cli_success(ctx, f"ℹ️  No weekly summaries for {label}")
    return handle_cli_success(ctx, format_monthly_summary(summary))
