#!/usr/bin/env python3
"""CLI commands for coaching insights."""

from __future__ import annotations

from datetime import datetime

import click

from ..core.insights import INSIGHT_PRIORITIES, INSIGHT_TYPES, AIInsight
from .cli_common import CLIContext, cli_command, handle_cli_error, handle_cli_success
from .gymless_records import DATE_TYPE

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

PRIORITY_ICONS = {"high": "🔴", "medium": "🟡", "low": "🟢"}


def format_insight(insight: AIInsight) -> list[str]:
    lines = [
        f"  {PRIORITY_ICONS.get(insight.priority, '•')} {insight.title} "
        f"[{insight.type}, {insight.priority}] {insight.date.isoformat()}  id={insight.id}",
        f"     {insight.description}",
    ]
    if insight.recommendation:
        lines.append(f"     → {insight.recommendation}")
    return lines


@click.group(context_settings=CONTEXT_SETTINGS, help="Manage coaching insights")
def cli() -> None:
    """Root command for insights."""


@cli.command("list")
@cli_command
def list_command(ctx: CLIContext) -> int:
    """List stored insights."""
    try:
        insights = ctx.build_pipeline().list_insights()
    except Exception as exc:
        return handle_cli_error(ctx, exc, "insights.list")

    if ctx.json_output:
        return handle_cli_success(ctx, [i.to_dict() for i in insights], meta={"count": len(insights)})
    if not insights:
        return handle_cli_success(ctx, "ℹ️  No insights yet")

    lines = [f"💡 {len(insights)} insights"]
    for insight in insights:
        lines.extend(format_insight(insight))
    return handle_cli_success(ctx, lines)


@cli.command("add")
@click.option("--type", "insight_type", type=click.Choice(INSIGHT_TYPES), required=True, help="Insight category")
@click.option("--title", required=True, help="Short title")
@click.option("--description", required=True, help="Insight text")
@click.option("--priority", type=click.Choice(INSIGHT_PRIORITIES), default="medium", show_default=True)
@click.option("--metric", "related_metric", help="Related metric (e.g., protein, workout_frequency)")
@click.option("--recommendation", help="Suggested next step")
@click.option("--date", "day", type=DATE_TYPE, help="Insight date (default: today)")
@cli_command
def add_command(
    ctx: CLIContext,
    insight_type: str,
    title: str,
    description: str,
    priority: str,
    related_metric: str | None,
    recommendation: str | None,
    day: datetime | None,
) -> int:
    """Add an insight."""
    try:
        pipeline = ctx.build_pipeline()
        insight = pipeline.add_insight(
            type=insight_type,
            title=title,
            description=description,
            priority=priority,
            related_metric=related_metric,
            recommendation=recommendation,
            day=day.date() if day else None,
        )
    except Exception as exc:
        return handle_cli_error(ctx, exc, "insights.add")

    if ctx.json_output:
        return handle_cli_success(ctx, insight.to_dict())
    return handle_cli_success(ctx, f"✅ Added insight {insight.id}")


@cli.command("remove")
@click.argument("insight_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@cli_command
def remove_command(ctx: CLIContext, insight_id: str) -> int:
    """Delete an insight by id."""
    try:
        pipeline = ctx.build_pipeline()
        if not ctx.confirm(f"Delete insight {insight_id}?"):
            return handle_cli_success(ctx, "Aborted")
        insight = pipeline.remove_insight(insight_id)
    except click.ClickException:
        raise
    except Exception as exc:
        return handle_cli_error(ctx, exc, "insights.remove")

    if ctx.json_output:
        return handle_cli_success(ctx, insight.to_dict())
    return handle_cli_success(ctx, f"🗑  Removed insight {insight.title!r}")
