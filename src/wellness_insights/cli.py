#!/usr/bin/env python3
"""
Wellness insights CLI.

Usage:
    wellness-insights mood                    # Today's mood, charts, streak
    wellness-insights log-mood good
    wellness-insights journal                 # Recent entries and sentiment
    wellness-insights journal --write "..." --analyze
    wellness-insights wellness                # This week vs last week
    wellness-insights log-wellness sleep 7.5
    wellness-insights exercises               # Completions and achievements
    wellness-insights exercises --complete box-breathing --duration 240
    wellness-insights journal --delete 12
    wellness-insights stats                   # Record counts and date range
    wellness-insights serve --port 8000
"""

import argparse
import logging
import sys
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import get_settings
from .db.database import SqliteRecordStore
from .db.models import MetricFamily
from .exceptions import WellnessInsightsError
from .integrations.journal_analysis import JournalAnalysisClient
from .log_sanitizer import install_log_sanitizer
from .normalizer import sentiment_display_label, stress_display_label
from .service import InsightsService
from .summaries import ACHIEVEMENTS
from .trends import TrendDirection

console = Console()

TREND_ARROWS = {
    TrendDirection.UP: ("↑", "green"),
    TrendDirection.DOWN: ("↓", "red"),
    TrendDirection.STABLE: ("→", "yellow"),
}


def format_trend(trend: TrendDirection) -> Text:
    arrow, color = TREND_ARROWS[trend]
    return Text(f"{arrow} {trend.value}", style=color)


def get_mood_color(value: float) -> str:
    """Get rich color for a 1..5 mood value."""
    if value >= 4:
        return "green"
    if value >= 3:
        return "yellow"
    return "red"


def cmd_mood(args, service: InsightsService):
    """Show today's mood, weekly and monthly series."""
    console.print()
    console.print(Panel("[bold]Wellness Insights - Mood[/bold]"))

    analytics = service.get_mood_analytics(args.user)
    if analytics.todays_mood:
        console.print(f"Today: [bold]{analytics.todays_mood.mood}[/bold]")
    else:
        console.print("[dim]No mood logged today[/dim]")

    for title, points in (("Last 7 Days", analytics.weekly_series), ("Last 4 Weeks", analytics.monthly_series)):
        table = Table(title=title, box=box.ROUNDED)
        table.add_column("Period", style="cyan")
        table.add_column("Mood", justify="right")
        table.add_column("", style="dim")
        for point in points:
            table.add_row(
                point.label,
                Text(str(point.value), style=get_mood_color(point.value)),
                point.description or "",
            )
        if not points:
            table.add_row("-", "-", "no data")
        console.print(table)

    console.print(
        f"Streak: [bold]{analytics.streak.current_streak}[/bold] days "
        f"(best {analytics.streak.longest_streak})  Trend: ",
        format_trend(analytics.trend),
    )


def cmd_log_mood(args, service: InsightsService):
    """Save today's mood."""
    record = service.save_mood(args.user, args.mood)
    console.print(f"[green]Saved mood '{record.mood}' for {record.day_key}[/green]")


def cmd_journal(args, service: InsightsService):
    """Write or delete an entry, or show entries and the sentiment series."""
    if args.delete is not None:
        service.delete_journal_entry(args.user, args.delete)
        console.print(f"[green]Deleted journal entry {args.delete}[/green]")
        return

    if args.write:
        if args.analyze:
            with console.status("Analyzing entry..."):
                record = service.analyze_and_save(args.user, args.write, args.mood)
        else:
            record = service.save_journal_entry(args.user, args.write)
        console.print(f"[green]Saved journal entry ({record.sentiment_label}, mood {record.mood})[/green]")
        if record.analysis and record.analysis.get("supportiveResponse"):
            console.print(Panel(record.analysis["supportiveResponse"], title="Reflection", box=box.ROUNDED))
        return

    console.print()
    console.print(Panel("[bold]Wellness Insights - Journal[/bold]"))
    analytics = service.get_journal_analytics(args.user)

    stats = analytics.stats
    console.print(
        f"Entries: [bold]{stats.total_entries}[/bold]  This week: [bold]{stats.this_week}[/bold]  "
        f"Streak: [bold]{stats.streak}[/bold] day{'s' if stats.streak != 1 else ''}"
    )

    points = analytics.weekly_series if args.range == "weekly" else analytics.monthly_series
    table = Table(title="Sentiment", box=box.ROUNDED)
    table.add_column("Period", style="cyan")
    table.add_column("Sentiment", justify="right")
    table.add_column("Stress", justify="right")
    table.add_column("Mood", justify="right")
    for point in points:
        table.add_row(
            point.label,
            f"{point.sentiment:+.2f} ({sentiment_display_label(point.sentiment)})",
            f"{point.stress_level} ({stress_display_label(point.stress_level)})",
            str(point.mood),
        )
    console.print(table)
    console.print("Trend: ", format_trend(analytics.trend))

    for entry in analytics.entries[:args.limit]:
        preview = entry.content if len(entry.content) <= 80 else entry.content[:77] + "..."
        console.print(
            f"[dim]#{entry.id}[/dim] [cyan]{entry.date_label} {entry.time_label}[/cyan] "
            f"[dim]{entry.sentiment}[/dim] {preview}"
        )


def cmd_wellness(args, service: InsightsService):
    """Show this week's wellness averages against last week."""
    console.print()
    console.print(Panel("[bold]Wellness Insights - Weekly Wellness[/bold]"))
    summary = service.get_wellness_summary(args.user)

    table = Table(box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Average", justify="right")
    table.add_column("vs Last Week")
    table.add_row("Sleep", f"{summary.avg_sleep} h", format_trend(summary.sleep_trend))
    table.add_row("Water", f"{summary.avg_water} glasses", format_trend(summary.water_trend))
    table.add_row("Exercise", f"{summary.avg_exercise} min", format_trend(summary.exercise_trend))
    console.print(table)
    console.print(f"Days logged: {summary.days_logged}")


def cmd_log_wellness(args, service: InsightsService):
    """Set one of today's wellness values."""
    record = service.log_wellness(args.user, args.field, args.value)
    console.print(
        f"[green]{record.day_key}: sleep {record.sleep_hours} h, "
        f"water {record.water_glasses}, exercise {record.exercise_minutes} min[/green]"
    )


def cmd_exercises(args, service: InsightsService):
    """Record a completion, or show exercise stats and achievements."""
    if args.complete:
        record = service.record_exercise_completion(
            args.user, args.complete, args.name or args.complete, args.duration
        )
        console.print(f"[green]Completed {record.exercise_name}[/green]")

    console.print()
    console.print(Panel("[bold]Wellness Insights - Exercises[/bold]"))
    stats = service.get_exercise_stats(args.user)

    table = Table(box=box.ROUNDED, show_header=False)
    table.add_column("Stat", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Total", str(stats.total_completions))
    table.add_row("Today", str(stats.today_count))
    table.add_row("This week", str(stats.week_count))
    table.add_row("Current streak", str(stats.current_streak))
    table.add_row("Longest streak", str(stats.longest_streak))
    console.print(table)

    achievements = Table(title="Achievements", box=box.ROUNDED)
    achievements.add_column("Name")
    achievements.add_column("Progress", justify="right")
    for achievement in ACHIEVEMENTS:
        unlocked = achievement.id in stats.unlocked_achievements
        progress = achievement.progress(stats.total_completions, stats.longest_streak)
        achievements.add_row(
            Text(achievement.name, style="green" if unlocked else "dim"),
            f"{progress:.0%}",
        )
    console.print(achievements)


def cmd_stats(args, service: InsightsService):
    """Show database stats."""
    stats = service.store.get_stats()

    console.print(f"Database: {stats['db_path']}")
    table = Table(box=box.ROUNDED)
    table.add_column("Family", style="cyan")
    table.add_column("Records", justify="right")
    for family in MetricFamily:
        table.add_row(family.value, str(stats["records"].get(family.value, 0)))
    console.print(table)
    if stats["earliest_date"]:
        console.print(f"Date range: {stats['earliest_date']} to {stats['latest_date']}")


def cmd_serve(args, settings):
    """Run the HTTP API."""
    import uvicorn

    from .api.app import create_app

    uvicorn.run(create_app(settings), host=args.host or settings.api_host, port=args.port or settings.api_port)


def build_service(settings) -> InsightsService:
    store = SqliteRecordStore(str(settings.db_path))
    client = JournalAnalysisClient.from_settings(settings) if settings.analysis_service_url else None
    return InsightsService(store, analysis_client=client, settings=settings)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Wellness insights - mood, journal, wellness and exercise analytics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  wellness-insights log-mood great
  wellness-insights mood
  wellness-insights journal --write "Slept well, long walk" --analyze
  wellness-insights log-wellness water 6
  wellness-insights exercises --complete box-breathing --name "Box Breathing" --duration 240
        """,
    )
    parser.add_argument("--user", "-u", default="local", help="User id")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("mood", help="Show mood analytics")

    log_mood_p = subparsers.add_parser("log-mood", help="Save today's mood")
    log_mood_p.add_argument("mood", choices=["great", "good", "okay", "low", "bad"])

    journal_p = subparsers.add_parser("journal", help="Show or write journal entries")
    journal_p.add_argument("--write", "-w", type=str, help="Entry text to save")
    journal_p.add_argument("--analyze", action="store_true", help="Run AI analysis before saving")
    journal_p.add_argument("--mood", type=str, help="Self-reported mood passed to the analysis")
    journal_p.add_argument("--range", choices=["weekly", "monthly"], default="weekly")
    journal_p.add_argument("--limit", "-n", type=int, default=5, help="Entries to list")
    journal_p.add_argument("--delete", type=int, metavar="ID", help="Delete the entry with this id")

    subparsers.add_parser("wellness", help="Show weekly wellness summary")

    log_wellness_p = subparsers.add_parser("log-wellness", help="Set one of today's wellness values")
    log_wellness_p.add_argument("field", choices=["sleep", "water", "exercise"])
    log_wellness_p.add_argument("value", type=float)

    exercises_p = subparsers.add_parser("exercises", help="Show or record exercises")
    exercises_p.add_argument("--complete", type=str, help="Exercise id to record as completed")
    exercises_p.add_argument("--name", type=str, help="Exercise display name")
    exercises_p.add_argument("--duration", type=int, default=0, help="Duration in seconds")

    subparsers.add_parser("stats", help="Show database stats")

    serve_p = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_p.add_argument("--host", type=str)
    serve_p.add_argument("--port", type=int)

    return parser


COMMANDS = {
    "mood": cmd_mood,
    "log-mood": cmd_log_mood,
    "journal": cmd_journal,
    "wellness": cmd_wellness,
    "log-wellness": cmd_log_wellness,
    "exercises": cmd_exercises,
    "stats": cmd_stats,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(level=logging.DEBUG if args.verbose else settings.log_level)
    install_log_sanitizer()

    if args.command == "serve":
        cmd_serve(args, settings)
        return 0

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        handler(args, build_service(settings))
    except WellnessInsightsError as e:
        console.print(f"[red]{e.message}[/red]")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
