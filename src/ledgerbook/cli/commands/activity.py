"""Activity log command."""

import click
from ledgerbook.domain.activity import ActivityLogService


@click.command("log")
@click.option("--limit", type=int, default=20, show_default=True, help="Number of entries to show")
@click.option("--oldest-first", is_flag=True, help="Show oldest entries first")
@click.pass_context
def show_log(ctx, limit: int, oldest_first: bool):
    """Show the activity log."""
    entries = ActivityLogService(ctx.obj["db"]).list_entries(newest_first=not oldest_first, limit=limit)
    if not entries:
        click.echo("Activity log is empty.")
        return
    for entry in entries:
        click.echo(f"{entry.timestamp:%Y-%m-%d %H:%M:%S} | {entry.actor_label:10s} | {entry.description}")


def register_commands(cli):
    """Register log command with main CLI."""
    cli.add_command(show_log)
