"""Backup export and import commands."""

import click
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.snapshot import SnapshotService


@click.group("backup")
def backup_group():
    """Export and import full backups."""
    pass


@backup_group.command("export")
@click.argument("file_path", type=click.Path(dir_okay=False, writable=True))
@click.pass_context
def export_backup(ctx, file_path: str):
    """Write every record, deleted ones included, to a JSON file."""
    service = SnapshotService(ctx.obj["db"], ctx.obj["identity"])
    try:
        count = service.export_to_file(file_path)
    except ValueError as e:
        handle_domain_error(ctx, e)
    except OSError as e:
        click.echo(f"Error: Could not write '{file_path}': {e}", err=True)
        ctx.exit(1)
    click.echo(f"Exported {count} records to {file_path}")


@backup_group.command("import")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def import_backup(ctx, file_path: str, yes: bool):
    """Replace all data with the contents of a JSON backup.

    Collections missing from the file are emptied. The activity log is kept.
    """
    if not yes:
        click.confirm("This overwrites all existing data. Continue?", abort=True)

    service = SnapshotService(ctx.obj["db"], ctx.obj["identity"])
    try:
        report = service.import_from_file(file_path)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Imported {report.total_records} records from {file_path}")
    for name, count in report.record_counts.items():
        click.echo(f"  {name}: {count}")


def register_commands(cli):
    """Register backup commands with main CLI."""
    cli.add_command(backup_group)
