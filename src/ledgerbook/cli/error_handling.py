"""CLI error handling helpers."""

import click

from ledgerbook.domain.errors import DomainError, ImportFailure, ImportValidationError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, ImportValidationError):
        for problem in error.problems:
            click.echo(f"  - {problem}", err=True)
    elif isinstance(error, ImportFailure) and error.replaced:
        click.echo(f"Replaced before the failure: {', '.join(error.replaced)}", err=True)
    ctx.exit(1)
