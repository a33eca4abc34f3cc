"""Category management commands."""

import click
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.category import CategoryService
from ledgerbook.domain.entities import CategoryType

TYPE_CHOICE = click.Choice([t.value for t in CategoryType])


@click.group("category")
def category_group():
    """Manage cash and bank categories."""
    pass


@category_group.command("init")
@click.pass_context
def init_categories(ctx):
    """Create the default cash and bank categories.

    Categories that already exist are left alone, so running this twice is
    harmless.
    """
    service = CategoryService(ctx.obj["db"], ctx.obj["identity"])
    created = service.init_defaults()
    if created:
        click.echo(f"Created {created} default categories.")
    else:
        click.echo("Default categories already exist.")


@category_group.command("create")
@click.argument("name")
@click.option("--type", "category_type", type=TYPE_CHOICE, required=True, help="Ledger the category belongs to")
@click.pass_context
def create_category(ctx, name: str, category_type: str):
    """Create a category.

    Examples:
        ledgerbook category create "Packaging" --type cash
    """
    service = CategoryService(ctx.obj["db"], ctx.obj["identity"])
    try:
        category_id = service.create_category(name, CategoryType(category_type))
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created {category_type} category '{name}' (ID: {category_id})")


@category_group.command("list")
@click.option("--type", "category_type", type=TYPE_CHOICE, help="Only show one ledger's categories")
@click.pass_context
def list_categories(ctx, category_type: str | None):
    """List categories."""
    service = CategoryService(ctx.obj["db"], ctx.obj["identity"])
    categories = service.list_categories(CategoryType(category_type) if category_type else None)
    if not categories:
        click.echo("No categories found. Run 'ledgerbook category init' to create the defaults.")
        return

    for cat in categories:
        click.echo(f"{cat.type.value:5s} | {cat.name}")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group)
