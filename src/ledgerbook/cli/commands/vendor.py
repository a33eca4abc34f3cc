"""Vendor management commands."""

import click
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.vendor import VendorService


@click.group("vendor")
def vendor_group():
    """Manage vendors."""
    pass


@vendor_group.command("create")
@click.argument("name")
@click.pass_context
def create_vendor(ctx, name: str):
    """Create a vendor."""
    service = VendorService(ctx.obj["db"], ctx.obj["identity"])
    try:
        vendor_id = service.create_vendor(name)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created vendor '{name.strip()}' (ID: {vendor_id})")


@vendor_group.command("list")
@click.pass_context
def list_vendors(ctx):
    """List vendors."""
    service = VendorService(ctx.obj["db"], ctx.obj["identity"])
    vendors = service.list_vendors()
    if not vendors:
        click.echo("No vendors found.")
        return
    for vendor in vendors:
        click.echo(f"ID: {vendor.id:3d} | {vendor.name}")


def register_commands(cli):
    """Register vendor commands with main CLI."""
    cli.add_command(vendor_group)
