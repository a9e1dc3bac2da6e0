"""
Migration Management Commands
------------------------------

Database migration commands using Alembic.

Commands:
    - upgrade: Upgrade to a revision
    - downgrade: Downgrade to a revision
    - status: Show migration status

Usage:
    # Upgrade database to the latest revision
    entrel migration upgrade

    # Downgrade database to a specific revision
    entrel migration downgrade <revision_id>

    # Show current migration status
    entrel migration status
"""
import click

from entrel.core.logging_manager import handle_cli_error
from entrel.core.exceptions import DatabaseError
from . import get_db


@click.group()
@click.pass_context
def migration(ctx: click.Context) -> None:
    """Database migration management (Alembic operations)."""
    pass


@migration.command("upgrade")
@click.option("--revision", default="head", help="Target revision (default: head)")
@click.pass_context
def migration_upgrade(ctx, revision):
    """Upgrade database to specified revision."""
    try:
        click.echo(f"⬆️  Upgrading database to: {revision}")
        db = get_db(ctx)
        db.upgrade_database(revision)
        click.echo("✅ Database upgraded successfully!")

    except DatabaseError as e:
        handle_cli_error(
            ctx,
            e,
            "migration_upgrade",
            additional_context={"revision": revision},
        )


@migration.command("downgrade")
@click.argument("revision")
@click.pass_context
def migration_downgrade(ctx, revision):
    """Downgrade database to specified revision."""
    try:
        click.echo(f"⬇️  Downgrading database to: {revision}")
        db = get_db(ctx)
        db.downgrade_database(revision)
        click.echo("✅ Database downgraded successfully!")

    except DatabaseError as e:
        handle_cli_error(
            ctx,
            e,
            "migration_downgrade",
            additional_context={"revision": revision},
        )


@migration.command("status")
@click.pass_context
def migration_status(ctx):
    """Show current migration status."""
    try:
        db = get_db(ctx)
        status = db.get_migration_history()

        click.echo("\n📊 Migration Status")
        click.echo("=" * 50)
        click.echo(f"Current Revision: {status.get('current_revision', 'None')}")
        click.echo(f"Status: {status.get('status', 'Unknown')}")

        if "error" in status:
            click.echo(f"⚠️  Error: {status['error']}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "migration_status")
