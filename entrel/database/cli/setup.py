"""
Setup & Initialization Commands
--------------------------------

Commands:
    - init: Create the schema of a fresh database or migrate an existing one
"""
import click

from entrel.core.logging_manager import handle_cli_error
from entrel.core.exceptions import DatabaseError
from . import get_db


@click.command()
@click.pass_context
def init(ctx):
    """Initialize the database schema (create or upgrade)."""
    try:
        click.echo("🚀 Initializing entrel database...")
        db = get_db(ctx)
        db.initialize_schema()
        click.echo(f"✅ Database ready: {db.db_path}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "init")
