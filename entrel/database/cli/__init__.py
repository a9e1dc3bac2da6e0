#!/usr/bin/env python3
"""
entrel Database Management CLI
-------------------------------

Command-line interface for entities and their relations to host objects.

This module provides the main CLI group and shared context setup
for all database commands.

Command Structure:
    - Setup & Initialization (init)
    - Migration Management (migration)
    - Entities (entity)
    - Relations (relation)

Usage:
    # Get general help
    entrel --help

    # Get help for a specific command group
    entrel relation --help

    # Attach entity 5 to booking option 42
    entrel relation set mod_booking option 42 5
"""
import click
import logging
from pathlib import Path

from entrel.core.exceptions import ValidationError
from entrel.core.logging_manager import handle_cli_error
from entrel.core.paths import DB_PATH, ALEMBIC_DIR, LOG_DIR
from entrel.database import EntrelDB
from entrel.database.configs import default_registry, load_host_area_configs


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    default=str(DB_PATH),
    help="Path to database file",
)
@click.option(
    "--alembic-dir",
    type=click.Path(),
    default=str(ALEMBIC_DIR),
    help="Path to Alembic directory",
)
@click.option(
    "--log-dir",
    type=click.Path(),
    default=str(LOG_DIR),
    help="Path to log directory",
)
@click.option(
    "--areas-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML file registering additional host areas",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Show detailed errors and tracebacks",
)
@click.pass_context
def cli(ctx, db_path, alembic_dir, log_dir, areas_file, verbose):
    """entrel Entity Relation Management CLI"""

    # Suppress Alembic INFO logging by default
    logging.getLogger("alembic").setLevel(logging.WARNING)

    ctx.ensure_object(dict)
    ctx.obj["db_path"] = Path(db_path)
    ctx.obj["alembic_dir"] = Path(alembic_dir)
    ctx.obj["log_dir"] = Path(log_dir)
    ctx.obj["areas_file"] = Path(areas_file) if areas_file else None
    ctx.obj["verbose"] = verbose


def get_db(ctx) -> EntrelDB:
    """Get or create database instance from context."""
    if "db" not in ctx.obj:
        try:
            registry = default_registry()
            if ctx.obj.get("areas_file"):
                registry = load_host_area_configs(ctx.obj["areas_file"], registry)
        except ValidationError as e:
            handle_cli_error(ctx, e, "load_host_areas")

        ctx.obj["db"] = EntrelDB(
            db_path=ctx.obj["db_path"],
            alembic_dir=ctx.obj["alembic_dir"],
            log_dir=ctx.obj["log_dir"],
            registry=registry,
        )
        ctx.obj["logger"] = ctx.obj["db"].logger
    return ctx.obj["db"]


# Import and register command modules
# These imports must come after CLI group definition
from .setup import init  # noqa: E402
from .migration import migration  # noqa: E402
from .entity import entity  # noqa: E402
from .relation import relation  # noqa: E402

# Register top-level commands
cli.add_command(init)

# Register command groups
cli.add_command(migration)
cli.add_command(entity)
cli.add_command(relation)


if __name__ == "__main__":
    cli(obj={})
