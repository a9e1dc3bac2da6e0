"""
Relation Commands
-----------------

Inspect and change the entity attached to host objects.

Commands:
    - show: Display the entity attached to a host
    - set: Attach an entity to a host (empty, 0 or -1 clears)
    - clear: Remove the relation of a host
    - outliers: Check whether the dates of an option use different entities
    - purge: Remove the relations of every option of a booking

Usage:
    entrel relation set mod_booking option 42 5
    entrel relation set mod_booking option 42 -1
    entrel relation outliers 42
    entrel relation purge 7
"""
import click

from entrel.core.logging_manager import handle_cli_error
from entrel.core.exceptions import (
    DatabaseError,
    InvalidArgumentError,
    PreconditionError,
    ValidationError,
)
from . import get_db


@click.group()
@click.pass_context
def relation(ctx: click.Context) -> None:
    """Inspect and change entity relations."""
    pass


@relation.command("show")
@click.argument("component")
@click.argument("area")
@click.argument("instanceid", type=int)
@click.pass_context
def show(ctx, component, area, instanceid):
    """Display the entity attached to a host."""
    try:
        db = get_db(ctx)

        with db.session_scope():
            view = db.handler(component, area).load_for_host(instanceid)
            address = f"{component}/{area}/{instanceid}"

            if view.is_empty:
                click.echo(f"⚠️  No entity attached to {address}")
                return

            click.echo(f"\n🔗 {address}")
            click.echo(f"Entity: [{view.entity_id}] {view.name}")
            if view.parentid:
                click.echo(f"Parent: [{view.parentid}] {view.parentname}")
            click.echo(f"Relation id: {view.relation_id}")
            if view.timecreated:
                click.echo(f"Since: {view.timecreated.isoformat()}")

    except (DatabaseError, InvalidArgumentError) as e:
        handle_cli_error(
            ctx,
            e,
            "relation_show",
            additional_context={"address": f"{component}/{area}/{instanceid}"},
        )


@relation.command("set", context_settings={"ignore_unknown_options": True})
@click.argument("component")
@click.argument("area")
@click.argument("instanceid", type=int)
@click.argument("entityid")
@click.pass_context
def set_relation(ctx, component, area, instanceid, entityid):
    """Attach ENTITYID to a host; an empty id, 0 or -1 clears it."""
    try:
        db = get_db(ctx)

        with db.session_scope():
            stored = db.handler(component, area).save_simple(instanceid, entityid)

        address = f"{component}/{area}/{instanceid}"
        if stored is None:
            click.echo(f"🗑️  Cleared entity of {address}")
        else:
            click.echo(f"✅ Attached entity {stored} to {address}")

    except (DatabaseError, ValidationError, ValueError, PreconditionError) as e:
        handle_cli_error(
            ctx,
            e,
            "relation_set",
            additional_context={
                "address": f"{component}/{area}/{instanceid}",
                "entityid": entityid,
            },
        )


@relation.command("clear")
@click.argument("component")
@click.argument("area")
@click.argument("instanceid", type=int)
@click.pass_context
def clear(ctx, component, area, instanceid):
    """Remove the relation of a host."""
    try:
        db = get_db(ctx)

        with db.session_scope():
            removed = db.handler(component, area).delete_for_host(instanceid)

        address = f"{component}/{area}/{instanceid}"
        if removed:
            click.echo(f"🗑️  Cleared entity of {address}")
        else:
            click.echo(f"⚠️  Nothing attached to {address}")

    except (DatabaseError, InvalidArgumentError) as e:
        handle_cli_error(ctx, e, "relation_clear")


@relation.command("outliers")
@click.argument("parent_id", type=int)
@click.option("--component", default="mod_booking", help="Owning subsystem")
@click.option("--area", default="option", help="Area of the parent host")
@click.pass_context
def outliers(ctx, parent_id, component, area):
    """Check whether the sub-instances of a host use different entities."""
    try:
        db = get_db(ctx)

        with db.session_scope():
            divergent = db.handler(component, area).has_divergent_sub_entities(
                parent_id
            )

        if divergent:
            click.echo(f"⚠️  {component}/{area}/{parent_id} has dates with different entities")
        else:
            click.echo(f"✅ {component}/{area}/{parent_id} uses a single entity")

    except (DatabaseError, ValueError, PreconditionError) as e:
        handle_cli_error(
            ctx, e, "relation_outliers", additional_context={"parent_id": parent_id}
        )


@relation.command("purge")
@click.argument("parent_id", type=int)
@click.option("--component", default="mod_booking", help="Owning subsystem")
@click.option("--area", default="option", help="Area of the hosts to clear")
@click.pass_context
def purge(ctx, parent_id, component, area):
    """Remove the relations of every host under PARENT_ID (e.g. a booking)."""
    try:
        db = get_db(ctx)

        with db.session_scope():
            result = db.handler(component, area).delete_all_for_parent(parent_id)

        click.echo(f"🗑️  Removed {result.deleted} relation(s)")
        if not result.success:
            click.echo(
                f"⚠️  Failed for: {', '.join(str(i) for i in result.failed_ids)}",
                err=True,
            )
            ctx.exit(1)

    except (DatabaseError, ValueError, PreconditionError) as e:
        handle_cli_error(
            ctx, e, "relation_purge", additional_context={"parent_id": parent_id}
        )
