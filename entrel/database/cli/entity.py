"""
Entity Commands
---------------

Create and browse entities.

Commands:
    - add: Create an entity
    - list: List top-level entities
    - show: Display an entity with its addresses
    - find: Look entities up by name or shortname
"""
import sys
import click

from entrel.core.logging_manager import handle_cli_error
from entrel.core.exceptions import DatabaseError, ValidationError
from . import get_db


def _format_entity(entity) -> str:
    label = f"[{entity.id}] {entity.name}"
    if entity.shortname:
        label += f" ({entity.shortname})"
    return label


@click.group()
@click.pass_context
def entity(ctx: click.Context) -> None:
    """Create and browse entities."""
    pass


@entity.command("add")
@click.argument("name")
@click.option("--shortname", default=None, help="Short display name")
@click.option("--parent-id", type=int, default=None, help="Id of the parent entity")
@click.option("--pricefactor", type=float, default=None, help="Price multiplier")
@click.option("--city", default=None, help="City of the entity's address")
@click.option("--streetname", default=None, help="Street of the entity's address")
@click.pass_context
def add(ctx, name, shortname, parent_id, pricefactor, city, streetname):
    """Create a new entity."""
    try:
        db = get_db(ctx)

        with db.session_scope():
            created = db.entities.create(
                {
                    "name": name,
                    "shortname": shortname,
                    "parentid": parent_id,
                    "pricefactor": pricefactor,
                }
            )
            if city or streetname:
                db.entities.add_address(
                    created, {"city": city, "streetname": streetname}
                )
            click.echo(f"✅ Created entity {_format_entity(created)}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "entity_add", additional_context={"name": name})


@entity.command("list")
@click.pass_context
def list_entities(ctx):
    """List top-level entities."""
    try:
        db = get_db(ctx)

        with db.session_scope():
            entities = db.entities.list_top_level()
            if not entities:
                click.echo("⚠️  No entities found")
                return

            click.echo("\n🏢 Entities:\n")
            for item in entities:
                click.echo(f"  • {_format_entity(item)}")
            click.echo(f"\nTotal: {len(entities)}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "entity_list")


@entity.command("show")
@click.argument("entity_id", type=int)
@click.pass_context
def show(ctx, entity_id):
    """Display an entity with its addresses and price factor."""
    try:
        db = get_db(ctx)

        with db.session_scope():
            rows = db.entities.get_with_addresses(entity_id)
            if not rows:
                click.echo(f"❌ No entity found with id {entity_id}", err=True)
                sys.exit(1)

            first = rows[0]
            click.echo(f"\n🏢 [{first['id']}] {first['name']}")
            if first["shortname"]:
                click.echo(f"Shortname: {first['shortname']}")
            if first["parentid"]:
                click.echo(f"Parent: [{first['parentid']}] {first['parentname']}")
            click.echo(f"Price factor: {first['pricefactor']}")

            addresses = [row for row in rows if row["addressid"]]
            if addresses:
                click.echo(f"\n📍 Addresses ({len(addresses)}):")
                for row in addresses:
                    parts = [
                        row["streetname"],
                        row["streetnumber"],
                        row["postcode"],
                        row["city"],
                        row["country"],
                    ]
                    click.echo(f"  • {', '.join(p for p in parts if p)}")

            relations = db.relations.get_relations_for_entity(entity_id)
            if relations:
                click.echo(f"\n🔗 Attached to ({len(relations)}):")
                for rel in relations:
                    click.echo(f"  • {rel.address}")

    except DatabaseError as e:
        handle_cli_error(
            ctx, e, "entity_show", additional_context={"entity_id": entity_id}
        )


@entity.command("find")
@click.option("--name", default=None, help="Exact name (case-insensitive)")
@click.option("--shortname", default=None, help="Exact shortname")
@click.pass_context
def find(ctx, name, shortname):
    """Look entities up by name or shortname."""
    if not name and not shortname:
        raise click.UsageError("Give --name or --shortname")

    try:
        db = get_db(ctx)

        with db.session_scope():
            if name:
                matches = db.entities.get_by_name(name)
            else:
                matches = db.entities.get_by_shortname(shortname)

            if not matches:
                click.echo("⚠️  No matching entities")
                return

            for item in matches:
                click.echo(f"  • {_format_entity(item)}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "entity_find")
