# Overview: Flask CLI command groups for bootstrap, catalog and partner provisioning.

# backend/cadeau/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet.
# - python -m flask system seed
#   Insert the default gift catalog (if empty) and the demo account.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Catalog:
# - python -m flask catalog list [--all]
# - python -m flask catalog set-active 3 --inactive
#
# Partners:
# - python -m flask partners create --business-name "Cafe Noord" --owner-name "Sam" --email sam@noord.nl --active
#   Prints the partner API key once; only its hash is stored.
# - python -m flask partners activate 1
# - python -m flask partners list

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import Partner
from .services import build_lifecycle, auth_service, partner_service
from .services.auth_service import PasswordValidationError
from .validation import ConflictError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create missing tables."""
    db.create_all()
    click.echo("PASS Schema ensured.")


@system_group.command('seed')
@with_appcontext
def seed():
    """Seed the default catalog and demo account (idempotent)."""
    inserted = build_lifecycle(db.session, current_app.config).catalog.seed_defaults()
    click.echo(f"PASS Catalog: {inserted} gift type(s) inserted.")

    try:
        account = auth_service.ensure_demo_account(
            current_app.config["DEMO_ACCOUNT_EMAIL"],
            current_app.config["DEMO_ACCOUNT_PASSWORD"],
            rounds=current_app.config["BCRYPT_ROUNDS"],
        )
    except PasswordValidationError as e:
        raise click.ClickException(f"Demo password rejected: {e}")
    click.echo(f"PASS Demo account: {account.email}")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system seed' to initialize.")


@click.group('catalog')
def catalog_group():
    """Gift catalog inspection."""


@catalog_group.command('list')
@click.option('--all', 'show_all', is_flag=True, help='Include inactive gift types')
@with_appcontext
def list_catalog(show_all):
    catalog = build_lifecycle(db.session, current_app.config).catalog
    gift_types = catalog.list_all() if show_all else catalog.list_active()
    if not gift_types:
        click.echo("No gift types.")
        return
    for gt in gift_types:
        flag = "" if gt.is_active else "  (inactive)"
        click.echo(f"{gt.id:>4}  {gt.category:<14} {gt.emoji} {gt.name:<20} {gt.to_dict()['price']:>8}{flag}")


@catalog_group.command('set-active')
@click.argument('gift_type_id', type=int)
@click.option('--active/--inactive', default=True)
@with_appcontext
def set_active(gift_type_id, active):
    """Enable or retire a gift type."""
    gift_type = build_lifecycle(db.session, current_app.config).catalog.set_active(gift_type_id, active)
    if gift_type is None:
        raise click.ClickException(f"Gift type {gift_type_id} not found")
    click.echo(f"PASS {gift_type.name} is now {'active' if active else 'inactive'}.")


@click.group('partners')
def partners_group():
    """Redeeming partner provisioning."""


@partners_group.command('create')
@click.option('--business-name', prompt=True)
@click.option('--owner-name', prompt=True)
@click.option('--email', prompt=True)
@click.option('--city', default=None)
@click.option('--business-type', default=None)
@click.option('--active', is_flag=True, help='Allow redemptions immediately')
@with_appcontext
def create_partner_cli(business_name, owner_name, email, city, business_type, active):
    try:
        partner, api_key = partner_service.create_partner(
            business_name=business_name,
            owner_name=owner_name,
            email=email,
            city=city,
            business_type=business_type,
            active=active,
        )
    except ConflictError as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Partner {partner.id} ({partner.business_name}) created, status={partner.status}")
    click.echo(f"API key (shown once): {api_key}")


@partners_group.command('activate')
@click.argument('partner_id', type=int)
@with_appcontext
def activate_partner(partner_id):
    partner = partner_service.set_partner_status(partner_id, partner_service.PARTNER_STATUS_ACTIVE)
    if partner is None:
        raise click.ClickException(f"Partner {partner_id} not found")
    click.echo(f"PASS Partner {partner.id} is active.")


@partners_group.command('list')
@with_appcontext
def list_partners():
    partners = db.session.query(Partner).order_by(Partner.id).all()
    if not partners:
        click.echo("No partners.")
        return
    for p in partners:
        click.echo(f"{p.id:>4}  {p.status:<8} {p.business_name} <{p.email}>")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(catalog_group)
    app.cli.add_command(partners_group)
