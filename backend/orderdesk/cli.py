# Overview: Flask CLI command groups for bootstrap and maintenance.

# backend/orderdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to "orderdesk:create_app".
# - Use: python -m flask <group> <command> [options]
#
# System:
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Coupons:
# - python -m flask coupons list [--active-only]
# - python -m flask coupons create --code SAVE10 [--recursive] [--description "10% off"]
# - python -m flask coupons deactivate SAVE10
#
# Tokens:
# - python -m flask tokens issue --user-id 5 [--type refresh]
#   Prints the plaintext token once.
# - python -m flask tokens check <token>
# - python -m flask tokens revoke <token>
# - python -m flask tokens delete <token-id>
# - python -m flask tokens revoke-user --user-id 5
#   Revoke every live token of a user.
# - python -m flask tokens purge
#   Soft delete all revoked tokens.

import click
from flask.cli import with_appcontext

from .extensions import db
from .services import coupon_service, token_service
from .services.ledger_store import LedgerStore
from .validation import ValidationError, ConflictError, NotFoundError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


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

    click.echo("PASS Database reset complete.")


@click.group('coupons')
def coupons_group():
    """Coupon inspection and bootstrap."""


@coupons_group.command('list')
@click.option('--active-only', is_flag=True, help='Only enabled coupons')
@with_appcontext
def list_coupons_cli(active_only):
    coupons = coupon_service.list_coupons(active_only)
    if not coupons:
        click.echo("No coupons found.")
        return
    for c in coupons:
        flags = []
        if c["recursive"]:
            flags.append("recursive")
        if not c["is_active"]:
            flags.append("inactive")
        suffix = f" ({', '.join(flags)})" if flags else ""
        click.echo(f"  [{c['id']}] {c['code']}{suffix}")


@coupons_group.command('create')
@click.option('--code', required=True, help='Coupon code (stored upper-case)')
@click.option('--recursive', is_flag=True, help='Allow stacking on orders that already have discounts')
@click.option('--description', default=None, help='Free-text description')
@with_appcontext
def create_coupon_cli(code, recursive, description):
    try:
        coupon = coupon_service.create_coupon({
            "code": code,
            "recursive": recursive,
            "description": description,
        })
    except (ValidationError, ConflictError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created coupon {coupon['code']} (id={coupon['id']})")


@coupons_group.command('deactivate')
@click.argument('code')
@with_appcontext
def deactivate_coupon_cli(code):
    try:
        coupon = LedgerStore(db.session).find_coupon_by_code(code)
    except NotFoundError as e:
        raise click.ClickException(str(e))
    coupon_service.update_coupon(coupon.id, {"is_active": False})
    click.echo(f"PASS Coupon {coupon.code} deactivated")


@click.group('tokens')
def tokens_group():
    """Token maintenance."""


@tokens_group.command('issue')
@click.option('--user-id', type=int, required=True, help='Token owner')
@click.option('--type', 'token_type', default='access', help='access or refresh')
@with_appcontext
def issue_token_cli(user_id, token_type):
    """Print a new token; only its hash is stored."""
    try:
        token, plaintext = token_service.issue_token(user_id, token_type)
    except ValidationError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Issued {token.type} token {token.id} for user {user_id}")
    click.echo(plaintext)


@tokens_group.command('check')
@click.argument('token')
@with_appcontext
def check_token_cli(token):
    found = token_service.find_active_token(token)
    if found is None:
        raise click.ClickException("Token is revoked, deleted or unknown")
    click.echo(f"PASS Token {found.id} is active for user {found.user_id}")


@tokens_group.command('revoke')
@click.argument('token')
@with_appcontext
def revoke_token_cli(token):
    try:
        revoked = token_service.revoke_token(token)
    except NotFoundError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Revoked token {revoked.id}")


@tokens_group.command('delete')
@click.argument('token_id', type=int)
@with_appcontext
def delete_token_cli(token_id):
    try:
        token_service.delete_token(token_id)
    except NotFoundError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Soft-deleted token {token_id}")


@tokens_group.command('revoke-user')
@click.option('--user-id', type=int, required=True, help='User whose tokens are revoked')
@with_appcontext
def revoke_user_tokens_cli(user_id):
    count = token_service.revoke_user_tokens(user_id)
    click.echo(f"PASS Revoked {count} token(s) for user {user_id}")


@tokens_group.command('purge')
@with_appcontext
def purge_tokens_cli():
    count = token_service.purge_revoked_tokens()
    click.echo(f"PASS Soft-deleted {count} revoked token(s)")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(coupons_group)
    app.cli.add_command(tokens_group)
