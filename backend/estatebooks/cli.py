# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/estatebooks/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates tables and the default manager/accountant/employee users.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users:
# - python -m flask users list
# - python -m flask users create --username sara --email sara@estatebooks.local --role accountant
#
# Inventory / reports:
# - python -m flask inventory low-stock
# - python -m flask reports show profit-loss --from 2024-01-01 --to 2024-01-31

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db, get_entity_store
from .decimal_utils import format_number
from .models import ROLE_VALUES, User
from .services import auth_service, inventory_service, reporting_service
from .services.auth_service import PasswordValidationError
from .validation import NotFoundError, ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Create tables and default users.

    Users: manager, accountant, employee (@estatebooks.local), all with
    password "Password123!". Change them immediately in production.
    """
    click.echo("START Initializing estatebooks...")
    db.create_all()
    click.echo("PASS Tables ready")

    default_password = "Password123!"
    for role in ROLE_VALUES:
        existing = db.session.query(User).filter_by(username=role).first()
        if existing:
            click.echo(f"WARN  User '{role}' already exists, skipping...")
            continue
        try:
            auth_service.create_user(
                username=role,
                email=f"{role}@estatebooks.local",
                password=default_password,
                name=role.capitalize(),
                role=role,
            )
            click.echo(f"PASS Created user: {role} with role '{role}'")
        except ValidationError as e:
            click.echo(f"FAIL Failed to create user '{role}': {str(e)}")

    click.echo("\nDONE Default credentials (CHANGE IN PRODUCTION!): <role>@estatebooks.local / Password123!")


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
    click.echo("BUILD Creating all tables...")
    db.create_all()
    click.echo("PASS Database reset. Run: python -m flask system init")


# =============================================================================
# USER MANAGEMENT COMMANDS
# =============================================================================

@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--email', prompt=True, help='Email address')
@click.option('--name', default=None, help='Display name (defaults to username)')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(ROLE_VALUES)), prompt=True, help='Role')
@with_appcontext
def create_user_cli(username, email, name, password, role):
    """
    Create a new user.

    Password must be 8+ characters with uppercase, lowercase, digit and
    special character.
    """
    try:
        user = auth_service.create_user(
            username=username,
            email=email,
            password=password,
            name=name,
            role=role,
        )
    except PasswordValidationError as e:
        raise click.ClickException(f"Password validation failed: {e}")
    except ValidationError as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Created user: {user.username} ({user.email}) with role '{user.role}'")


@users_group.command('list')
@with_appcontext
def list_users_cli():
    """List all users with role and active status."""
    users = auth_service.list_users()
    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "=" * 80)
    click.echo(f"{'Username':<20} {'Email':<35} {'Role':<12} {'Active'}")
    click.echo("=" * 80)
    for user in users:
        click.echo(f"{user.username:<20} {user.email:<35} {user.role:<12} {'Yes' if user.is_active else 'No'}")
    click.echo("=" * 80 + "\n")


# =============================================================================
# INVENTORY / REPORTS
# =============================================================================

@click.group('inventory')
def inventory_group():
    """Inventory inspection commands."""


@inventory_group.command('low-stock')
@with_appcontext
def low_stock_cli():
    """List items whose quantity is below their minimum."""
    items = inventory_service.list_items(get_entity_store(), low_only=True)
    if not items:
        click.echo("PASS No items below minimum stock.")
        return
    for item in items:
        click.echo(
            f"LOW  {item.name}: {format_number(item.quantity)} {item.unit} "
            f"(min {format_number(item.min_quantity)})"
        )


@click.group('reports')
def reports_group():
    """Report commands."""


@reports_group.command('show')
@click.argument('kind', type=click.Choice(list(reporting_service.REPORT_KINDS)))
@click.option('--from', 'date_from', default=None, help='Start date YYYY-MM-DD (default: first of month)')
@click.option('--to', 'date_to', default=None, help='End date YYYY-MM-DD (default: today)')
@click.option('--project-id', default=None, help='Project id (project report only)')
@with_appcontext
def show_report_cli(kind, date_from, date_to, project_id):
    """Print a report as a plain table."""
    try:
        report = reporting_service.build_report(
            get_entity_store(),
            kind,
            date_from=date_from,
            date_to=date_to,
            project_id=project_id,
            currency=current_app.config.get("CURRENCY_LABEL", reporting_service.DEFAULT_CURRENCY),
        )
    except (ValidationError, NotFoundError) as e:
        raise click.ClickException(str(e))

    click.echo(f"\n{report.title} ({report.date_from} .. {report.date_to})")
    click.echo(" | ".join(report.headers))
    click.echo("-" * 60)
    for row in report.rows:
        click.echo(" | ".join(row))
    if not report.rows:
        click.echo("(no rows)")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(inventory_group)
    app.cli.add_command(reports_group)
