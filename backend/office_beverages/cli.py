# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/office_beverages/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create tables, then seed default users and beverages if no user exists.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list [--role employee]
#   List users with role, department and active status.
# - python -m flask users create --username sara --email sara@company.com --full-name "Sara Mohamed" --role employee
#   Create a user (prompts for the password if omitted).
#
# Maintenance:
# - python -m flask sessions cleanup --days 30
#   Delete ended or expired sessions that began before the window.

import click
from flask.cli import with_appcontext

from .errors import AppError
from .extensions import db
from .permissions import Role
from .services import seed_service, session_service, user_service
from .validation import enforce_rules_user


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Create the schema and seed a fresh database.

    Seeds only when the users table is empty:
    - Users: admin, officeBoy, ahmed, sara
    - Twelve beverages across coffee, tea, juice and smoothie

    SECURITY: Change the default passwords in production!
    """
    click.echo("START Initializing beverage system...")

    db.create_all()
    click.echo("PASS Tables ready")

    result = seed_service.seed_database()
    if not result["seeded"]:
        click.echo("WARN  Users already exist, skipping seed")
        return

    click.echo(f"PASS Created {result['users']} users and {result['beverages']} beverages")
    click.echo("\nDefault Credentials (CHANGE IN PRODUCTION!):")
    for entry in seed_service.DEFAULT_USERS:
        click.echo(f"   {entry['username']:<10} / {entry['password']:<10} ({entry['role']})")
    click.echo("")


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
    click.echo("PASS Database reset. Run 'flask system init' to seed default data.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@click.option('--role', type=click.Choice(Role.values()), help='Filter by role')
@with_appcontext
def list_users(role):
    """List all users with their roles."""
    users = user_service.list_users(role=role)

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Username':<20} {'Full name':<25} {'Role':<12} {'Dept':<12} {'Active'}")
    click.echo("="*90)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(
            f"{user.id:<5} {user.username:<20} {user.full_name:<25} "
            f"{user.role:<12} {user.department or '-':<12} {active_str}"
        )

    click.echo("="*90 + "\n")


@users_group.command('create')
@click.option('--username', prompt=True, help='Login name (3-50 chars)')
@click.option('--email', prompt=True, help='Email address')
@click.option('--full-name', prompt=True, help='Display name')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password (6+ chars)')
@click.option('--role', type=click.Choice(Role.values()), default=Role.EMPLOYEE.value, show_default=True)
@click.option('--department', default=None, help='Department (optional)')
@with_appcontext
def create_user_cli(username, email, full_name, password, role, department):
    """Create a user."""
    patch = {
        "username": username.strip(),
        "email": email.strip(),
        "full_name": full_name.strip(),
        "password": password,
        "role": role,
        "department": department,
    }
    try:
        enforce_rules_user(patch, creating=True)
        user = user_service.create_user(patch)
    except AppError as e:
        db.session.rollback()
        details = getattr(e, "errors", None) or []
        click.echo(f"FAIL {e.message}")
        for err in details:
            click.echo(f"     - {err['field']}: {err['message']}")
        raise SystemExit(1)

    click.echo(f"PASS Created user: {user.username} ({user.email}) with role '{user.role}'")


@click.group('sessions')
def sessions_group():
    """Session maintenance commands."""


@sessions_group.command('cleanup')
@click.option('--days', default=30, show_default=True, type=int, help='Retention window in days')
@with_appcontext
def cleanup_sessions(days):
    """Delete ended sessions older than the retention window."""
    deleted = session_service.cleanup_ended_sessions(older_than_days=days)
    active = len(session_service.get_active_sessions())
    click.echo(f"PASS Deleted {deleted} ended session(s); {active} active session(s) remain")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(sessions_group)
