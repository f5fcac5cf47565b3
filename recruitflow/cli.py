"""
Custom Flask CLI commands.

These commands are registered with the app via ``register_commands()``
in the application factory. Run them with ``flask <command_name>``.

Usage::

    flask db-check          # Verify database connectivity and schema
    flask init-db           # Create all tables without migrations
    flask seed-dev-users    # One local user per role for dev login
"""

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy import inspect

from recruitflow.extensions import db
from recruitflow.models.user import User

# Tables the application expects after ``flask db upgrade``.
EXPECTED_TABLES = (
    "users",
    "requisition",
    "job",
    "application",
    "offer",
    "notification",
    "audit_log",
)

# Seeded as one user per role: (role, first name, department).
_DEV_USERS = (
    ("admin", "Admin", None),
    ("recruiter", "Recruiter", None),
    ("sub_recruiter", "SubRecruiter", "Engineering"),
    ("hod", "Hod", "Engineering"),
    ("hr", "Hr", None),
    ("coo", "Coo", None),
    ("interviewer", "Interviewer", None),
    ("user", "Applicant", None),
)


@click.command("db-check")
@with_appcontext
def db_check_command():
    """
    Verify database connectivity and confirm the expected tables exist.

    Runs a simple query against the configured database and lists the
    application tables it finds.  Useful for confirming that your .env
    file is correct and migrations have been applied.
    """
    click.echo("=" * 60)
    click.echo("  RecruitFlow — Database Connectivity Check")
    click.echo("=" * 60)

    db_uri = db.engine.url.render_as_string(hide_password=True)
    click.echo(f"\n  Connection string: {db_uri}\n")

    # -- Step 1: Basic connectivity ----------------------------------------
    click.echo("[1/2] Testing connection...")
    try:
        row = db.session.execute(db.text("SELECT 1 AS connected")).fetchone()
    except Exception as exc:  # pylint: disable=broad-exception-caught
        click.secho(f"      ✗ Connection failed: {exc}", fg="red")
        click.echo("\n  Troubleshooting tips:")
        click.echo("    - Is the database server running?")
        click.echo("    - Does your .env DATABASE_URL match your server config?")
        return
    if not row or row[0] != 1:
        click.secho("      ✗ Unexpected result from test query.", fg="red")
        return
    click.secho("      ✓ Connected successfully.", fg="green")

    # -- Step 2: Tables ----------------------------------------------------
    click.echo("[2/2] Checking tables...\n")
    present = set(inspect(db.engine).get_table_names())
    missing = [t for t in EXPECTED_TABLES if t not in present]
    for table in EXPECTED_TABLES:
        mark = "✓" if table in present else "✗"
        click.echo(f"      {mark} {table}")

    if missing:
        click.secho(
            f"\n  Missing {len(missing)} table(s). Run `flask db upgrade`.", fg="yellow"
        )
        return

    click.echo("\n" + "=" * 60)
    click.secho("  All checks passed. Database is ready.", fg="green", bold=True)


@click.command("init-db")
@with_appcontext
def init_db_command():
    """Create all tables directly from the models (development only)."""
    if current_app.config.get("ENV_NAME") == "production":
        raise click.ClickException("Use `flask db upgrade` in production.")
    db.create_all()
    click.secho("  ✓ Tables created.", fg="green")


@click.command("seed-dev-users")
@click.option(
    "--domain",
    default="localhost",
    show_default=True,
    help="Email domain for the seeded users.",
)
@with_appcontext
def seed_dev_users_command(domain: str):
    """
    Create one active user per role for use with ``/auth/dev-login``.

    Existing users (matched by email) are reactivated and have their
    role and department reset; nothing is duplicated.
    """
    click.echo("=" * 60)
    click.echo("  RecruitFlow — Seed Dev Users")
    click.echo("=" * 60 + "\n")

    for role, first_name, department in _DEV_USERS:
        email = f"dev.{role}@{domain}"
        user = User.query.filter_by(email=email).first()
        if user is None:
            user = User(
                email=email,
                first_name=first_name,
                last_name="Dev",
                role=role,
                department=department,
            )
            db.session.add(user)
            click.secho(f"      + {email:<32} {role}", fg="green")
        else:
            user.role = role
            user.department = department
            user.is_active = True
            click.echo(f"      = {email:<32} {role} (existing)")

    db.session.commit()
    click.echo("\n" + "=" * 60)
    click.secho(
        "  Done. Sign in with POST /auth/dev-login?role=<role>.", fg="green", bold=True
    )


def register_commands(app) -> None:
    """Attach all custom CLI commands to the Flask app."""
    app.cli.add_command(db_check_command)
    app.cli.add_command(init_db_command)
    app.cli.add_command(seed_dev_users_command)
