import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from tortoise import Tortoise
from tortoise.exceptions import IntegrityError

from ..common.dates import utc_now
from ..features.auth.models import ROLES, User as AuthUser
from ..features.auth.security import get_password_hash
from ..features.auth import service as auth_service
from ..features.reports import service as report_service
from ..features.reports.csv_export import build_csv
from ..features.reports.exceptions import ReportError
from ..features.reports.periods import normalize_group, resolve_date_range
from ..features.reports.schemas import (
    BREEDING_CSV_COLUMNS,
    FEED_CSV_COLUMNS,
    FINANCE_CSV_COLUMNS,
    HEALTH_CSV_COLUMNS,
    SALES_CSV_COLUMNS,
)
from ..main import TORTOISE_ORM_CONFIG

logger = logging.getLogger(__name__)

REPORT_KINDS = ("sales", "finance", "feed", "health", "breeding")

app = typer.Typer(name="farmledger-cli", help="CLI for managing FarmLedger data.")


class DBConnection:
    """Opens the application database for the duration of one command."""

    async def __aenter__(self):
        await Tortoise.init(config=TORTOISE_ORM_CONFIG)
        await Tortoise.generate_schemas(safe=True)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await Tortoise.close_connections()


# User management commands
user_app = typer.Typer(name="users", help="Manage user accounts.")
app.add_typer(user_app)


@user_app.command("create-admin")
def create_admin_user_command(
    username: str = typer.Option(..., prompt=True, help="Username for the new admin."),
    email: str = typer.Option(..., prompt=True, help="Email for the new admin."),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password for the new admin."),
):
    """Creates a new admin user."""
    asyncio.run(_create_admin_user(username, email, password))


async def _create_admin_user(username: str, email: str, password: str):
    async with DBConnection():
        typer.echo(f"Attempting to create admin user: {username} ({email})...")
        if await auth_service.get_user_by_username(username):
            typer.secho(f"Error: User with username '{username}' already exists.", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        if await auth_service.get_user_by_email(email):
            typer.secho(f"Error: User with email '{email}' already exists.", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        try:
            admin_user = await auth_service.create_user(
                {"username": username, "email": email}, get_password_hash(password), role="admin"
            )
        except IntegrityError as e:
            typer.secho(f"Error creating admin user: {e}", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        typer.secho(
            f"Admin user '{admin_user.username}' created successfully with ID: {admin_user.public_id}",
            fg=typer.colors.GREEN,
        )


@user_app.command("set-role")
def set_role_command(
    username: str = typer.Argument(..., help="The user to change."),
    role: str = typer.Argument(..., help=f"One of: {', '.join(ROLES)}"),
):
    """Changes a user's farm role."""
    asyncio.run(_set_role(username, role))


async def _set_role(username: str, role: str):
    if role not in ROLES:
        typer.secho(f"Error: Unknown role '{role}'. Expected one of: {', '.join(ROLES)}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    async with DBConnection():
        user: Optional[AuthUser] = await auth_service.set_user_role(username, role)
        if user is None:
            typer.secho(f"Error: User with username '{username}' not found.", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        typer.secho(f"User '{username}' now has role '{role}'.", fg=typer.colors.GREEN)


# Report commands
report_app = typer.Typer(name="reports", help="Export farm reports.")
app.add_typer(report_app)


@report_app.command("export")
def export_report_command(
    kind: str = typer.Argument(..., help=f"One of: {', '.join(REPORT_KINDS)}"),
    start: Optional[str] = typer.Option(None, help="ISO 8601 start, defaults to 30 days ago"),
    end: Optional[str] = typer.Option(None, help="ISO 8601 end, defaults to the end of today"),
    group: str = typer.Option("day", help="day, week or month"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="CSV file to write, stdout if omitted"),
):
    """Writes a report summary as CSV."""
    asyncio.run(_export_report(kind, start, end, group, output))


async def build_report_csv(kind: str, start: Optional[str], end: Optional[str], group: str) -> str:
    """Runs the `kind` report for the window and returns its summary as CSV text."""
    group = normalize_group(group)
    window = resolve_date_range(start, end, utc_now())
    if kind == "sales":
        report, columns = await report_service.sales_report(window, group), SALES_CSV_COLUMNS
    elif kind == "finance":
        report, columns = await report_service.finance_report(window, group), FINANCE_CSV_COLUMNS
    elif kind == "feed":
        report, columns = await report_service.feed_report(window, group), FEED_CSV_COLUMNS
    elif kind == "health":
        report, columns = await report_service.health_report(window, group, None, utc_now()), HEALTH_CSV_COLUMNS
    elif kind == "breeding":
        report, columns = await report_service.breeding_report(window, group), BREEDING_CSV_COLUMNS["all"]
    else:
        raise ValueError(f"Unknown report '{kind}'")
    return build_csv([row.model_dump(by_alias=True) for row in report.summary], columns)


async def _export_report(kind: str, start: Optional[str], end: Optional[str], group: str, output: Optional[Path]):
    if kind not in REPORT_KINDS:
        typer.secho(f"Error: Unknown report '{kind}'. Expected one of: {', '.join(REPORT_KINDS)}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    async with DBConnection():
        try:
            csv_text = await build_report_csv(kind, start, end, group)
        except ReportError as e:
            typer.secho(f"Error: {e}", fg=typer.colors.RED)
            raise typer.Exit(code=1)
    if output is None:
        typer.echo(csv_text, nl=False)
        return
    output.write_text(csv_text, encoding="utf-8")
    typer.secho(f"Wrote {kind} report to {output}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
