import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from tortoise import Tortoise
from tortoise.exceptions import IntegrityError

from stockroom.core.database import TORTOISE_ORM_CONFIG
from stockroom.features.auth import service as auth_service
from stockroom.features.auth.permissions import ROLES
from stockroom.features.auth.repository import UserRepository
from stockroom.features.auth.schemas import UserCreate
from stockroom.features.auth.security import get_password_hash
from stockroom.features.consumption.repository import ConsumptionRecordRepository
from stockroom.features.inventory.repository import InventoryItemRepository, LocationRepository
from stockroom.features.reports.csv_export import report_to_csv
from stockroom.features.reports.service import ReportService

logger = logging.getLogger(__name__)

REPORT_TYPES = ("inventory-status", "consumption-trends", "expiry", "location-utilization")

app = typer.Typer(name="stockroom-cli", help="CLI for managing Stockroom application data.")


# Shared async context manager for database connection
class DBConnection:
    def __init__(self, config: Optional[dict] = None):
        self.config = config or TORTOISE_ORM_CONFIG

    async def __aenter__(self):
        await Tortoise.init(config=self.config)
        await Tortoise.generate_schemas(safe=True)  # Generate schema if it doesn't exist
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await Tortoise.close_connections()


def _check_role(role: str) -> str:
    if role not in ROLES:
        raise typer.BadParameter(f"Role must be one of: {', '.join(ROLES)}")
    return role


def _parse_params(pairs: List[str]) -> dict:
    params = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected KEY=VALUE, got '{pair}'")
        params[key.strip()] = value.strip()
    return params


# User management commands
user_app = typer.Typer(name="users", help="Manage user accounts.")
app.add_typer(user_app)

reports_app = typer.Typer(name="reports", help="Generate reports from the command line.")
app.add_typer(reports_app)


@user_app.command("create")
def create_user_command(
    email: str = typer.Option(..., prompt=True, help="Login email for the new user."),
    first_name: str = typer.Option(..., prompt=True, help="First name."),
    last_name: str = typer.Option(..., prompt=True, help="Last name."),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password for the new user."),
    role: str = typer.Option("user", help="One of admin, manager, user."),
):
    """Creates a new user account."""
    asyncio.run(_create_user(email, first_name, last_name, password, role))


async def _create_user(email: str, first_name: str, last_name: str, password: str, role: str):
    try:
        user_in = UserCreate(
            email=email, first_name=first_name, last_name=last_name, password=password, role=role
        )
    except ValidationError as e:
        typer.secho(f"Invalid user details:\n{e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    async with DBConnection():
        typer.echo(f"Attempting to create {role} user: {email}...")
        if await auth_service.get_user_by_email(user_in.email):
            typer.secho(f"Error: User with email '{email}' already exists.", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        try:
            user = await auth_service.create_user(
                user_in.model_dump(exclude={"password"}),
                get_password_hash(user_in.password),
            )
        except IntegrityError as e:
            typer.secho(f"Error creating user: {e}", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        typer.secho(f"User '{user.email}' created successfully with ID: {user.id}", fg=typer.colors.GREEN)


@user_app.command("set-role")
def set_role_command(
    email: str = typer.Argument(..., help="Email of the user to update."),
    role: str = typer.Argument(..., callback=_check_role, help="One of admin, manager, user."),
):
    """Changes the role of an existing user."""
    asyncio.run(_set_role(email, role))


async def _set_role(email: str, role: str):
    async with DBConnection():
        user = await auth_service.get_user_by_email(email)
        if not user:
            typer.secho(f"Error: User with email '{email}' not found.", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        if user.role == role:
            typer.secho(f"User '{email}' already has role '{role}'.", fg=typer.colors.YELLOW)
            raise typer.Exit(code=0)
        if not user.is_active:
            typer.secho(f"Error: User '{email}' is inactive.", fg=typer.colors.RED)
            raise typer.Exit(code=1)

        user.role = role
        await user.save(update_fields=["role", "updated_at"])
        typer.secho(f"User '{email}' now has role '{role}'.", fg=typer.colors.GREEN)


@user_app.command("disable")
def disable_user_command(
    email: str = typer.Argument(..., help="Email of the user to disable."),
):
    """Disables an existing user's account."""
    asyncio.run(_disable_user(email))


async def _disable_user(email: str):
    async with DBConnection():
        user = await auth_service.get_user_by_email(email)
        if not user:
            typer.secho(f"Error: User with email '{email}' not found.", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        if not user.is_active:
            typer.secho(f"User '{email}' is already inactive.", fg=typer.colors.YELLOW)
            raise typer.Exit(code=0)

        user.is_active = False
        await user.save(update_fields=["is_active", "updated_at"])
        typer.secho(f"User account '{email}' has been disabled.", fg=typer.colors.GREEN)


@reports_app.command("export")
def export_report_command(
    report_type: str = typer.Argument(..., help=f"One of {', '.join(REPORT_TYPES)}."),
    output_format: str = typer.Option("csv", "--format", "-f", help="csv or json."),
    param: List[str] = typer.Option([], "--param", "-p", help="Report parameter as KEY=VALUE; repeatable."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to this file instead of stdout."),
):
    """Generates a report and prints or saves it."""
    if report_type not in REPORT_TYPES:
        raise typer.BadParameter(f"Report type must be one of: {', '.join(REPORT_TYPES)}")
    if output_format not in ("csv", "json"):
        raise typer.BadParameter("Format must be csv or json")
    content = asyncio.run(_export_report(report_type, output_format, _parse_params(param)))
    if output:
        output.write_text(content, encoding="utf-8")
        typer.secho(f"Wrote {report_type} report to {output}", fg=typer.colors.GREEN)
    else:
        typer.echo(content, nl=False)


async def _export_report(report_type: str, output_format: str, parameters: dict) -> str:
    async with DBConnection():
        report_service = ReportService(
            inventory_items=InventoryItemRepository(),
            consumption_records=ConsumptionRecordRepository(),
            locations=LocationRepository(),
            users=UserRepository(),
        )
        try:
            params = report_service.parse_parameters(report_type, parameters)
        except ValidationError as e:
            typer.secho(f"Invalid report parameters:\n{e}", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        report = await report_service.generate(report_type, params)
    if output_format == "csv":
        return report_to_csv(report)
    return report.model_dump_json(indent=2) + "\n"


if __name__ == "__main__":
    app()
