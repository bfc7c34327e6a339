import asyncio
import datetime
import json
from typing import Optional

import typer
from fastapi import HTTPException
from pydantic import ValidationError
from tortoise import Tortoise
from tortoise.exceptions import IntegrityError

from ..features.auth import service as auth_service
from ..features.auth.models import User as AuthUser
from ..features.auth.schemas import UserCreate, UserResponse
from ..features.auth.security import get_password_hash
from ..features.shops.models import Shop
from ..features.statistics import service as statistics_service
from ..features.statistics.repository import TortoiseStatisticsStore
from ..main import TORTOISE_ORM_CONFIG

app = typer.Typer(name="shop-stats", help="CLI for managing shops and running shop statistics reports.")


# Shared async context manager for database connection
class DBConnection:
    def __init__(self, generate_schemas: bool = False):
        self.generate_schemas = generate_schemas

    async def __aenter__(self):
        await Tortoise.init(config=TORTOISE_ORM_CONFIG)
        if self.generate_schemas:
            await Tortoise.generate_schemas(safe=True)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await Tortoise.close_connections()


async def _get_shop(shop_public_id: str) -> Shop:
    shop = await Shop.get_or_none(public_id=shop_public_id)
    if shop is None:
        typer.secho(f"Error: Shop '{shop_public_id}' not found.", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    return shop


# Shop management commands
shop_app = typer.Typer(name="shops", help="Manage shops.")
app.add_typer(shop_app)


@shop_app.command("create")
def create_shop_command(name: str = typer.Argument(..., help="Display name of the shop.")):
    """Creates a new shop and prints its public id."""
    asyncio.run(_create_shop(name))


async def _create_shop(name: str):
    async with DBConnection(generate_schemas=True):
        shop = await Shop.create(name=name)
        typer.secho(f"Shop '{shop.name}' created with ID: {shop.public_id}", fg=typer.colors.GREEN)


# User management commands
user_app = typer.Typer(name="users", help="Manage user accounts.")
app.add_typer(user_app)


@user_app.command("create-shop-owner")
def create_shop_owner_command(
    shop_public_id: str = typer.Option(..., "--shop", help="Public id of the shop to link."),
    username: str = typer.Option(..., prompt=True, help="Username for the shop owner."),
    email: str = typer.Option(..., prompt=True, help="Email for the shop owner."),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password for the shop owner."),
):
    """Creates a shop owner account allowed to read the shop's statistics."""
    asyncio.run(_create_user(username, email, password, role="shop", shop_public_id=shop_public_id))


@user_app.command("create-admin")
def create_admin_user_command(
    username: str = typer.Option(..., prompt=True, help="Username for the new admin."),
    email: str = typer.Option(..., prompt=True, help="Email for the new admin."),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password for the new admin."),
):
    """Creates a new admin user."""
    asyncio.run(_create_user(username, email, password, role="admin"))


async def _create_user(username: str, email: str, password: str, role: str, shop_public_id: Optional[str] = None):
    """Async implementation for creating shop owner and admin accounts."""
    try:
        user_in = UserCreate(username=username, email=email, password=password)
    except ValidationError as e:
        typer.secho(f"Error: invalid user data: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    async with DBConnection(generate_schemas=True):
        typer.echo(f"Attempting to create {role} user: {username} ({email})...")
        if await auth_service.get_user_by_username(username=username):
            typer.secho(f"Error: User with username '{username}' already exists.", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        if await auth_service.get_user_by_email(email=email):
            typer.secho(f"Error: User with email '{email}' already exists.", fg=typer.colors.RED)
            raise typer.Exit(code=1)

        user_data = user_in.model_dump(exclude={"password"})
        user_data["role"] = role
        if shop_public_id is not None:
            user_data["shop_id"] = (await _get_shop(shop_public_id)).id

        try:
            user = await auth_service.create_user(user_in=user_data, hashed_password_val=get_password_hash(password))
        except IntegrityError as e:
            typer.secho(f"Error creating user: an integrity error occurred. Details: {e}", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        typer.secho(UserResponse.model_validate(user).model_dump_json(indent=2), fg=typer.colors.GREEN)


@user_app.command("disable-user")
def disable_user_account_command(
    username: str = typer.Argument(..., help="The username of the user to disable.")
):
    """Disables an existing user's account."""
    asyncio.run(_disable_user_account(username))


async def _disable_user_account(username: str):
    async with DBConnection():
        user = await AuthUser.get_or_none(username=username)
        if not user:
            typer.secho(f"Error: User with username '{username}' not found.", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        if not user.is_active:
            typer.secho(f"User '{username}' is already inactive.", fg=typer.colors.YELLOW)
            raise typer.Exit(code=0)

        user.is_active = False
        await user.save(update_fields=["is_active"])
        typer.secho(f"User account '{username}' has been successfully disabled.", fg=typer.colors.GREEN)


# Report commands, printing the same JSON payloads as the API
report_app = typer.Typer(name="report", help="Run shop statistics reports.")
app.add_typer(report_app)

ShopOption = typer.Option(..., "--shop", help="Public id of the shop.")
StartOption = typer.Option(..., "--start", formats=["%Y-%m-%d"], help="Start date (YYYY-MM-DD).")
EndOption = typer.Option(..., "--end", formats=["%Y-%m-%d"], help="End date (YYYY-MM-DD).")
YearOption = typer.Option(..., min=1, max=9999, help="Year (YYYY).")


def _run_report(shop_public_id: str, generate, *args):
    async def _run():
        async with DBConnection():
            shop = await _get_shop(shop_public_id)
            return await generate(TortoiseStatisticsStore(), shop.id, *args)

    try:
        result = asyncio.run(_run())
    except HTTPException as e:
        typer.secho(f"Error: {e.detail}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    if isinstance(result, list):
        typer.echo(json.dumps([item.model_dump(by_alias=True) for item in result], indent=2))
    else:
        typer.echo(result.model_dump_json(by_alias=True, indent=2))


@report_app.command("orders")
def order_summary_command(
    shop_public_id: str = ShopOption,
    start_date: datetime.datetime = StartOption,
    end_date: datetime.datetime = EndOption,
):
    """Order count, revenue and pending/confirmed counts between two dates."""
    _run_report(shop_public_id, statistics_service.generate_order_summary_report, start_date.date(), end_date.date())


@report_app.command("top-clients")
def top_clients_command(
    shop_public_id: str = ShopOption,
    start_date: datetime.datetime = StartOption,
    end_date: datetime.datetime = EndOption,
):
    """Top clients by order count and by amount between two dates."""
    _run_report(shop_public_id, statistics_service.generate_top_clients_report, start_date.date(), end_date.date())


@report_app.command("products")
def product_stats_command(shop_public_id: str = ShopOption, year: int = YearOption):
    """Per-product statistics for a year."""
    _run_report(shop_public_id, statistics_service.generate_product_stats_report, year)


@report_app.command("categories")
def category_stats_command(shop_public_id: str = ShopOption, year: int = YearOption):
    """Per-category statistics for a year."""
    _run_report(shop_public_id, statistics_service.generate_category_stats_report, year)


@report_app.command("global")
def global_stats_command(shop_public_id: str = ShopOption, year: int = YearOption):
    """Year-over-year statistics for a year."""
    _run_report(shop_public_id, statistics_service.generate_global_stats_report, year)


if __name__ == "__main__":
    app()
