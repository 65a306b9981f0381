"""Create (or promote) a CRM administrator account.

Usage, from the project root:
    python -m scripts.create_admin admin@example.com --first-name Admin
"""

import asyncio
from typing import Optional

import typer

from app.core.logging import init_logging
from app.db.session import AsyncSessionLocal, engine
from app.models.enums import UserRole
from app.services.auth_service import upsert_admin

cli = typer.Typer(help="CRM administrator management")


async def _run(email, password, first_name, last_name, role):
    async with AsyncSessionLocal() as session:
        user, created = await upsert_admin(
            session, email, password, first_name, last_name, role
        )
    await engine.dispose()
    return user, created


@cli.command()
def create_admin(
    email: str = typer.Argument(..., help="Login email of the administrator"),
    password: str = typer.Option(
        ..., prompt=True, hide_input=True, confirmation_prompt=True
    ),
    first_name: Optional[str] = typer.Option(None, help="First name"),
    last_name: Optional[str] = typer.Option(None, help="Last name"),
    super_admin: bool = typer.Option(False, "--super", help="Grant SUPER_ADMIN"),
):
    """Create an administrator, or promote the existing account with EMAIL."""
    init_logging()
    role = UserRole.SUPER_ADMIN if super_admin else UserRole.ADMIN
    user, created = asyncio.run(_run(email, password, first_name, last_name, role))
    if created:
        typer.echo(f"Administrator created: {user.email} ({user.role.value})")
    else:
        typer.echo(f"Existing user promoted: {user.email} ({user.role.value})")
        typer.echo("Password left unchanged.")


if __name__ == "__main__":
    cli()
