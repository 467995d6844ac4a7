"""bizdir CLI: account maintenance directly against the database.

Usage:
    bizdir init-db                                  # Create tables (dev / SQLite)
    bizdir create-admin admin@example.com           # Create or promote an admin
    bizdir list-admins                              # Back-office users and roles
    bizdir set-role editor@example.com editor       # Change a user's role
    bizdir create-agent --name Rahul --email ...    # Create a field agent
    bizdir reset-agent-password rahul@example.com   # Set a new agent password
    bizdir verify-agent rahul@example.com           # Check an agent can log in
    bizdir recalculate-earnings                     # Rebuild all agent totals
    bizdir serve --port 8000                        # Run the API server

Every command opens its own Database against --database-url (default:
BIZDIR_DATABASE_URL) and disposes it before exiting.
"""

import asyncio
import concurrent.futures
import sys
from typing import Awaitable, Callable, Optional, TypeVar

import click
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir import __version__
from bizdir.auth.jwt import PrincipalKind
from bizdir.auth.password import hash_password, verify_password
from bizdir.auth.roles import Role, role_display_name
from bizdir.auth.store import CredentialStore
from bizdir.config import settings
from bizdir.db.engine import Database
from bizdir.db.models import AdminUser, Base
from bizdir.errors import AppError
from bizdir.schemas.principal import AgentCreate
from bizdir.services.agent_service import AgentService

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run a coroutine from a synchronous click handler.

    Inside an already running loop (CliRunner under an async test) the
    coroutine runs on a worker thread with its own loop.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()


async def _with_session(
    url: str, fn: Callable[[AsyncSession], Awaitable[T]]
) -> T:
    database = Database(url)
    try:
        async with database.session() as session:
            return await fn(session)
    finally:
        await database.dispose()


def _check_password(password: str) -> None:
    if len(password) < settings.min_password_length:
        click.secho(
            f"Error: password must be at least {settings.min_password_length} characters",
            fg="red",
            err=True,
        )
        sys.exit(1)


def _fail(message: str) -> None:
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """columns: list of (header, dict_key, width)"""
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        click.echo("  ".join(str(row.get(k, "-"))[:w].ljust(w) for _, k, w in columns))


database_url_option = click.option(
    "--database-url",
    envvar="BIZDIR_DATABASE_URL",
    default=settings.database_url,
    show_default=False,
    help="SQLAlchemy async URL (default: BIZDIR_DATABASE_URL)",
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="bizdir")
def cli():
    """bizdir: maintenance commands for the business directory backend."""


@cli.command("init-db")
@database_url_option
def init_db(database_url: str):
    """Create all tables. Production databases use `alembic upgrade head`."""

    async def impl():
        database = Database(database_url)
        try:
            async with database.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        finally:
            await database.dispose()

    _run(impl())
    click.secho("Tables created", fg="green")


# ---------------------------------------------------------------------------
# Back-office users
# ---------------------------------------------------------------------------


@cli.command("create-admin")
@click.argument("email")
@click.option("--name", default="Admin User", show_default=True)
@click.option("--phone", default=None)
@click.password_option(help="Admin password (prompted when omitted)")
@database_url_option
def create_admin(email: str, name: str, phone: Optional[str], password: str, database_url: str):
    """Create an admin, or promote and reset an existing user with EMAIL."""
    _check_password(password)
    email = email.strip().lower()

    async def impl(db: AsyncSession) -> tuple[AdminUser, bool]:
        result = await db.execute(select(AdminUser).where(AdminUser.email == email))
        user = result.scalars().first()
        created = user is None
        if created:
            user = AdminUser(email=email, is_email_verified=True)
            db.add(user)
        user.name = name
        user.role = Role.ADMIN.value
        user.password_hash = hash_password(password)
        if phone:
            user.phone = phone
        await db.commit()
        return user, created

    user, created = _run(_with_session(database_url, impl))
    verb = "Created" if created else "Updated"
    click.secho(f"{verb} admin {user.email} ({user.id})", fg="green")


@cli.command("list-admins")
@click.option("--all", "show_all", is_flag=True, help="Include plain users")
@database_url_option
def list_admins(show_all: bool, database_url: str):
    """List back-office users with a role."""

    async def impl(db: AsyncSession) -> list[AdminUser]:
        q = select(AdminUser).order_by(AdminUser.created_at)
        if not show_all:
            q = q.where(AdminUser.role != Role.USER.value)
        return list((await db.execute(q)).scalars().all())

    users = _run(_with_session(database_url, impl))
    if not users:
        click.echo("No users found.")
        return
    _print_table(
        [
            {"email": u.email, "name": u.name, "role": role_display_name(u.role), "id": u.id}
            for u in users
        ],
        [("EMAIL", "email", 30), ("NAME", "name", 20), ("ROLE", "role", 14), ("ID", "id", 36)],
    )


@cli.command("set-role")
@click.argument("email")
@click.argument("role", type=click.Choice([r.value for r in Role]))
@database_url_option
def set_role(email: str, role: str, database_url: str):
    """Set the role of the user with EMAIL."""

    async def impl(db: AsyncSession) -> Optional[AdminUser]:
        result = await db.execute(
            select(AdminUser).where(AdminUser.email == email.strip().lower())
        )
        user = result.scalars().first()
        if user is not None:
            user.role = role
            await db.commit()
        return user

    user = _run(_with_session(database_url, impl))
    if user is None:
        _fail(f"no user with email {email}")
    click.secho(f"{user.email} is now {role_display_name(role)}", fg="green")


# ---------------------------------------------------------------------------
# Agents
# ---------------------------------------------------------------------------


@cli.command("create-agent")
@click.option("--name", required=True)
@click.option("--email", required=True)
@click.option("--phone", required=True)
@click.option("--code", "agent_code", required=True, help="Agent code, stored uppercase")
@click.password_option(help="Agent password (prompted when omitted)")
@database_url_option
def create_agent(name: str, email: str, phone: str, agent_code: str, password: str,
                 database_url: str):
    """Create a field agent."""
    try:
        body = AgentCreate(
            name=name, email=email, phone=phone, agent_code=agent_code, password=password
        )
    except ValidationError as e:
        _fail(str(e))

    async def impl(db: AsyncSession):
        return await AgentService(db).create_agent(body)

    try:
        agent = _run(_with_session(database_url, impl))
    except AppError as e:
        _fail(e.message)
    click.secho(f"Created agent {agent.agent_code} ({agent.email})", fg="green")


@cli.command("reset-agent-password")
@click.argument("identifier")
@click.password_option(help="New password (prompted when omitted)")
@database_url_option
def reset_agent_password(identifier: str, password: str, database_url: str):
    """Set a new password for the agent with IDENTIFIER (email or phone)."""
    _check_password(password)

    async def impl(db: AsyncSession):
        agent = await CredentialStore(db).find_by_identifier(PrincipalKind.AGENT, identifier)
        if agent is not None:
            await AgentService(db).reset_password(agent.id, password)
        return agent

    agent = _run(_with_session(database_url, impl))
    if agent is None:
        _fail(f"no agent matches {identifier}")
    click.secho(f"Password reset for {agent.agent_code}", fg="green")


@cli.command("verify-agent")
@click.argument("identifier")
@click.option("--password", default=None, help="Also check this password")
@database_url_option
def verify_agent(identifier: str, password: Optional[str], database_url: str):
    """Show the agent with IDENTIFIER and optionally test a password."""

    async def impl(db: AsyncSession):
        return await CredentialStore(db).find_by_identifier(PrincipalKind.AGENT, identifier)

    agent = _run(_with_session(database_url, impl))
    if agent is None:
        _fail(f"no agent matches {identifier}")

    click.echo(f"Name:        {agent.name}")
    click.echo(f"Email:       {agent.email}")
    click.echo(f"Phone:       {agent.phone}")
    click.echo(f"Agent code:  {agent.agent_code}")
    click.echo(f"Password:    {'set' if agent.password_hash else 'missing'}")

    if password is not None:
        if verify_password(password, agent.password_hash):
            click.secho("Password check: PASSED", fg="green")
        else:
            click.secho("Password check: FAILED", fg="red")
            sys.exit(1)


@cli.command("recalculate-earnings")
@database_url_option
def recalculate_earnings(database_url: str):
    """Rebuild shop counts and earnings for every agent."""

    async def impl(db: AsyncSession):
        return await AgentService(db).recalculate_all()

    results = _run(_with_session(database_url, impl))
    if not results:
        click.echo("No agents found.")
        return
    _print_table(
        results,
        [
            ("AGENT", "agent_id", 36),
            ("SHOPS", "total_shops", 6),
            ("PAID", "paid_shops_count", 6),
            ("OLD", "old_earnings", 8),
            ("NEW", "new_earnings", 8),
        ],
    )


@cli.command()
@click.option("--host", default=settings.host, show_default=True)
@click.option("--port", default=settings.port, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="Restart on code changes (development)")
def serve(host: str, port: int, reload: bool):
    """Run the API server with uvicorn."""
    import uvicorn

    uvicorn.run("bizdir.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
