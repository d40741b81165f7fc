from __future__ import annotations

import asyncio
import logging
from typing import Optional

import typer
import uvicorn

from raugupatis.auth import accounts
from raugupatis.auth.sessions import purge_expired_sessions
from raugupatis.config import get_settings
from raugupatis.exceptions import MigrationError, RaugupatisError
from raugupatis.infra.db.migrate import apply_migrations, current_version
from raugupatis.infra.db.models import UserRole
from raugupatis.infra.db.session import Database
from raugupatis.utils.logging_utils import configure_logging

logger = logging.getLogger(__name__)

app = typer.Typer(help="Raugupatis Log - fermentation tracker")


async def _migrate(database_url: str) -> tuple[list[int], int]:
	db = Database(database_url)
	try:
		applied = await apply_migrations(db.engine)
		return applied, await current_version(db.engine)
	finally:
		await db.close()


@app.command()
def serve(
	host: Optional[str] = typer.Option(None, help="Host interface (default from settings)"),
	port: Optional[int] = typer.Option(None, help="Port to bind (default from settings)"),
	reload: bool = typer.Option(False, help="Enable autoreload (dev only)"),
):
	"""Apply migrations, then start the web server."""
	settings = get_settings()
	configure_logging(settings.log_level)
	try:
		asyncio.run(_migrate(settings.database_url))
	except MigrationError as e:
		typer.echo(f"Migration failed, not starting: {e.message}", err=True)
		raise typer.Exit(code=1)

	uvicorn.run(
		"raugupatis.main:create_app",
		host=host or settings.host,
		port=port or settings.port,
		reload=reload,
		factory=True,
	)


@app.command()
def migrate():
	"""Apply pending schema migrations."""
	settings = get_settings()
	configure_logging(settings.log_level)
	try:
		applied, version = asyncio.run(_migrate(settings.database_url))
	except MigrationError as e:
		typer.echo(f"Migration failed: {e.message}", err=True)
		raise typer.Exit(code=1)
	if applied:
		typer.echo(f"Applied: {', '.join(f'{v:03d}' for v in applied)}")
	typer.echo(f"Schema version: {version:03d}")


@app.command("create-admin")
def create_admin(
	email: str = typer.Argument(..., help="Admin email"),
	password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
	first_name: Optional[str] = typer.Option(None, help="First name"),
	last_name: Optional[str] = typer.Option(None, help="Last name"),
):
	"""Create an administrator account."""
	settings = get_settings()
	configure_logging(settings.log_level)

	async def _create():
		db = Database(settings.database_url)
		try:
			await apply_migrations(db.engine)
			async with db.session() as session:
				return await accounts.register(
					session,
					email=email,
					password=password,
					first_name=first_name,
					last_name=last_name,
					role=UserRole.ADMIN.value,
				)
		finally:
			await db.close()

	try:
		user = asyncio.run(_create())
	except RaugupatisError as e:
		details = "; ".join(f"{k}: {v}" for k, v in e.fields.items())
		typer.echo(f"Could not create admin: {e.message}{' (' + details + ')' if details else ''}", err=True)
		raise typer.Exit(code=1)
	typer.echo(f"Created admin {user.email} (id {user.id})")


@app.command("purge-sessions")
def purge_sessions():
	"""Delete expired sessions."""
	settings = get_settings()
	configure_logging(settings.log_level)

	async def _purge():
		db = Database(settings.database_url)
		try:
			async with db.session() as session:
				return await purge_expired_sessions(session)
		finally:
			await db.close()

	removed = asyncio.run(_purge())
	typer.echo(f"Removed {removed} expired session(s)")


if __name__ == "__main__":
	app()
