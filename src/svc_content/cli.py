from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Optional

import typer

from svc_content.app.core.logging import setup_logging
from svc_content.controllers import users_controller
from svc_content.db.engine import DBEngine
from svc_content.db.schema import create_all
from svc_content.db.settings import DBSettings, get_db_settings

app = typer.Typer(no_args_is_help=True, add_completion=False, help="Content service commands.")


def _settings(database_url: Optional[str]) -> DBSettings:
    return DBSettings(database_url=database_url) if database_url else get_db_settings()


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Bind port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the HTTP service with uvicorn."""
    import uvicorn

    setup_logging()
    uvicorn.run("svc_content.api:create_app", factory=True, host=host, port=port, reload=reload, log_config=None)


@app.command("init-db")
def init_db(database_url: Optional[str] = typer.Option(None, help="Override DB_DATABASE_URL")):
    """Create missing tables."""
    setup_logging()

    async def run():
        engine = DBEngine(_settings(database_url))
        try:
            await create_all(engine.engine)
        finally:
            await engine.dispose()

    asyncio.run(run())
    typer.echo("Tables created.")


@app.command("add-user")
def add_user(
    email: str = typer.Argument(..., help="Email of the user to create"),
    database_url: Optional[str] = typer.Option(None, help="Override DB_DATABASE_URL"),
):
    """Add a user to the directory; existing users are left unchanged."""
    setup_logging()

    async def run() -> bool:
        engine = DBEngine(_settings(database_url))
        try:
            await create_all(engine.engine)
            ctx = SimpleNamespace(db=engine)
            return await users_controller.put(ctx, model="users", name=email, value={})
        finally:
            await engine.dispose()

    if asyncio.run(run()):
        typer.echo(f"Added {email}")
    else:
        typer.echo(f"SKIP {email} (exists)")
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
