import asyncio
import logging
from typing import Optional

import typer
from rich.console import Console

from mimanasa.config import settings
from mimanasa.controller import AppController
from mimanasa.screens.catalog import filter_books
from mimanasa.services.http_client import create_http_client
from mimanasa.services.library_api import APIError, LibraryAPI
from mimanasa.session import SessionManager
from mimanasa.shell import run_app
from mimanasa.storage import SQLiteKeyValueStore
from mimanasa.ui_helpers import print_authors, print_books, print_poems, print_user, set_output_mode

console = Console()

app = typer.Typer(help="Mimanasa library client")


@app.callback(invoke_without_command=True)
def _global_options(
    ctx: typer.Context,
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
):
    """Global options. Without a command the interactive app starts."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if output:
        set_output_mode(output)
    if ctx.invoked_subcommand is None:
        cli_run()


def _build_api() -> LibraryAPI:
    return LibraryAPI(create_http_client())


def _build_controller() -> AppController:
    store = SQLiteKeyValueStore(settings.storage_file)
    return AppController(_build_api(), SessionManager(store, settings.session_key))


def _fail(message: Optional[str]) -> None:
    print(message or "Something went wrong")
    raise typer.Exit(code=1)


@app.command("run")
def cli_run():
    """Start the interactive app."""
    controller = _build_controller()

    async def _run():
        async with controller.api:
            await run_app(controller, console)

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("\n[green]Goodbye![/]")


@app.command("login")
def cli_login(
    email: str,
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True),
):
    """Sign in and remember the session."""
    controller = _build_controller()

    async def _run():
        async with controller.api:
            await controller.boot()
            if controller.logged_in:
                await controller.logout()
            return await controller.login(email, password)

    result = asyncio.run(_run())
    if not result.ok:
        _fail(result.message)
    print_user(controller.session)


@app.command("register")
def cli_register(
    email: str,
    username: str,
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True, confirmation_prompt=True),
):
    """Create an account and sign in with it."""
    controller = _build_controller()

    async def _run():
        async with controller.api:
            await controller.boot()
            if controller.logged_in:
                await controller.logout()
            return await controller.register(email, username, password)

    result = asyncio.run(_run())
    if not result.ok:
        _fail(result.message)
    print(result.message)
    print_user(controller.session)


@app.command("logout")
def cli_logout():
    """Forget the stored session."""
    controller = _build_controller()

    async def _run():
        async with controller.api:
            await controller.boot()
            if not controller.logged_in:
                return False
            await controller.logout()
            return True

    if asyncio.run(_run()):
        print("Logged out.")
    else:
        print("Not logged in.")


@app.command("whoami")
def cli_whoami():
    """Show the stored session."""
    controller = _build_controller()

    async def _run():
        async with controller.api:
            await controller.boot()

    asyncio.run(_run())
    if not controller.logged_in:
        _fail("Not logged in.")
    print_user(controller.session)


@app.command("forgot-password")
def cli_forgot_password(
    email: str,
    otp: Optional[str] = typer.Option(None, "--otp", help="Code from the email; prompted when omitted"),
):
    """Reset a forgotten password with a one-time code sent by email."""
    controller = _build_controller()

    async def _run():
        async with controller.api:
            await controller.boot()
            if controller.logged_in:
                return None, "Already logged in. Log out first."

            controller.forgot_password()
            result = await controller.send_otp(email)
            if not result.ok:
                return result, None
            print(result.message)

            code = otp or typer.prompt(f"{controller.config.otp_length}-digit code")
            result = await controller.verify_otp(code)
            if not result.ok:
                return result, None

            new_password = typer.prompt("New password", hide_input=True)
            confirm = typer.prompt("Confirm password", hide_input=True)
            return await controller.reset_password(new_password, confirm), None

    result, error = asyncio.run(_run())
    if error:
        _fail(error)
    if not result.ok:
        _fail(result.message)
    print(result.message)


def _logged_in_call(fetch):
    """Run ``fetch(api, user)`` with the stored session, or exit when there is none."""
    controller = _build_controller()

    async def _run():
        async with controller.api:
            await controller.boot()
            if not controller.logged_in:
                return None
            return await fetch(controller.api, controller.session)

    try:
        rows = asyncio.run(_run())
    except APIError as e:
        _fail(str(e))
    if rows is None:
        _fail("Please log in first.")
    return rows


@app.command("books")
def cli_books(
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Filter by title, author or genre"),
    show_all: bool = typer.Option(False, "--all", help="Include inactive books (admins only)"),
):
    """List the catalog."""
    async def fetch(api, user):
        if show_all and not user.is_admin:
            raise APIError("Admin access required")
        return await api.list_books(show_all=show_all)

    books = _logged_in_call(fetch)
    print_books(filter_books(books, search or ""))


@app.command("authors")
def cli_authors():
    """List authors."""
    print_authors(_logged_in_call(lambda api, user: api.list_authors()))


@app.command("poems")
def cli_poems():
    """List poems."""
    print_poems(_logged_in_call(lambda api, user: api.list_poems()))
