from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from mimanasa.controller import ActionResult
from mimanasa.models import UserSession
from mimanasa.navigation import ScreenId, ScreenPayload
from mimanasa.services.library_api import LibraryAPI


@dataclass
class ScreenContext:
    """Everything a logged-in screen may touch. Screens change app state only
    through these callbacks."""

    user: Optional[UserSession]
    api: LibraryAPI
    console: Console
    on_back: Callable[[], Any]
    on_navigate: Callable[[ScreenId, ScreenPayload], None]
    on_logout: Callable[[], Awaitable[None]]
    on_update_profile: Callable[..., Awaitable[ActionResult]]


MenuItem = Tuple[str, str, str]


def render_menu(console: Console, title: str, items: Sequence[MenuItem], subtitle: Optional[str] = None) -> None:
    table = Table.grid(padding=(0, 2))
    table.add_column(justify="right", style="bold cyan", width=4)
    table.add_column(justify="left", style="white")
    for key, label, icon in items:
        table.add_row(f"[reverse]{key}[/]", f"{icon} {label}")
    if subtitle:
        subtitle = escape(subtitle)
    console.print(Panel(table, title=title, subtitle=subtitle, border_style="cyan", box=box.HEAVY, padding=(1, 2)))


def choose(console: Console, items: Sequence[MenuItem], default: str = "0") -> str:
    keys: List[str] = [key for key, _, _ in items]
    return Prompt.ask("Choose an option", choices=keys, default=default, console=console).strip()


def alert(console: Console, message: Optional[str], ok: bool = True) -> None:
    if not message:
        return
    style = "green" if ok else "bold red"
    console.print(f"[{style}]{escape(message)}[/]")


def show_result(console: Console, result: ActionResult) -> None:
    alert(console, result.message, ok=result.ok)


def pick_by_id(console: Console, label: str, records: Sequence[Any]) -> Optional[Any]:
    """Ask for a record id and return the matching record, or None."""
    raw = Prompt.ask(f"{label} id (blank to cancel)", default="", console=console).strip()
    if not raw:
        return None
    for record in records:
        if str(getattr(record, "id", "")) == raw:
            return record
    console.print(f"[yellow]⚠️ No {label.lower()} with id {escape(raw)}.[/]")
    return None


class View:
    """Base for logged-in screens."""

    title = ""

    def __init__(self, context: ScreenContext, payload: ScreenPayload = None) -> None:
        self.context = context
        self.payload = payload

    @property
    def console(self) -> Console:
        return self.context.console

    @property
    def api(self) -> LibraryAPI:
        return self.context.api

    @property
    def user(self) -> Optional[UserSession]:
        return self.context.user

    async def show(self) -> bool:
        """Render once and handle one user action. False means quit the app."""
        raise NotImplementedError
