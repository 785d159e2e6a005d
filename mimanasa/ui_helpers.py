import os
import json
from typing import Any, Dict, List, Sequence, Tuple

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from mimanasa.models import Author, Book, Poem, UserSession

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "MIMANASA_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def _print_rows(
    title: str,
    empty_message: str,
    columns: Sequence[Tuple[str, str]],
    rows: List[Dict[str, Any]],
    plain_format: str,
) -> None:
    """Print records in the current output mode.
    - plain: one line per record rendered with ``plain_format``
    - json: JSON array of the selected columns
    - rich: Rich table
    """
    if not rows:
        print(empty_message)
        return

    mode = get_output_mode()
    if mode == "json":
        payload = [{key: row.get(key) for key, _ in columns} for row in rows]
        print(json.dumps(payload, ensure_ascii=False))
    elif mode == "rich":
        table = Table(title=title, show_lines=True, header_style="bold cyan")
        for _, header in columns:
            table.add_column(header)
        for row in rows:
            table.add_row(*["" if row.get(key) is None else escape(str(row.get(key))) for key, _ in columns])
        _console.print(table)
    else:
        for row in rows:
            print(plain_format.format(**{key: row.get(key) or "-" for key, _ in columns}))


def print_books(books: List[Book]) -> None:
    _print_rows(
        "📚 Books",
        "No books found.",
        [("id", "ID"), ("title", "Title"), ("author_name", "Author"), ("category_name", "Category"), ("language", "Language")],
        [b.model_dump() for b in books],
        "{id} - {title} by {author_name}",
    )


def print_authors(authors: List[Author]) -> None:
    _print_rows(
        "✍️ Authors",
        "No authors found.",
        [("id", "ID"), ("name", "Name"), ("bio", "Bio")],
        [a.model_dump() for a in authors],
        "{id} - {name}",
    )


def print_poems(poems: List[Poem]) -> None:
    _print_rows(
        "📝 Poems",
        "No poems found.",
        [("id", "ID"), ("title", "Title"), ("author_name", "Author"), ("category_name", "Category")],
        [p.model_dump() for p in poems],
        "{id} - {title} by {author_name}",
    )


def print_user(user: UserSession) -> None:
    mode = get_output_mode()
    if mode == "json":
        print(json.dumps(user.model_dump(exclude_none=True), ensure_ascii=False))
    elif mode == "rich":
        content = (
            f"[bold]Username:[/] {escape(user.username)}\n"
            f"[bold]Email:[/] {escape(user.email)}\n"
            f"[bold]Role:[/] {'Admin' if user.is_admin else 'Reader'}"
        )
        _console.print(Panel.fit(content, title="👤 Profile", border_style="blue"))
    else:
        print(f"Logged in as {user.username} ({user.email})")
        if user.is_admin:
            print("Role: admin")
