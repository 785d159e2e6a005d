"""Administrator views: catalog overview, book form, author and poem management."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from rich.markup import escape
from rich.prompt import Confirm, Prompt
from rich.table import Table

from mimanasa.config import settings
from mimanasa.models import Author, Book, Category, Genre, Poem, PoemCategory
from mimanasa.navigation import BookPayload, Screen
from mimanasa.screens.base import View, alert, choose, pick_by_id, render_menu
from mimanasa.services.library_api import APIError
from mimanasa.validators import CatalogValidator


def _optional_int(raw: str) -> Optional[int]:
    raw = (raw or "").strip()
    return int(raw) if raw.isdigit() else None


def build_book_data(user_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
    """Shape the book form into the payload the backend expects."""
    is_paid = bool(fields.get("is_paid"))
    price = fields.get("price")
    return {
        "user_id": user_id,
        "title": (fields.get("title") or "").strip(),
        "description": fields.get("description") or "",
        "author": fields.get("author") or None,
        "category": fields.get("category") or None,
        "genre": fields.get("genre") or None,
        "file_type": fields.get("file_type") or "pdf",
        "cover_image_url": fields.get("cover_image_url") or "",
        "content_url": fields.get("content_url") or "",
        "language": fields.get("language") or settings.default_language,
        "is_paid": is_paid,
        "price": float(price) if is_paid and price not in (None, "") else None,
        "published_year": _optional_int(str(fields.get("published_year") or "")),
    }


class AdminView(View):
    def guard(self) -> bool:
        if self.user and self.user.is_admin:
            return True
        alert(self.console, "Admin access required", ok=False)
        self.context.on_back()
        return False

    async def resolve_upload(self, kind: str, value: str) -> Optional[str]:
        """Upload ``value`` when it names a local file, otherwise treat it as a URL."""
        value = value.strip()
        if not value or not os.path.isfile(value):
            return value
        try:
            with self.console.status(f"[bold green]Uploading {escape(os.path.basename(value))}..."):
                url = await self.api.upload_file(kind, value)
            alert(self.console, "✓ Upload complete!")
            return url
        except APIError as e:
            alert(self.console, str(e), ok=False)
            return None


class AdminPanelView(AdminView):
    MENU = [
        ("1", "Add book", "➕"),
        ("2", "Edit book", "✏️"),
        ("3", "Activate / deactivate book", "👁️"),
        ("4", "Delete book", "🗑️"),
        ("5", "Manage authors", "✍️"),
        ("6", "Manage poems", "📝"),
        ("r", "Refresh", "🔄"),
        ("0", "Back", "←"),
    ]

    def __init__(self, context, payload=None) -> None:
        super().__init__(context, payload)
        self.books: List[Book] = []
        self.categories: List[Category] = []
        self.authors: List[Author] = []

    async def load(self) -> None:
        try:
            with self.console.status("[bold green]Loading catalog..."):
                self.books = await self.api.list_books(show_all=True)
                self.categories = await self.api.list_categories()
                self.authors = await self.api.list_authors()
        except APIError as e:
            alert(self.console, f"Error fetching data: {e}", ok=False)

    def render(self) -> None:
        table = Table(title="🛠️ Admin Panel", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Title")
        table.add_column("Author")
        table.add_column("Status")
        for book in self.books:
            status = "[green]Active[/]" if book.is_active else "[red]Inactive[/]"
            table.add_row(str(book.id), escape(book.title), escape(book.author_name or "-"), status)
        self.console.print(table)
        self.console.print(
            f"[dim]{len(self.books)} books · {len(self.authors)} authors · {len(self.categories)} categories[/]"
        )

    async def show(self) -> bool:
        if not self.guard():
            return True
        await self.load()
        while True:
            self.render()
            render_menu(self.console, "Admin", self.MENU)
            choice = choose(self.console, self.MENU, default="0")
            if choice == "0":
                self.context.on_back()
                return True
            if choice == "r":
                await self.load()
            elif choice == "1":
                self.context.on_navigate(Screen.ADD_BOOK, None)
                return True
            elif choice == "5":
                self.context.on_navigate(Screen.MANAGE_AUTHORS, None)
                return True
            elif choice == "6":
                self.context.on_navigate(Screen.MANAGE_POEMS, None)
                return True
            else:
                book = pick_by_id(self.console, "Book", self.books)
                if book is None:
                    continue
                if choice == "2":
                    self.context.on_navigate(Screen.EDIT_BOOK, BookPayload(book))
                    return True
                if choice == "3":
                    await self.toggle_status(book)
                elif choice == "4":
                    await self.delete(book)

    async def toggle_status(self, book: Book) -> None:
        new_status = not book.is_active
        try:
            await self.api.set_book_active(book.id, self.user.id, new_status)
            alert(self.console, f"Book {'activated' if new_status else 'deactivated'}")
            await self.load()
        except APIError:
            alert(self.console, "Failed to update book status", ok=False)

    async def delete(self, book: Book) -> None:
        self.console.print("[bold red]This will permanently delete the book from database. This action cannot be undone![/]")
        if not Confirm.ask(f"Delete '{escape(book.title)}'?", default=False, console=self.console):
            return
        try:
            await self.api.delete_book(book.id, self.user.id)
            alert(self.console, "Book permanently deleted")
            await self.load()
        except APIError:
            alert(self.console, "Failed to delete book", ok=False)


class BookFormView(AdminView):
    """Add a new book, or edit the one carried in the payload."""

    @property
    def book(self) -> Optional[Book]:
        return self.payload.book if self.payload else None

    async def load_choices(self):
        authors: List[Author] = []
        categories: List[Category] = []
        genres: List[Genre] = []
        try:
            with self.console.status("[bold green]Loading form..."):
                authors = await self.api.list_authors()
                categories = await self.api.list_categories()
                genres = await self.api.list_genres()
        except APIError as e:
            alert(self.console, f"Error loading form data: {e}", ok=False)
        return authors, categories, genres

    async def show(self) -> bool:
        if not self.guard():
            return True
        book = self.book
        authors, categories, genres = await self.load_choices()

        def ask(label, default=""):
            return Prompt.ask(label, default=default, console=self.console)

        self.console.print(f"[bold cyan]{'✏️ Edit Book' if book else '➕ Add Book'}[/]")
        title = ask("Title", book.title if book else "")
        problem = CatalogValidator.validate_book(title)
        if problem:
            alert(self.console, problem, ok=False)
            self.context.on_back()
            return True

        if authors:
            self.console.print("Authors: " + ", ".join(f"{a.id}={escape(a.name)}" for a in authors))
        if categories:
            self.console.print("Categories: " + ", ".join(f"{c.id}={escape(c.name)}" for c in categories))
        if genres:
            self.console.print("Genres: " + ", ".join(f"{g.value}={escape(g.display)}" for g in genres))

        fields: Dict[str, Any] = {
            "title": title,
            "description": ask("Description", (book.description or "") if book else ""),
            "author": _optional_int(ask("Author id", str(book.author or "") if book else "")),
            "category": _optional_int(ask("Category id", str(book.category or "") if book else "")),
            "genre": ask("Genre", (book.genre or "") if book else ""),
            "file_type": ask("File type (pdf/epub/txt)", (book.file_type or "pdf") if book else "pdf"),
            "language": ask("Language", (book.language or settings.default_language) if book else settings.default_language),
            "published_year": ask("Published year", str(book.published_year or "") if book else ""),
        }
        fields["cover_image_url"] = await self.resolve_upload(
            "image", ask("Cover image (URL or local file)", (book.cover_image_url or "") if book else "")
        )
        content = ask("Content (URL or local file)", (book.content_url or "") if book else "")
        fields["content_url"] = await self.resolve_upload("text" if content.endswith(".txt") else "pdf", content)
        if fields["cover_image_url"] is None or fields["content_url"] is None:
            return True

        fields["is_paid"] = Confirm.ask("Paid book?", default=book.is_paid if book else False, console=self.console)
        if fields["is_paid"]:
            fields["price"] = ask("Price", str(book.price or "") if book else "")

        try:
            data = build_book_data(self.user.id, fields)
        except ValueError:
            alert(self.console, "Price must be a number", ok=False)
            return True

        try:
            with self.console.status("[bold green]Saving book..."):
                if book:
                    await self.api.update_book(book.id, data)
                else:
                    await self.api.create_book(data)
        except APIError:
            alert(self.console, "Failed to save book", ok=False)
            return True

        alert(self.console, "Book updated successfully" if book else "Book added successfully")
        self.context.on_back()
        return True


class ManageAuthorsView(AdminView):
    MENU = [
        ("1", "Add author", "➕"),
        ("2", "Edit author", "✏️"),
        ("3", "Delete author", "🗑️"),
        ("0", "Back", "←"),
    ]

    def __init__(self, context, payload=None) -> None:
        super().__init__(context, payload)
        self.authors: List[Author] = []

    async def load(self) -> None:
        try:
            self.authors = await self.api.list_authors()
        except APIError as e:
            alert(self.console, f"Error fetching authors: {e}", ok=False)

    async def show(self) -> bool:
        if not self.guard():
            return True
        await self.load()
        while True:
            table = Table(title="✍️ Authors", show_lines=True, header_style="bold cyan")
            table.add_column("ID", style="magenta", no_wrap=True)
            table.add_column("Name")
            table.add_column("Bio", style="dim")
            for author in self.authors:
                table.add_row(str(author.id), escape(author.name), escape(author.bio or "-"))
            self.console.print(table)
            render_menu(self.console, "Authors", self.MENU)
            choice = choose(self.console, self.MENU, default="0")
            if choice == "0":
                self.context.on_back()
                return True
            if choice == "1":
                await self.save(None)
            else:
                author = pick_by_id(self.console, "Author", self.authors)
                if author is None:
                    continue
                if choice == "2":
                    await self.save(author)
                else:
                    await self.delete(author)
            await self.load()

    async def save(self, author: Optional[Author]) -> None:
        name = Prompt.ask("Name", default=author.name if author else "", console=self.console)
        problem = CatalogValidator.validate_author(name)
        if problem:
            alert(self.console, problem, ok=False)
            return
        bio = Prompt.ask("Bio", default=(author.bio or "") if author else "", console=self.console)
        photo = await self.resolve_upload(
            "image", Prompt.ask("Photo (URL or local file)", default=(author.photo_url or "") if author else "", console=self.console)
        )
        if photo is None:
            return
        data = {"user_id": self.user.id, "name": name.strip(), "bio": bio.strip(), "photo_url": photo or None}
        try:
            if author:
                await self.api.update_author(author.id, data)
                alert(self.console, "Author updated successfully")
            else:
                await self.api.create_author(data)
                alert(self.console, "Author added successfully")
        except APIError:
            alert(self.console, "Failed to save author", ok=False)

    async def delete(self, author: Author) -> None:
        if not Confirm.ask(f"Delete author '{escape(author.name)}'?", default=False, console=self.console):
            return
        try:
            await self.api.delete_author(author.id, self.user.id)
            alert(self.console, "Author deleted")
        except APIError:
            alert(self.console, "Failed to delete author", ok=False)


class ManagePoemsView(AdminView):
    MENU = [
        ("1", "Add poem", "➕"),
        ("2", "Edit poem", "✏️"),
        ("3", "Delete poem", "🗑️"),
        ("4", "Add category", "🏷️"),
        ("0", "Back", "←"),
    ]

    def __init__(self, context, payload=None) -> None:
        super().__init__(context, payload)
        self.poems: List[Poem] = []
        self.categories: List[PoemCategory] = []
        self.authors: List[Author] = []

    async def load(self) -> None:
        try:
            self.poems = await self.api.list_poems()
            self.categories = await self.api.list_poem_categories()
            self.authors = await self.api.list_authors()
        except APIError:
            alert(self.console, "Failed to load data", ok=False)

    async def show(self) -> bool:
        if not self.guard():
            return True
        await self.load()
        while True:
            table = Table(title="📝 Manage Poems", show_lines=True, header_style="bold cyan")
            table.add_column("ID", style="magenta", no_wrap=True)
            table.add_column("Title")
            table.add_column("Author")
            table.add_column("Category")
            for poem in self.poems:
                table.add_row(str(poem.id), escape(poem.title), escape(poem.author_name or "-"), escape(poem.category_name or "-"))
            self.console.print(table)
            render_menu(self.console, "Poems", self.MENU)
            choice = choose(self.console, self.MENU, default="0")
            if choice == "0":
                self.context.on_back()
                return True
            if choice == "1":
                await self.save(None)
            elif choice == "4":
                await self.add_category()
            else:
                poem = pick_by_id(self.console, "Poem", self.poems)
                if poem is None:
                    continue
                if choice == "2":
                    await self.save(poem)
                else:
                    await self.delete(poem)
            await self.load()

    async def save(self, poem: Optional[Poem]) -> None:
        title = Prompt.ask("Title", default=poem.title if poem else "", console=self.console)
        self.console.print("[dim]Enter the poem; finish with a single '.' on its own line.[/]")
        if poem:
            self.console.print("[dim]Leave empty to keep the current text.[/]")
        lines: List[str] = []
        while True:
            line = self.console.input()
            if line.strip() == ".":
                break
            lines.append(line)
        content = "\n".join(lines) or (poem.content if poem else "")
        problem = CatalogValidator.validate_poem(title, content)
        if problem:
            alert(self.console, problem, ok=False)
            return

        if self.authors:
            self.console.print("Authors: " + ", ".join(f"{a.id}={escape(a.name)}" for a in self.authors))
        if self.categories:
            self.console.print("Categories: " + ", ".join(f"{c.id}={escape(c.name)}" for c in self.categories))
        author = Prompt.ask("Author id", default=str(poem.author or "") if poem else "", console=self.console)
        category = Prompt.ask("Category id", default=str(poem.category or "") if poem else "", console=self.console)
        language = Prompt.ask(
            "Language", default=(poem.language or settings.default_language) if poem else settings.default_language,
            console=self.console,
        )
        data = {
            "title": title.strip(),
            "content": content.strip(),
            "author": _optional_int(author),
            "category": _optional_int(category),
            "language": language,
            "user_id": self.user.id,
        }
        try:
            if poem:
                await self.api.update_poem(poem.id, data)
                alert(self.console, "Poem updated successfully")
            else:
                await self.api.create_poem(data)
                alert(self.console, "Poem added successfully")
        except APIError as e:
            alert(self.console, str(e), ok=False)

    async def delete(self, poem: Poem) -> None:
        if not Confirm.ask(f'Are you sure you want to delete "{escape(poem.title)}"?', default=False, console=self.console):
            return
        try:
            await self.api.delete_poem(poem.id, self.user.id)
            alert(self.console, "Poem deleted")
        except APIError:
            alert(self.console, "Failed to delete poem", ok=False)

    async def add_category(self) -> None:
        name = Prompt.ask("Category name", default="", console=self.console)
        problem = CatalogValidator.validate_category(name)
        if problem:
            alert(self.console, problem, ok=False)
            return
        icon = Prompt.ask("Icon", default="📝", console=self.console)
        description = Prompt.ask("Description", default="", console=self.console)
        try:
            await self.api.create_poem_category(name.strip(), self.user.id, icon=icon, description=description.strip())
            alert(self.console, "Category added successfully")
        except APIError:
            alert(self.console, "Failed to add category", ok=False)
