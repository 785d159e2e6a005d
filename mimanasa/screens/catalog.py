"""Reader-facing views: home catalog, book detail, reader, poems and profile."""

from __future__ import annotations

import webbrowser
from typing import Iterable, List, Optional, Sequence, Set

from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from mimanasa.config import settings
from mimanasa.models import Author, Book, Category, Genre, Poem, Review
from mimanasa.navigation import BookPayload, Screen
from mimanasa.screens.base import View, alert, choose, pick_by_id, render_menu, show_result
from mimanasa.services.library_api import APIError
from mimanasa.validators import CatalogValidator


def filter_books(
    books: Iterable[Book],
    query: str = "",
    categories: Iterable[int] = (),
    authors: Iterable[int] = (),
    genres: Iterable[str] = (),
) -> List[Book]:
    """Apply the home-screen filters; each non-empty selection must match."""
    categories, authors, genres = set(categories), set(authors), set(genres)
    needle = query.strip().lower()
    result = []
    for book in books:
        if categories and book.category not in categories:
            continue
        if authors and book.author not in authors:
            continue
        if genres and book.genre not in genres:
            continue
        if needle:
            haystack = [book.title, book.author_name, book.category_name, book.genre_display]
            if not any(field and needle in field.lower() for field in haystack):
                continue
        result.append(book)
    return result


def books_table(books: Sequence[Book], title: str = "📚 Catalog") -> Table:
    table = Table(title=title, show_lines=True, header_style="bold cyan")
    table.add_column("ID", style="magenta", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Author", style="white")
    table.add_column("Category", style="dim")
    table.add_column("Genre", style="dim")
    for book in books:
        table.add_row(
            str(book.id),
            escape(book.title),
            escape(book.author_name or "-"),
            escape(book.category_name or "-"),
            escape(book.genre_display or "-"),
        )
    return table


class HomeView(View):
    title = "📚 Library"

    def __init__(self, context, payload=None) -> None:
        super().__init__(context, payload)
        self.books: List[Book] = []
        self.categories: List[Category] = []
        self.authors: List[Author] = []
        self.genres: List[Genre] = []
        self.query = ""
        self.selected_categories: Set[int] = set()
        self.selected_authors: Set[int] = set()
        self.selected_genres: Set[str] = set()

    def menu(self):
        items = [
            ("1", "Open a book", "📖"),
            ("2", "Search", "🔎"),
            ("3", "Filter by category", "🏷️"),
            ("4", "Filter by author", "✍️"),
            ("5", "Filter by genre", "🎭"),
            ("6", "Clear filters", "🧹"),
            ("7", "Poems", "📝"),
            ("8", "Profile", "👤"),
        ]
        if self.user and self.user.is_admin:
            items.append(("9", "Admin panel", "🛠️"))
        items += [("r", "Refresh", "🔄"), ("l", "Logout", "🚪"), ("0", "Quit", "❌")]
        return items

    async def load(self) -> None:
        with self.console.status("[bold green]Loading library..."):
            for attr, loader in (
                ("categories", self.api.list_categories),
                ("authors", self.api.list_authors),
                ("genres", self.api.list_genres),
                ("books", self.api.list_books),
            ):
                try:
                    setattr(self, attr, await loader())
                except APIError as e:
                    alert(self.console, f"Error fetching {attr}: {e}", ok=False)

    def visible_books(self) -> List[Book]:
        return filter_books(
            self.books, self.query, self.selected_categories, self.selected_authors, self.selected_genres
        )

    def _toggle(self, selected: Set, options: Sequence, label: str, key, name) -> None:
        table = Table(show_header=False, box=None)
        for option in options:
            mark = "[green]✓[/]" if key(option) in selected else " "
            table.add_row(mark, str(key(option)), escape(name(option)))
        self.console.print(table)
        raw = Prompt.ask(f"{label} to toggle (blank to finish)", default="", console=self.console).strip()
        for option in options:
            if str(key(option)) == raw:
                selected.symmetric_difference_update({key(option)})
                return

    async def show(self) -> bool:
        await self.load()
        while True:
            visible = self.visible_books()
            greeting = f"Hello, {self.user.username}" if self.user else None
            self.console.print(books_table(visible))
            if self.query or self.selected_categories or self.selected_authors or self.selected_genres:
                self.console.print(f"[dim]Showing {len(visible)} of {len(self.books)} books (filtered)[/]")
            render_menu(self.console, self.title, self.menu(), subtitle=greeting)
            choice = choose(self.console, self.menu(), default="1")

            if choice == "0":
                return False
            if choice == "l":
                await self.context.on_logout()
                return True
            if choice == "r":
                await self.load()
            elif choice == "1":
                book = pick_by_id(self.console, "Book", visible)
                if book:
                    self.context.on_navigate(Screen.BOOK_DETAIL, BookPayload(book))
                    return True
            elif choice == "2":
                self.query = Prompt.ask("Search books, authors, or genres", default=self.query, console=self.console)
            elif choice == "3":
                self._toggle(self.selected_categories, self.categories, "Category id", lambda c: c.id, lambda c: c.name)
            elif choice == "4":
                self._toggle(self.selected_authors, self.authors, "Author id", lambda a: a.id, lambda a: a.name)
            elif choice == "5":
                self._toggle(self.selected_genres, self.genres, "Genre", lambda g: g.value, lambda g: g.display)
            elif choice == "6":
                self.query = ""
                self.selected_categories.clear()
                self.selected_authors.clear()
                self.selected_genres.clear()
            elif choice == "7":
                self.context.on_navigate(Screen.POEMS, None)
                return True
            elif choice == "8":
                self.context.on_navigate(Screen.PROFILE, None)
                return True
            elif choice == "9":
                self.context.on_navigate(Screen.ADMIN_PANEL, None)
                return True


class BookDetailView(View):
    MENU = [("1", "Read", "📖"), ("0", "Back", "←")]

    @property
    def book(self) -> Book:
        return self.payload.book

    async def show(self) -> bool:
        book = self.book
        lines = [f"[bold]{escape(book.title)}[/]"]
        if book.author_name:
            lines.append(f"by {escape(book.author_name)}")
        meta = [m for m in (book.category_name, book.genre_display, book.language) if m]
        if meta:
            lines.append(" · ".join(escape(m) for m in meta))
        if book.published_year:
            lines.append(f"Published {book.published_year}")
        if book.is_paid and book.price is not None:
            lines.append(f"[yellow]Price: ₹{book.price:g}[/]")
        if book.description:
            lines.append("")
            lines.append(escape(book.description))
        self.console.print(Panel("\n".join(lines), title="📘 Book", border_style="blue"))

        render_menu(self.console, "Actions", self.MENU)
        if choose(self.console, self.MENU, default="1") == "0":
            self.context.on_back()
            return True

        if not book.content_url:
            alert(self.console, "No file available to read", ok=False)
        elif book.readable_in_app:
            self.context.on_navigate(Screen.READER, BookPayload(book))
        else:
            alert(self.console, "Opening file in browser...")
            webbrowser.open(book.content_url)
        return True


class ReaderView(View):
    """Pages plain-text content in the terminal; PDF and EPUB open in the browser."""

    @property
    def book(self) -> Book:
        return self.payload.book

    async def show(self) -> bool:
        book = self.book
        url = book.content_url or ""
        if not url.lower().split("?")[0].endswith(".txt"):
            self.console.print(f"[green]Opening [bold]{escape(book.title)}[/] in your browser...[/]")
            try:
                webbrowser.open(url)
            except webbrowser.Error:
                self.console.print(f"[yellow]Could not open a browser. Read it at:[/] {escape(url)}")
            Prompt.ask("Press Enter to return", default="", console=self.console)
            self.context.on_back()
            return True

        try:
            with self.console.status("[bold green]Loading book..."):
                text = await self.api.fetch_text(url)
        except APIError as e:
            alert(self.console, str(e), ok=False)
            self.context.on_back()
            return True

        lines = text.splitlines() or [""]
        per_page = max(1, settings.reader_page_lines)
        pages = [lines[i:i + per_page] for i in range(0, len(lines), per_page)]
        page = 0
        while True:
            self.console.print(Panel(
                escape("\n".join(pages[page])),
                title=escape(book.title),
                subtitle=f"Page {page + 1} / {len(pages)}",
                border_style="blue",
            ))
            action = Prompt.ask(r"\[n]ext, \[p]revious, \[q]uit", choices=["n", "p", "q"], default="n", console=self.console)
            if action == "q":
                self.context.on_back()
                return True
            if action == "n" and page < len(pages) - 1:
                page += 1
            elif action == "p" and page > 0:
                page -= 1


class PoemsView(View):
    MENU = [
        ("1", "Read a poem", "📖"),
        ("2", "Filter by category", "🏷️"),
        ("r", "Refresh", "🔄"),
        ("0", "Back", "←"),
    ]
    POEM_MENU = [
        ("1", "Write / edit my review", "⭐"),
        ("2", "Delete my review", "🗑️"),
        ("0", "Back to poems", "←"),
    ]

    def __init__(self, context, payload=None) -> None:
        super().__init__(context, payload)
        self.poems: List[Poem] = []
        self.categories = []
        self.category: Optional[int] = None

    async def load(self) -> None:
        try:
            with self.console.status("[bold green]Loading poems..."):
                self.categories = await self.api.list_poem_categories()
                self.poems = await self.api.list_poems()
        except APIError as e:
            alert(self.console, str(e), ok=False)

    def visible_poems(self) -> List[Poem]:
        if self.category is None:
            return self.poems
        return [p for p in self.poems if p.category == self.category]

    async def show(self) -> bool:
        await self.load()
        while True:
            table = Table(title="📝 Poems", show_lines=True, header_style="bold cyan")
            table.add_column("ID", style="magenta", no_wrap=True)
            table.add_column("Title")
            table.add_column("Author")
            table.add_column("Rating", justify="right")
            for poem in self.visible_poems():
                rating = f"{poem.average_rating:.1f}" if poem.average_rating is not None else "-"
                table.add_row(str(poem.id), escape(poem.title), escape(poem.author_name or "-"), rating)
            self.console.print(table)
            render_menu(self.console, "Poems", self.MENU)
            choice = choose(self.console, self.MENU, default="1")
            if choice == "0":
                self.context.on_back()
                return True
            if choice == "r":
                await self.load()
            elif choice == "2":
                for cat in self.categories:
                    self.console.print(f"  {cat.id}: {escape(cat.icon or '')} {escape(cat.name)}")
                raw = Prompt.ask("Category id (blank for all)", default="", console=self.console).strip()
                self.category = int(raw) if raw.isdigit() else None
            else:
                poem = pick_by_id(self.console, "Poem", self.visible_poems())
                if poem:
                    await self.read_poem(poem)

    async def read_poem(self, poem: Poem) -> None:
        while True:
            header = f"[bold]{escape(poem.title)}[/]"
            if poem.author_name:
                header += f"\n[dim]by {escape(poem.author_name)}[/]"
            self.console.print(Panel(f"{header}\n\n{escape(poem.content)}", border_style="magenta"))

            try:
                reviews = await self.api.list_poem_reviews(poem.id)
            except APIError as e:
                alert(self.console, f"Error loading reviews: {e}", ok=False)
                reviews = []
            mine = self.own_review(reviews)
            for review in reviews:
                stars = "★" * review.rating + "☆" * (5 - review.rating)
                who = review.username or f"user {review.user}"
                self.console.print(f"  [yellow]{stars}[/] {escape(who)}: {escape(review.comment or '')}")

            render_menu(self.console, "Poem", self.POEM_MENU)
            choice = choose(self.console, self.POEM_MENU, default="0")
            if choice == "0":
                return
            if choice == "1":
                await self.write_review(poem, mine)
            elif choice == "2":
                if mine is None:
                    alert(self.console, "You have not reviewed this poem yet", ok=False)
                    continue
                try:
                    await self.api.delete_poem_review(poem.id, self.user.id)
                    alert(self.console, "Review deleted successfully!")
                except APIError:
                    alert(self.console, "Failed to delete review", ok=False)

    def own_review(self, reviews: Sequence[Review]) -> Optional[Review]:
        if not self.user:
            return None
        return next((r for r in reviews if r.user == self.user.id), None)

    async def write_review(self, poem: Poem, existing: Optional[Review]) -> None:
        default_rating = existing.rating if existing else 5
        rating = IntPrompt.ask("Rating (1-5)", default=default_rating, console=self.console)
        problem = CatalogValidator.validate_rating(rating)
        if problem:
            alert(self.console, problem, ok=False)
            return
        comment = Prompt.ask("Comment", default=(existing.comment or "") if existing else "", console=self.console)
        try:
            await self.api.submit_poem_review(poem.id, self.user.id, rating, comment)
            alert(self.console, "Review submitted successfully!")
        except APIError:
            alert(self.console, "Failed to submit review", ok=False)


class ProfileView(View):
    MENU = [
        ("1", "Edit profile", "✏️"),
        ("2", "Upload profile photo", "📷"),
        ("0", "Back", "←"),
    ]

    async def show(self) -> bool:
        user = self.user
        self.console.print(Panel.fit(
            f"[bold]Username:[/] {escape(user.username)}\n"
            f"[bold]Email:[/] {escape(user.email)}\n"
            f"[bold]Role:[/] {'Admin' if user.is_admin else 'Reader'}\n"
            f"[bold]Photo:[/] {escape(user.profile_photo or '-')}",
            title="👤 Profile",
            border_style="blue",
        ))
        render_menu(self.console, "Profile", self.MENU)
        choice = choose(self.console, self.MENU, default="0")
        if choice == "0":
            self.context.on_back()
            return True

        photo = user.profile_photo
        if choice == "2":
            path = Prompt.ask("Path to image", console=self.console).strip()
            try:
                with self.console.status("[bold green]Uploading..."):
                    photo = await self.api.upload_file("image", path)
                alert(self.console, "✓ Profile photo uploaded!")
            except APIError as e:
                alert(self.console, str(e) or "Failed to upload photo.", ok=False)
                return True
            username, email = user.username, user.email
        else:
            username = Prompt.ask("Username", default=user.username, console=self.console)
            email = Prompt.ask("Email", default=user.email, console=self.console)

        if not Confirm.ask("Save changes?", default=True, console=self.console):
            return True
        with self.console.status("[bold green]Saving..."):
            result = await self.context.on_update_profile(username, email, photo)
        show_result(self.console, result)
        if result.ok:
            self.context.on_back()
        return True
