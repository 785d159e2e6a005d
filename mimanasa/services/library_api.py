"""Client for the Mimanasa REST backend.

Failed calls raise :class:`APIError` carrying the message to show the user:
the server's ``error`` field when it sends one, otherwise a per-call fallback.
Transport failures raise :class:`NetworkError`.
"""

import json
import logging
import mimetypes
import os
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import ValidationError

from mimanasa.models import (
    Author,
    Book,
    Category,
    Genre,
    Poem,
    PoemCategory,
    Record,
    Review,
    UserSession,
)

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)

UNEXPECTED_RESPONSE = "Unexpected response from server"


class APIError(Exception):
    """A backend call failed; ``str(error)`` is safe to show to the user."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class NetworkError(APIError):
    """The request never produced an HTTP response."""
    pass


def _error_message(payload: Any, fallback: str, verbose: bool = False) -> str:
    if isinstance(payload, dict):
        error = payload.get("error") or payload.get("detail")
        if isinstance(error, str) and error.strip():
            return error
    if verbose and payload:
        return f"{fallback}:\n{json.dumps(payload, indent=2, ensure_ascii=False)}"
    return fallback


class LibraryAPI:
    """Thin async wrapper over the backend endpoints used by the app."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "LibraryAPI":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    # ------------------------- Transport ------------------------- #
    async def _request(self, method: str, path: str, *, fallback: str, verbose_errors: bool = False, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.warning(f"{method} {path} failed before a response: {e!r}")
            raise NetworkError(f"Network Error: {str(e) or type(e).__name__}") from e

        if response.is_error:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            logger.info(f"{method} {path} -> {response.status_code}")
            raise APIError(
                _error_message(payload, fallback, verbose_errors),
                status_code=response.status_code,
                payload=payload,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise APIError(UNEXPECTED_RESPONSE, status_code=response.status_code) from e

    @staticmethod
    def _parse(model: Type[R], data: Any) -> R:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error(f"Could not parse {model.__name__}: {e}")
            raise APIError(UNEXPECTED_RESPONSE, payload=data) from e

    @staticmethod
    def _parse_list(model: Type[R], data: Any) -> List[R]:
        # Paginated endpoints wrap rows in "results"
        if isinstance(data, dict) and "results" in data:
            data = data["results"]
        if not isinstance(data, list):
            raise APIError(UNEXPECTED_RESPONSE, payload=data)
        return [LibraryAPI._parse(model, item) for item in data]

    # ------------------------- Session lifecycle ------------------------- #
    async def login(self, email: str, password: str) -> UserSession:
        data = await self._request(
            "POST", "/app/login/",
            json={"email": email, "password": password},
            fallback="Login failed. Please check credentials.",
        )
        return self._parse(UserSession, data)

    async def register(self, email: str, username: str, password: str) -> UserSession:
        data = await self._request(
            "POST", "/app/register/",
            json={"email": email, "username": username, "password": password},
            fallback="Registration failed",
            verbose_errors=True,
        )
        return self._parse(UserSession, data)

    async def send_otp(self, email: str) -> None:
        await self._request(
            "POST", "/app/forgot-password/send-otp/",
            json={"email": email},
            fallback="Failed to send OTP",
        )

    async def verify_otp(self, email: str, otp: str) -> None:
        await self._request(
            "POST", "/app/forgot-password/verify-otp/",
            json={"email": email, "otp": otp},
            fallback="Invalid OTP",
        )

    async def reset_password(self, email: str, otp: str, new_password: str) -> None:
        await self._request(
            "POST", "/app/forgot-password/reset/",
            json={"email": email, "otp": otp, "new_password": new_password},
            fallback="Failed to reset password",
        )

    async def update_profile(self, user_id: int, username: str, email: str,
                             profile_photo: Optional[str] = None) -> UserSession:
        data = await self._request(
            "PUT", f"/app/profile/{user_id}/",
            json={"username": username, "email": email, "profile_photo": profile_photo},
            fallback="Failed to update profile",
        )
        return self._parse(UserSession, data)

    # ------------------------- Books ------------------------- #
    async def list_books(self, show_all: bool = False) -> List[Book]:
        params = {"show_all": "true"} if show_all else None
        data = await self._request("GET", "/books/", params=params, fallback="Failed to load books")
        return self._parse_list(Book, data)

    async def create_book(self, book_data: Dict[str, Any]) -> Optional[Book]:
        data = await self._request("POST", "/books/", json=book_data, fallback="Failed to save book")
        return self._parse(Book, data) if data else None

    async def update_book(self, book_id: int, book_data: Dict[str, Any]) -> Optional[Book]:
        data = await self._request("PUT", f"/books/{book_id}/", json=book_data, fallback="Failed to save book")
        return self._parse(Book, data) if data else None

    async def set_book_active(self, book_id: int, user_id: int, active: bool) -> None:
        await self._request(
            "PUT", f"/books/{book_id}/",
            json={"user_id": user_id, "is_active": active},
            fallback="Failed to update book status",
        )

    async def delete_book(self, book_id: int, user_id: int) -> None:
        await self._request(
            "DELETE", f"/books/{book_id}/",
            json={"user_id": user_id},
            fallback="Failed to delete book",
        )

    async def fetch_text(self, url: str) -> str:
        """Download plain-text book content (absolute URLs bypass the API base)."""
        try:
            response = await self._client.get(url)
        except httpx.RequestError as e:
            raise NetworkError(f"Network Error: {str(e) or type(e).__name__}") from e
        if response.is_error:
            raise APIError("Failed to load book content", status_code=response.status_code)
        return response.text

    # ------------------------- Authors ------------------------- #
    async def list_authors(self) -> List[Author]:
        data = await self._request("GET", "/authors/", fallback="Failed to load authors")
        return self._parse_list(Author, data)

    async def create_author(self, author_data: Dict[str, Any]) -> Optional[Author]:
        data = await self._request("POST", "/authors/", json=author_data, fallback="Failed to save author")
        return self._parse(Author, data) if data else None

    async def update_author(self, author_id: int, author_data: Dict[str, Any]) -> Optional[Author]:
        data = await self._request("PUT", f"/authors/{author_id}/", json=author_data, fallback="Failed to save author")
        return self._parse(Author, data) if data else None

    async def delete_author(self, author_id: int, user_id: int) -> None:
        await self._request(
            "DELETE", f"/authors/{author_id}/",
            json={"user_id": user_id},
            fallback="Failed to delete author",
        )

    # ------------------------- Taxonomies ------------------------- #
    async def list_categories(self) -> List[Category]:
        data = await self._request("GET", "/categories/", fallback="Failed to load categories")
        return self._parse_list(Category, data)

    async def list_genres(self) -> List[Genre]:
        data = await self._request("GET", "/genres/", fallback="Failed to load genres")
        return self._parse_list(Genre, data)

    # ------------------------- Poems ------------------------- #
    async def list_poems(self) -> List[Poem]:
        data = await self._request("GET", "/poems/", fallback="Failed to load poems")
        return self._parse_list(Poem, data)

    async def create_poem(self, poem_data: Dict[str, Any]) -> Optional[Poem]:
        data = await self._request("POST", "/poems/", json=poem_data, fallback="Failed to save poem")
        return self._parse(Poem, data) if data else None

    async def update_poem(self, poem_id: int, poem_data: Dict[str, Any]) -> Optional[Poem]:
        data = await self._request("PUT", f"/poems/{poem_id}/", json=poem_data, fallback="Failed to save poem")
        return self._parse(Poem, data) if data else None

    async def delete_poem(self, poem_id: int, user_id: int) -> None:
        await self._request(
            "DELETE", f"/poems/{poem_id}/",
            json={"user_id": user_id},
            fallback="Failed to delete poem",
        )

    async def list_poem_categories(self) -> List[PoemCategory]:
        data = await self._request("GET", "/poem-categories/", fallback="Failed to load categories")
        return self._parse_list(PoemCategory, data)

    async def create_poem_category(self, name: str, user_id: int, icon: str = "📝",
                                   description: str = "") -> Optional[PoemCategory]:
        data = await self._request(
            "POST", "/poem-categories/",
            json={"name": name, "icon": icon, "description": description, "user_id": user_id},
            fallback="Failed to add category",
        )
        return self._parse(PoemCategory, data) if data else None

    # ------------------------- Reviews ------------------------- #
    async def list_poem_reviews(self, poem_id: int) -> List[Review]:
        data = await self._request("GET", f"/poems/{poem_id}/reviews/", fallback="Failed to load reviews")
        return self._parse_list(Review, data)

    async def submit_poem_review(self, poem_id: int, user_id: int, rating: int, comment: str = "") -> None:
        await self._request(
            "POST", f"/poems/{poem_id}/reviews/",
            json={"user_id": user_id, "rating": rating, "comment": comment},
            fallback="Failed to submit review",
        )

    async def delete_poem_review(self, poem_id: int, user_id: int) -> None:
        await self._request(
            "DELETE", f"/poems/{poem_id}/reviews/user/",
            json={"user_id": user_id},
            fallback="Failed to delete review",
        )

    # ------------------------- Uploads ------------------------- #
    async def upload_file(self, kind: str, file_path: str) -> str:
        """Upload a local file to ``/upload/<kind>/`` and return the hosted URL.

        ``kind`` is one of ``image``, ``pdf`` or ``text``.
        """
        if kind not in ("image", "pdf", "text"):
            raise ValueError(f"Unsupported upload kind: {kind}")
        name = os.path.basename(file_path)
        mime = mimetypes.guess_type(name)[0] or "application/octet-stream"
        try:
            with open(file_path, "rb") as fh:
                content = fh.read()
        except OSError as e:
            raise APIError(f"Could not read {file_path}: {e.strerror or e}") from e

        data = await self._request(
            "POST", f"/upload/{kind}/",
            files={"file": (name, content, mime)},
            fallback=f"Failed to upload {kind}.",
        )
        if not isinstance(data, dict) or not data.get("url"):
            raise APIError(UNEXPECTED_RESPONSE, payload=data)
        return data["url"]
