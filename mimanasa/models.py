from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PrivateAttr, model_validator


class Record(BaseModel):
    """Base for every record returned by the backend; unknown fields are kept verbatim."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class UserSession(Record):
    """The authenticated user's identity, persisted under a single storage key."""

    id: int
    email: str
    username: str
    is_admin: bool = Field(default=False, validation_alias=AliasChoices("is_admin", "isAdmin"))
    profile_photo: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("profile_photo", "profilePhoto")
    )
    _raw: Optional[Dict[str, Any]] = PrivateAttr(default=None)

    @model_validator(mode="wrap")
    @classmethod
    def _keep_raw(cls, data: Any, handler: Any) -> "UserSession":
        session = handler(data)
        if isinstance(data, dict):
            session._raw = dict(data)
        return session

    def to_record(self) -> Dict[str, Any]:
        """The record exactly as the backend sent it, key casing included."""
        if self._raw is not None:
            return dict(self._raw)
        return super().to_record()

    def __str__(self) -> str:
        role = "admin" if self.is_admin else "reader"
        return f"{self.username} <{self.email}> ({role})"


class Author(Record):
    id: int
    name: str
    bio: Optional[str] = None
    photo_url: Optional[str] = None


class Category(Record):
    id: int
    name: str


class Genre(Record):
    # /genres/ returns choice pairs rather than rows
    value: str
    label: Optional[str] = None

    @property
    def display(self) -> str:
        return self.label or self.value


class Book(Record):
    id: int
    title: str
    description: Optional[str] = None
    author: Optional[int] = None
    author_name: Optional[str] = None
    category: Optional[int] = None
    category_name: Optional[str] = None
    genre: Optional[str] = None
    genre_display: Optional[str] = None
    file_type: Optional[str] = None
    cover_image_url: Optional[str] = None
    content_url: Optional[str] = None
    language: Optional[str] = None
    is_paid: bool = False
    price: Optional[float] = None
    published_year: Optional[int] = None
    is_active: bool = True

    def __str__(self) -> str:
        by = f" by {self.author_name}" if self.author_name else ""
        return f"{self.title}{by}"

    @property
    def readable_in_app(self) -> bool:
        """PDF, EPUB and plain-text content opens in the reader; anything else goes to the browser."""
        url = (self.content_url or "").lower().split("?")[0]
        return url.endswith((".pdf", ".epub", ".txt"))


class PoemCategory(Record):
    id: int
    name: str
    icon: Optional[str] = None
    description: Optional[str] = None


class Poem(Record):
    id: int
    title: str
    content: str = ""
    author: Optional[int] = None
    author_name: Optional[str] = None
    category: Optional[int] = None
    category_name: Optional[str] = None
    language: Optional[str] = None
    average_rating: Optional[float] = None


class Review(Record):
    id: Optional[int] = None
    user: Optional[int] = Field(default=None, validation_alias=AliasChoices("user", "user_id"))
    username: Optional[str] = None
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None
    created_at: Optional[str] = None
