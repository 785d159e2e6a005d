import pytest

from mimanasa.config import settings
from mimanasa.models import Book
from mimanasa.screens.admin import build_book_data
from mimanasa.screens.catalog import filter_books


@pytest.fixture
def books():
    return [
        Book(id=1, title="Godaan", author=1, author_name="Premchand", category=1,
             category_name="Novel", genre="fiction", genre_display="Fiction"),
        Book(id=2, title="Madhushala", author=2, author_name="Harivansh Rai Bachchan", category=2,
             category_name="Poetry", genre="poetry", genre_display="Poetry"),
        Book(id=3, title="Nirmala", author=1, author_name="Premchand", category=1,
             category_name="Novel", genre="drama", genre_display="Drama"),
    ]


def ids(books):
    return [b.id for b in books]


def test_no_filters_returns_everything(books):
    assert ids(filter_books(books)) == [1, 2, 3]


def test_query_matches_title_author_and_genre(books):
    assert ids(filter_books(books, "madhu")) == [2]
    assert ids(filter_books(books, "  PREMCHAND ")) == [1, 3]
    assert ids(filter_books(books, "drama")) == [3]
    assert filter_books(books, "tagore") == []


def test_selections_combine(books):
    assert ids(filter_books(books, categories={1})) == [1, 3]
    assert ids(filter_books(books, categories={1}, genres={"fiction"})) == [1]
    assert ids(filter_books(books, authors={1, 2}, query="nir")) == [3]


def test_build_book_data_defaults():
    data = build_book_data(2, {"title": "  Gaban ", "author": 1})
    assert data["user_id"] == 2
    assert data["title"] == "Gaban"
    assert data["author"] == 1
    assert data["file_type"] == "pdf"
    assert data["language"] == settings.default_language
    assert data["is_paid"] is False
    assert data["price"] is None
    assert data["published_year"] is None


def test_build_book_data_paid():
    data = build_book_data(2, {"title": "Gaban", "is_paid": True, "price": "99.5", "published_year": "1931"})
    assert data["price"] == 99.5
    assert data["published_year"] == 1931


def test_build_book_data_price_ignored_for_free_books():
    assert build_book_data(2, {"title": "Gaban", "is_paid": False, "price": "10"})["price"] is None


def test_build_book_data_bad_price():
    with pytest.raises(ValueError):
        build_book_data(2, {"title": "Gaban", "is_paid": True, "price": "ten"})
