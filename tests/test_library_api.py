import asyncio

import httpx
import pytest

from mimanasa.models import Book, Genre
from mimanasa.services.library_api import UNEXPECTED_RESPONSE, APIError, NetworkError, _error_message


def run(coro):
    return asyncio.run(coro)


def test_error_message_prefers_error_then_detail():
    assert _error_message({"error": "Nope"}, "fallback") == "Nope"
    assert _error_message({"detail": "Not found."}, "fallback") == "Not found."
    assert _error_message({"error": "  "}, "fallback") == "fallback"
    assert _error_message(None, "fallback") == "fallback"
    assert _error_message({"email": ["taken"]}, "fallback") == "fallback"
    assert "taken" in _error_message({"email": ["taken"]}, "fallback", verbose=True)


def test_login_returns_user(api):
    user = run(api.login("admin@example.com", "secret2"))
    assert user.id == 2
    assert user.is_admin is True


def test_login_failure_carries_status(api):
    with pytest.raises(APIError) as exc:
        run(api.login("admin@example.com", "nope"))
    assert exc.value.status_code == 401
    assert str(exc.value) == "Invalid email or password"
    assert exc.value.payload == {"error": "Invalid email or password"}


def test_network_failure(offline_api):
    with pytest.raises(NetworkError) as exc:
        run(offline_api.list_books())
    assert str(exc.value).startswith("Network Error:")
    assert exc.value.status_code is None


def test_network_failure_without_message_names_the_error(make_api):
    def refuse(request):
        raise httpx.ConnectError("", request=request)

    api = make_api(httpx.MockTransport(refuse))
    with pytest.raises(NetworkError) as exc:
        run(api.list_books())
    assert str(exc.value) == "Network Error: ConnectError"

    with pytest.raises(NetworkError) as exc:
        run(api.fetch_text("http://testserver/media/madhushala.txt"))
    assert str(exc.value) == "Network Error: ConnectError"


def test_malformed_success_body(make_api):
    api = make_api(httpx.MockTransport(lambda request: httpx.Response(200, text="<html>")))
    with pytest.raises(APIError, match=UNEXPECTED_RESPONSE):
        run(api.list_authors())


def test_wrong_shape_is_rejected(make_api):
    api = make_api(httpx.MockTransport(lambda request: httpx.Response(200, json={"id": "x"})))
    with pytest.raises(APIError, match=UNEXPECTED_RESPONSE):
        run(api.login("a@b.com", "pw"))
    with pytest.raises(APIError, match=UNEXPECTED_RESPONSE):
        run(api.list_books())


def test_requests_target_api_base(make_api):
    seen = []

    def backend(request):
        seen.append((request.method, str(request.url)))
        return httpx.Response(200, json=[])

    run(make_api(httpx.MockTransport(backend)).list_books(show_all=True))
    assert seen == [("GET", "http://testserver/api/books/?show_all=true")]


def test_list_books_hides_inactive_unless_show_all(api):
    assert [b.title for b in run(api.list_books())] == ["Godaan", "Madhushala"]
    assert len(run(api.list_books(show_all=True))) == 3


def test_paginated_results_are_unwrapped(api):
    assert [c.name for c in run(api.list_categories())] == ["Novel", "Poetry"]


def test_genres(api):
    assert run(api.list_genres())[0] == Genre(value="fiction", label="Fiction")
    assert Genre(value="drama").display == "drama"


def test_book_crud_round(api, stub_app):
    created = run(api.create_book({"user_id": 2, "title": "Gaban", "author": 1}))
    assert created.title == "Gaban"
    assert created.is_active

    run(api.set_book_active(created.id, 2, False))
    assert not next(b for b in stub_app.state.db["books"] if b["id"] == created.id)["is_active"]

    updated = run(api.update_book(created.id, {"user_id": 2, "title": "Gaban (2nd ed.)"}))
    assert updated.title == "Gaban (2nd ed.)"

    assert run(api.delete_book(created.id, 2)) is None
    assert all(b["id"] != created.id for b in stub_app.state.db["books"])


def test_book_write_requires_admin(api):
    with pytest.raises(APIError, match="Admin access required") as exc:
        run(api.delete_book(1, 1))
    assert exc.value.status_code == 403


def test_authors(api):
    created = run(api.create_author({"user_id": 2, "name": "Mahadevi Varma"}))
    assert created.id == 3
    run(api.delete_author(created.id, 2))
    with pytest.raises(APIError, match="Author not found"):
        run(api.delete_author(created.id, 2))


def test_poems_and_reviews(api):
    poems = run(api.list_poems())
    assert poems[0].title == "Agneepath"

    reviews = run(api.list_poem_reviews(1))
    assert reviews[0].user == 2 and reviews[0].rating == 5

    run(api.submit_poem_review(1, 1, 4, "Stirring"))
    with pytest.raises(APIError, match="already reviewed"):
        run(api.submit_poem_review(1, 1, 3))

    run(api.delete_poem_review(1, 1))
    assert [r.user for r in run(api.list_poem_reviews(1))] == [2]


def test_poem_category_defaults(api, stub_app):
    category = run(api.create_poem_category("Love", 2))
    assert category.icon == "📝"
    assert stub_app.state.db["poem_categories"][-1] == {"name": "Love", "icon": "📝", "description": "", "id": 2}


def test_fetch_text_uses_absolute_url(api):
    text = run(api.fetch_text("http://testserver/media/madhushala.txt"))
    assert text.splitlines()[0] == "line 1"
    with pytest.raises(APIError, match="Failed to load book content"):
        run(api.fetch_text("http://testserver/media/missing.txt"))


def test_upload_file(api, stub_app, tmp_path):
    cover = tmp_path / "cover.png"
    cover.write_bytes(b"\x89PNG")
    url = run(api.upload_file("image", str(cover)))
    assert url == "http://testserver/media/cover.png"
    assert stub_app.state.db["uploads"] == [("image", "cover.png")]


def test_upload_rejects_unknown_kind_and_missing_file(api, tmp_path):
    with pytest.raises(ValueError):
        run(api.upload_file("video", str(tmp_path / "a.mp4")))
    with pytest.raises(APIError, match="Could not read"):
        run(api.upload_file("pdf", str(tmp_path / "missing.pdf")))


def test_upload_without_url_in_response(make_api, tmp_path):
    doc = tmp_path / "doc.pdf"
    doc.write_bytes(b"%PDF")
    api = make_api(httpx.MockTransport(lambda request: httpx.Response(200, json={"ok": True})))
    with pytest.raises(APIError, match=UNEXPECTED_RESPONSE):
        run(api.upload_file("pdf", str(doc)))


def test_readable_in_app():
    assert Book(id=1, title="a", content_url="https://x/a.PDF").readable_in_app
    assert Book(id=1, title="a", content_url="https://x/a.txt?dl=1").readable_in_app
    assert not Book(id=1, title="a", content_url="https://x/a.docx").readable_in_app
    assert not Book(id=1, title="a").readable_in_app
