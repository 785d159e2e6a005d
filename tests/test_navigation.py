import pytest

from mimanasa.models import Book
from mimanasa.navigation import (
    BookPayload,
    HistoryStack,
    InvalidPayloadError,
    NavigationController,
    NavigationEntry,
    Screen,
    check_payload,
)


@pytest.fixture
def book():
    return Book(id=7, title="Godaan", content_url="https://cdn.example.com/godaan.pdf")


@pytest.fixture
def nav():
    return NavigationController()


def test_starts_on_home_with_empty_history(nav):
    assert nav.current_screen is Screen.HOME
    assert nav.screen_payload is None
    assert len(nav.history) == 0


def test_navigate_pushes_previous_entry(nav, book):
    nav.navigate(Screen.BOOK_DETAIL, BookPayload(book))
    nav.navigate(Screen.READER, BookPayload(book))

    assert nav.current_screen is Screen.READER
    assert [e.screen for e in nav.history] == [Screen.HOME, Screen.BOOK_DETAIL]
    assert nav.history.peek() == NavigationEntry(Screen.BOOK_DETAIL, BookPayload(book))


def test_back_restores_screen_and_payload(nav, book):
    nav.navigate(Screen.BOOK_DETAIL, BookPayload(book))
    nav.navigate(Screen.READER, BookPayload(book))

    entry = nav.back()
    assert entry.screen is Screen.BOOK_DETAIL
    assert nav.screen_payload.book.id == 7

    nav.back()
    assert nav.current_screen is Screen.HOME
    assert nav.screen_payload is None
    assert len(nav.history) == 0


def test_back_on_empty_history_lands_on_home(nav):
    nav.back()
    assert nav.current == NavigationEntry(Screen.HOME, None)
    nav.back()
    assert nav.current == NavigationEntry(Screen.HOME, None)


def test_navigating_to_same_screen_still_pushes(nav):
    nav.navigate(Screen.POEMS)
    nav.navigate(Screen.POEMS)
    assert len(nav.history) == 2

    nav.back()
    assert nav.current_screen is Screen.POEMS
    nav.back()
    assert nav.current_screen is Screen.HOME


def test_push_pop_counts_balance(nav, book):
    for screen in (Screen.PROFILE, Screen.POEMS, Screen.ADMIN_PANEL):
        nav.navigate(screen)
    nav.navigate(Screen.EDIT_BOOK, BookPayload(book))
    assert len(nav.history) == 4
    for expected in (3, 2, 1, 0, 0):
        nav.back()
        assert len(nav.history) == expected


def test_string_identifiers_are_normalized(nav):
    nav.navigate("Profile")
    assert nav.current_screen is Screen.PROFILE


def test_unknown_identifier_is_kept_as_is(nav):
    nav.navigate("NoSuchScreen")
    assert nav.current_screen == "NoSuchScreen"
    assert nav.back().screen is Screen.HOME


def test_mismatched_payload_is_rejected_without_moving(nav, book):
    with pytest.raises(InvalidPayloadError):
        nav.navigate(Screen.READER)
    with pytest.raises(InvalidPayloadError):
        nav.navigate(Screen.PROFILE, BookPayload(book))

    assert nav.current_screen is Screen.HOME
    assert len(nav.history) == 0


def test_reset_clears_history(nav, book):
    nav.navigate(Screen.BOOK_DETAIL, BookPayload(book))
    nav.navigate(Screen.PROFILE)
    nav.reset()
    assert nav.current == NavigationEntry(Screen.HOME, None)
    assert not nav.history


def test_screen_parse():
    assert Screen.parse("BookDetail") is Screen.BOOK_DETAIL
    assert Screen.parse(Screen.HOME) is Screen.HOME
    assert Screen.parse("bookdetail") is None
    assert Screen.parse(None) is None


def test_check_payload(book):
    check_payload(Screen.BOOK_DETAIL, BookPayload(book))
    check_payload(Screen.HOME, None)
    with pytest.raises(InvalidPayloadError):
        check_payload(Screen.EDIT_BOOK, {"book": book})


def test_history_stack_basics():
    stack = HistoryStack()
    assert stack.pop() is None
    assert stack.peek() is None

    stack.push(NavigationEntry(Screen.HOME))
    stack.push(NavigationEntry(Screen.POEMS))
    assert len(stack) == 2
    assert stack.pop().screen is Screen.POEMS
    assert stack.pop().screen is Screen.HOME
    assert not stack
