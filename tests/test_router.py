import pytest

from mimanasa.models import Book
from mimanasa.navigation import BookPayload, Screen
from mimanasa.router import ScreenRouter
from mimanasa.screens import BookFormView, HomeView, ReaderView
from mimanasa.shell import build_router


class Recorder:
    def __init__(self, screen):
        self.screen = screen

    def __call__(self, context, payload):
        return (self.screen, context, payload)


@pytest.fixture
def router():
    return ScreenRouter({screen: Recorder(screen) for screen in Screen})


def test_every_screen_needs_a_view():
    views = {screen: Recorder(screen) for screen in Screen if screen is not Screen.READER}
    with pytest.raises(ValueError, match="Reader"):
        ScreenRouter(views)


def test_known_screen_renders_its_view(router):
    book = Book(id=1, title="Godaan")
    screen, context, payload = router.build(Screen.READER, BookPayload(book), "ctx")
    assert screen is Screen.READER
    assert context == "ctx"
    assert payload.book is book


def test_string_identifier_resolves(router):
    assert router.build("ManageAuthors", None, None)[0] is Screen.MANAGE_AUTHORS


@pytest.mark.parametrize("screen_id", ["", "home", "Settings", "Book Detail"])
def test_unknown_identifier_falls_back_to_home(router, screen_id):
    screen, _, payload = router.build(screen_id, None, None)
    assert screen is Screen.HOME
    assert payload is None


def test_unknown_identifier_drops_payload(router):
    screen, _, payload = router.build("Nope", BookPayload(Book(id=1, title="x")), None)
    assert screen is Screen.HOME
    assert payload is None


def test_missing_payload_falls_back_to_home(router):
    assert router.build(Screen.EDIT_BOOK, None, None)[0] is Screen.HOME


def test_resolve(router):
    assert router.resolve("Poems") is Screen.POEMS
    assert router.resolve("Poetry") is Screen.HOME


def test_app_router_covers_every_screen():
    router = build_router()
    book = Book(id=1, title="Godaan")
    assert isinstance(router.build("Home", None, None), HomeView)
    assert isinstance(router.build(Screen.READER, BookPayload(book), None), ReaderView)
    add = router.build(Screen.ADD_BOOK, None, None)
    edit = router.build(Screen.EDIT_BOOK, BookPayload(book), None)
    assert isinstance(add, BookFormView) and add.book is None
    assert isinstance(edit, BookFormView) and edit.book is book
