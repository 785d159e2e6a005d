"""Screen identifiers, typed navigation payloads and the back-navigation stack."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Type, Union

from mimanasa.models import Book

logger = logging.getLogger(__name__)


class Screen(str, Enum):
    HOME = "Home"
    PROFILE = "Profile"
    POEMS = "Poems"
    MANAGE_POEMS = "ManagePoems"
    BOOK_DETAIL = "BookDetail"
    READER = "Reader"
    ADMIN_PANEL = "AdminPanel"
    MANAGE_AUTHORS = "ManageAuthors"
    ADD_BOOK = "AddBook"
    EDIT_BOOK = "EditBook"

    @classmethod
    def parse(cls, value: Union["Screen", str, None]) -> Optional["Screen"]:
        """Return the matching member, or None for an unrecognized identifier."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class BookPayload:
    book: Book


ScreenPayload = Optional[BookPayload]
ScreenId = Union[Screen, str]

# Screens not listed here take no payload.
PAYLOAD_TYPES: Dict[Screen, Type[BookPayload]] = {
    Screen.BOOK_DETAIL: BookPayload,
    Screen.READER: BookPayload,
    Screen.EDIT_BOOK: BookPayload,
}


class InvalidPayloadError(ValueError):
    """Raised when a payload does not match the shape its screen expects."""
    pass


def check_payload(screen: Screen, payload: ScreenPayload) -> None:
    expected = PAYLOAD_TYPES.get(screen)
    if expected is None:
        if payload is not None:
            raise InvalidPayloadError(f"{screen.value} takes no payload, got {type(payload).__name__}")
        return
    if not isinstance(payload, expected):
        raise InvalidPayloadError(f"{screen.value} requires {expected.__name__}, got {type(payload).__name__}")


@dataclass(frozen=True)
class NavigationEntry:
    screen: ScreenId
    payload: ScreenPayload = None


class HistoryStack:
    """Last-in-first-out record of previously visited screens."""

    def __init__(self) -> None:
        self._entries: List[NavigationEntry] = []

    def push(self, entry: NavigationEntry) -> None:
        self._entries.append(entry)

    def pop(self) -> Optional[NavigationEntry]:
        if not self._entries:
            return None
        return self._entries.pop()

    def peek(self) -> Optional[NavigationEntry]:
        return self._entries[-1] if self._entries else None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __iter__(self) -> Iterator[NavigationEntry]:
        return iter(list(self._entries))


class NavigationController:
    """Tracks the visible screen and its history inside the logged-in area.

    ``navigate`` always pushes the current entry, even when the target is the
    same screen. ``back`` on an empty history lands on Home with no payload.
    """

    def __init__(self, home: Screen = Screen.HOME) -> None:
        self.home = home
        self.current_screen: ScreenId = home
        self.screen_payload: ScreenPayload = None
        self.history = HistoryStack()

    @property
    def current(self) -> NavigationEntry:
        return NavigationEntry(self.current_screen, self.screen_payload)

    def navigate(self, screen_id: ScreenId, payload: ScreenPayload = None) -> None:
        screen = Screen.parse(screen_id)
        if screen is None:
            # Kept as-is; the router renders Home for it.
            logger.warning(f"Navigating to unknown screen {screen_id!r}")
            target: ScreenId = screen_id
        else:
            check_payload(screen, payload)
            target = screen

        self.history.push(self.current)
        self.current_screen = target
        self.screen_payload = payload

    def back(self) -> NavigationEntry:
        previous = self.history.pop()
        if previous is None:
            self.current_screen = self.home
            self.screen_payload = None
        else:
            self.current_screen = previous.screen
            self.screen_payload = previous.payload
        return self.current

    def reset(self) -> None:
        self.history.clear()
        self.current_screen = self.home
        self.screen_payload = None
