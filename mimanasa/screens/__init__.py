"""Terminal views for every screen of the app.

- auth: splash, login, registration and password recovery
- catalog: home, book detail, reader, poems and profile
- admin: admin panel, book form, author and poem management
"""

from mimanasa.screens.admin import AdminPanelView, BookFormView, ManageAuthorsView, ManagePoemsView
from mimanasa.screens.auth import AUTH_VIEWS, SplashView
from mimanasa.screens.base import ScreenContext, View
from mimanasa.screens.catalog import BookDetailView, HomeView, PoemsView, ProfileView, ReaderView

__all__ = [
    "AUTH_VIEWS",
    "AdminPanelView",
    "BookDetailView",
    "BookFormView",
    "HomeView",
    "ManageAuthorsView",
    "ManagePoemsView",
    "PoemsView",
    "ProfileView",
    "ReaderView",
    "ScreenContext",
    "SplashView",
    "View",
]
