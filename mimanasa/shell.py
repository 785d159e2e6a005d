"""Interactive terminal loop: splash, then the logged-out or logged-in views."""

import logging
from typing import Mapping, Optional, Type

from rich.console import Console

from mimanasa.controller import AppController, AuthScreen
from mimanasa.navigation import Screen
from mimanasa.router import ScreenRouter
from mimanasa.screens import (
    AUTH_VIEWS,
    AdminPanelView,
    BookDetailView,
    BookFormView,
    HomeView,
    ManageAuthorsView,
    ManagePoemsView,
    PoemsView,
    ProfileView,
    ReaderView,
    ScreenContext,
    SplashView,
)
from mimanasa.screens.auth import AuthView

logger = logging.getLogger(__name__)


def build_router() -> ScreenRouter:
    return ScreenRouter({
        Screen.HOME: HomeView,
        Screen.PROFILE: ProfileView,
        Screen.POEMS: PoemsView,
        Screen.MANAGE_POEMS: ManagePoemsView,
        Screen.BOOK_DETAIL: BookDetailView,
        Screen.READER: ReaderView,
        Screen.ADMIN_PANEL: AdminPanelView,
        Screen.MANAGE_AUTHORS: ManageAuthorsView,
        Screen.ADD_BOOK: BookFormView,
        Screen.EDIT_BOOK: BookFormView,
    })


def build_context(controller: AppController, console: Console) -> ScreenContext:
    return ScreenContext(
        user=controller.session,
        api=controller.api,
        console=console,
        on_back=controller.back,
        on_navigate=controller.navigate,
        on_logout=controller.logout,
        on_update_profile=controller.update_profile,
    )


async def run_app(
    controller: AppController,
    console: Console,
    router: Optional[ScreenRouter] = None,
    auth_views: Mapping[AuthScreen, Type[AuthView]] = AUTH_VIEWS,
) -> None:
    """Drive the app until a view asks to quit."""
    router = router or build_router()
    SplashView(console, controller.config.app_name, controller.config.app_version).show()
    with console.status("[bold green]Loading..."):
        await controller.boot()

    while True:
        if controller.logged_in:
            nav = controller.navigation
            view = router.build(nav.current_screen, nav.screen_payload, build_context(controller, console))
        else:
            view = auth_views[controller.auth_screen](controller, console)
        logger.debug(f"Showing {type(view).__name__}")
        if not await view.show():
            break
    console.print("[green]Goodbye![/]")
