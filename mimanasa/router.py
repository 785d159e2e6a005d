import logging
from typing import Any, Callable, Mapping

from mimanasa.navigation import InvalidPayloadError, Screen, ScreenId, ScreenPayload, check_payload

logger = logging.getLogger(__name__)

ViewFactory = Callable[..., Any]


class ScreenRouter:
    """Maps the current screen identifier to the view that renders it.

    Every ``Screen`` member must have a view. Identifiers outside the
    enumeration, or payloads that do not fit their screen, render the
    fallback screen with no payload.
    """

    def __init__(self, views: Mapping[Screen, ViewFactory], fallback: Screen = Screen.HOME) -> None:
        missing = [s.value for s in Screen if s not in views]
        if missing:
            raise ValueError(f"No view registered for: {', '.join(missing)}")
        self._views = dict(views)
        self.fallback = fallback

    def resolve(self, screen_id: ScreenId) -> Screen:
        screen = Screen.parse(screen_id)
        if screen is None:
            logger.debug(f"Unknown screen {screen_id!r}, falling back to {self.fallback.value}")
            return self.fallback
        return screen

    def build(self, screen_id: ScreenId, payload: ScreenPayload, context: Any) -> Any:
        screen = self.resolve(screen_id)
        if screen is not Screen.parse(screen_id):
            payload = None
        try:
            check_payload(screen, payload)
        except InvalidPayloadError as e:
            logger.debug(f"{e}; falling back to {self.fallback.value}")
            screen, payload = self.fallback, None
        return self._views[screen](context, payload)

