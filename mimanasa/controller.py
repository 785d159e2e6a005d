"""Authentication gate and navigation owner for the whole app.

One ``AppController`` is created per run and handed to the screens through
callbacks. It is the only place where the session, the navigation history
and the recovery flow change. Network-backed operations return an
``ActionResult``; on failure nothing moves.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from mimanasa.config import Settings, settings as default_settings
from mimanasa.models import UserSession
from mimanasa.navigation import NavigationController, NavigationEntry, ScreenId, ScreenPayload
from mimanasa.recovery import (
    AwaitingEmail,
    AwaitingNewPassword,
    AwaitingOTP,
    Inactive,
    InvalidTransitionError,
    RecoveryFlow,
)
from mimanasa.services.library_api import APIError, LibraryAPI
from mimanasa.session import SessionManager
from mimanasa.validators import AuthValidator

logger = logging.getLogger(__name__)


class AuthPhase(str, Enum):
    BOOTING = "booting"
    LOGGED_OUT = "logged_out"
    LOGGED_IN = "logged_in"


class AuthScreen(str, Enum):
    LOGIN = "Login"
    REGISTER = "Register"
    FORGOT_PASSWORD = "ForgotPassword"
    VERIFY_OTP = "VerifyOTP"
    RESET_PASSWORD = "ResetPassword"


@dataclass(frozen=True)
class ActionResult:
    ok: bool
    message: Optional[str] = None

    @classmethod
    def success(cls, message: Optional[str] = None) -> "ActionResult":
        return cls(True, message)

    @classmethod
    def failure(cls, message: str) -> "ActionResult":
        return cls(False, message)


class AppController:
    def __init__(
        self,
        api: LibraryAPI,
        sessions: SessionManager,
        navigation: Optional[NavigationController] = None,
        recovery: Optional[RecoveryFlow] = None,
        config: Optional[Settings] = None,
    ) -> None:
        self.api = api
        self.sessions = sessions
        self.navigation = navigation or NavigationController()
        self.recovery = recovery or RecoveryFlow()
        self.config = config or default_settings

        self.phase = AuthPhase.BOOTING
        self.session: Optional[UserSession] = None
        self._show_login = True

    # ------------------------- Derived state ------------------------- #
    @property
    def logged_in(self) -> bool:
        return self.phase is AuthPhase.LOGGED_IN

    @property
    def auth_screen(self) -> Optional[AuthScreen]:
        """Which logged-out view is active; None outside the logged-out phase."""
        if self.phase is not AuthPhase.LOGGED_OUT:
            return None
        state = self.recovery.state
        if isinstance(state, AwaitingEmail):
            return AuthScreen.FORGOT_PASSWORD
        if isinstance(state, AwaitingOTP):
            return AuthScreen.VERIFY_OTP
        if isinstance(state, AwaitingNewPassword):
            return AuthScreen.RESET_PASSWORD
        return AuthScreen.LOGIN if self._show_login else AuthScreen.REGISTER

    def _require_phase(self, phase: AuthPhase) -> None:
        if self.phase is not phase:
            raise InvalidTransitionError(f"Operation requires {phase.value}, controller is {self.phase.value}")

    # ------------------------- Boot ------------------------- #
    async def boot(self) -> AuthPhase:
        self._require_phase(AuthPhase.BOOTING)
        session = await self.sessions.load_session()
        if session is not None:
            self._enter_logged_in(session)
            logger.info(f"Restored session for user id={session.id}")
        else:
            self._enter_logged_out()
        return self.phase

    def _enter_logged_in(self, session: UserSession) -> None:
        self.session = session
        self.phase = AuthPhase.LOGGED_IN
        self.recovery.cancel()
        self.navigation.reset()

    def _enter_logged_out(self) -> None:
        self.session = None
        self.phase = AuthPhase.LOGGED_OUT
        self.recovery.cancel()
        self.navigation.reset()
        self._show_login = True

    # ------------------------- Login / registration ------------------------- #
    async def login(self, email: str, password: str) -> ActionResult:
        self._require_phase(AuthPhase.LOGGED_OUT)
        self.recovery.require(Inactive)
        problem = AuthValidator.validate_login(email, password)
        if problem:
            return ActionResult.failure(problem)

        try:
            session = await self.api.login(email.strip(), password)
        except APIError as e:
            logger.info(f"Login rejected: {e}")
            return ActionResult.failure(str(e))

        # Persistence is awaited before the login is acknowledged
        await self.sessions.save_session(session)
        self._enter_logged_in(session)
        logger.info(f"User id={session.id} logged in")
        return ActionResult.success()

    async def register(self, email: str, username: str, password: str) -> ActionResult:
        self._require_phase(AuthPhase.LOGGED_OUT)
        self.recovery.require(Inactive)
        problem = AuthValidator.validate_registration(email, username, password)
        if problem:
            return ActionResult.failure(problem)

        try:
            session = await self.api.register(email.strip(), username.strip(), password)
        except APIError as e:
            logger.info(f"Registration rejected: {e}")
            return ActionResult.failure(str(e))

        await self.sessions.save_session(session)
        self._enter_logged_in(session)
        logger.info(f"User id={session.id} registered")
        return ActionResult.success("✓ Registered successfully!")

    def show_register(self) -> None:
        self._require_phase(AuthPhase.LOGGED_OUT)
        self.recovery.require(Inactive)
        self._show_login = False

    def show_login(self) -> None:
        self._require_phase(AuthPhase.LOGGED_OUT)
        self.recovery.require(Inactive)
        self._show_login = True

    # ------------------------- Password recovery ------------------------- #
    def forgot_password(self) -> None:
        self._require_phase(AuthPhase.LOGGED_OUT)
        self.recovery.begin()

    async def send_otp(self, email: str) -> ActionResult:
        self._require_phase(AuthPhase.LOGGED_OUT)
        self.recovery.require(AwaitingEmail)
        problem = AuthValidator.validate_recovery_email(email)
        if problem:
            return ActionResult.failure(problem)

        email = email.strip()
        try:
            await self.api.send_otp(email)
        except APIError as e:
            return ActionResult.failure(str(e))

        self.recovery.otp_sent(email)
        return ActionResult.success("✓ OTP sent to your email!")

    async def resend_otp(self) -> ActionResult:
        self._require_phase(AuthPhase.LOGGED_OUT)
        state = self.recovery.require(AwaitingOTP)
        try:
            await self.api.send_otp(state.email)
        except APIError:
            return ActionResult.failure("Failed to resend OTP")
        return ActionResult.success("✓ OTP resent to your email!")

    async def verify_otp(self, otp: str) -> ActionResult:
        self._require_phase(AuthPhase.LOGGED_OUT)
        state = self.recovery.require(AwaitingOTP)
        problem = AuthValidator.validate_otp(otp, self.config.otp_length)
        if problem:
            return ActionResult.failure(problem)

        otp = otp.strip()
        try:
            await self.api.verify_otp(state.email, otp)
        except APIError as e:
            return ActionResult.failure(str(e))

        self.recovery.otp_verified(otp)
        return ActionResult.success()

    async def reset_password(self, new_password: str, confirm_password: str) -> ActionResult:
        self._require_phase(AuthPhase.LOGGED_OUT)
        state = self.recovery.require(AwaitingNewPassword)
        problem = AuthValidator.validate_new_password(
            new_password, confirm_password, self.config.min_password_length
        )
        if problem:
            return ActionResult.failure(problem)

        try:
            await self.api.reset_password(state.email, state.otp, new_password)
        except APIError as e:
            return ActionResult.failure(str(e))

        self.recovery.complete()
        self._show_login = True
        return ActionResult.success("✓ Password reset successfully!")

    def back_to_login(self) -> None:
        self._require_phase(AuthPhase.LOGGED_OUT)
        self.recovery.cancel()
        self._show_login = True

    # ------------------------- Logged-in operations ------------------------- #
    async def logout(self) -> None:
        self._require_phase(AuthPhase.LOGGED_IN)
        user_id = self.session.id if self.session else None
        self._enter_logged_out()
        await self.sessions.clear_session()
        logger.info(f"User id={user_id} logged out")

    async def update_profile(self, username: str, email: str,
                             profile_photo: Optional[str] = None) -> ActionResult:
        self._require_phase(AuthPhase.LOGGED_IN)
        problem = AuthValidator.validate_profile(username, email)
        if problem:
            return ActionResult.failure(problem)

        try:
            updated = await self.api.update_profile(
                self.session.id, username.strip(), email.strip(), profile_photo
            )
        except APIError as e:
            return ActionResult.failure(str(e))

        self.session = updated
        await self.sessions.save_session(updated)
        return ActionResult.success("Profile updated successfully!")

    def navigate(self, screen_id: ScreenId, payload: ScreenPayload = None) -> None:
        self._require_phase(AuthPhase.LOGGED_IN)
        self.navigation.navigate(screen_id, payload)

    def back(self) -> NavigationEntry:
        self._require_phase(AuthPhase.LOGGED_IN)
        return self.navigation.back()
