"""Forgot-password flow: email, then OTP, then new password."""

import logging
from dataclasses import dataclass
from typing import Type, Union

logger = logging.getLogger(__name__)


class InvalidTransitionError(Exception):
    """Raised when an operation is attempted from the wrong state."""
    pass


@dataclass(frozen=True)
class Inactive:
    pass


@dataclass(frozen=True)
class AwaitingEmail:
    pass


@dataclass(frozen=True)
class AwaitingOTP:
    email: str


@dataclass(frozen=True)
class AwaitingNewPassword:
    email: str
    otp: str


RecoveryState = Union[Inactive, AwaitingEmail, AwaitingOTP, AwaitingNewPassword]


class RecoveryFlow:
    """Owns the recovery state; it only moves one stage forward or resets."""

    def __init__(self) -> None:
        self.state: RecoveryState = Inactive()

    @property
    def active(self) -> bool:
        return not isinstance(self.state, Inactive)

    def require(self, expected: Type[RecoveryState]) -> RecoveryState:
        if not isinstance(self.state, expected):
            raise InvalidTransitionError(
                f"Recovery flow is {type(self.state).__name__}, expected {expected.__name__}"
            )
        return self.state

    def begin(self) -> None:
        self.require(Inactive)
        self.state = AwaitingEmail()

    def otp_sent(self, email: str) -> None:
        self.require(AwaitingEmail)
        self.state = AwaitingOTP(email=email)

    def otp_verified(self, otp: str) -> None:
        current = self.require(AwaitingOTP)
        self.state = AwaitingNewPassword(email=current.email, otp=otp)

    def complete(self) -> None:
        self.require(AwaitingNewPassword)
        self.state = Inactive()

    def cancel(self) -> None:
        if self.active:
            logger.debug(f"Recovery flow cancelled at {type(self.state).__name__}")
        self.state = Inactive()
