import pytest

from mimanasa.recovery import (
    AwaitingEmail,
    AwaitingNewPassword,
    AwaitingOTP,
    Inactive,
    InvalidTransitionError,
    RecoveryFlow,
)


def test_full_forward_path():
    flow = RecoveryFlow()
    assert not flow.active

    flow.begin()
    assert flow.state == AwaitingEmail()

    flow.otp_sent("reader@example.com")
    assert flow.state == AwaitingOTP(email="reader@example.com")

    flow.otp_verified("123456")
    assert flow.state == AwaitingNewPassword(email="reader@example.com", otp="123456")

    flow.complete()
    assert flow.state == Inactive()


@pytest.mark.parametrize("step", ["otp_sent", "otp_verified", "complete"])
def test_cannot_skip_stages(step):
    flow = RecoveryFlow()
    flow.begin()
    if step == "otp_sent":
        flow.otp_sent("a@b.com")
        with pytest.raises(InvalidTransitionError):
            flow.otp_sent("a@b.com")
    elif step == "otp_verified":
        with pytest.raises(InvalidTransitionError):
            flow.otp_verified("123456")
    else:
        with pytest.raises(InvalidTransitionError):
            flow.complete()
    assert flow.active


def test_begin_twice_is_rejected():
    flow = RecoveryFlow()
    flow.begin()
    with pytest.raises(InvalidTransitionError):
        flow.begin()


def test_cancel_from_any_stage():
    flow = RecoveryFlow()
    flow.cancel()
    assert flow.state == Inactive()

    flow.begin()
    flow.otp_sent("a@b.com")
    flow.otp_verified("654321")
    flow.cancel()
    assert flow.state == Inactive()
    flow.begin()
    assert isinstance(flow.state, AwaitingEmail)


def test_require_returns_current_state():
    flow = RecoveryFlow()
    flow.begin()
    flow.otp_sent("a@b.com")
    assert flow.require(AwaitingOTP).email == "a@b.com"
    with pytest.raises(InvalidTransitionError):
        flow.require(AwaitingNewPassword)
