import asyncio

import pytest

pytestmark = [pytest.mark.unit, pytest.mark.asyncio]

from authgate.core.signin.classifier import FailureKind
from authgate.core.signin.events import SIGNIN_FAILED, SIGNIN_SUCCEEDED
from authgate.core.signin.sign_in_controller import (
    SignInController,
    SubmissionState,
    SubmissionStatus,
)

VALID = {"email": "a@b.com", "password": "secret1"}
DASHBOARD = "dashboard_pages.dashboard"


class Recorder:
    def __init__(self):
        self.validation_errors = []
        self.failures = []
        self.navigations = []

    def controller(self, check, protected_route=DASHBOARD):
        return SignInController(
            check,
            protected_route=protected_route,
            on_validation_error=self.validation_errors.append,
            on_failure=self.failures.append,
            on_success=self.navigations.append,
        )

    @property
    def emissions(self):
        return len(self.validation_errors) + len(self.failures) + len(self.navigations)


async def test_successful_sign_in_navigates_once(fake_check):
    check = fake_check()
    rec = Recorder()
    controller = rec.controller(check, protected_route=DASHBOARD)

    state = await controller.submit(VALID)

    assert state == SubmissionState(SubmissionStatus.SUCCEEDED)
    assert controller.state.status is SubmissionStatus.SUCCEEDED
    assert check.calls == [("a@b.com", "secret1")]
    assert rec.navigations == [DASHBOARD]
    assert rec.failures == [] and rec.validation_errors == []


async def test_invalid_email_never_reaches_provider(fake_check):
    check = fake_check()
    rec = Recorder()
    controller = rec.controller(check)

    state = await controller.submit({"email": "bad", "password": "secret1"})

    assert state.status is SubmissionStatus.IDLE
    assert rec.validation_errors == [{"email": "invalid format"}]
    assert check.calls == []
    assert rec.navigations == []


async def test_short_password_never_reaches_provider(fake_check):
    check = fake_check()
    rec = Recorder()
    controller = rec.controller(check)

    await controller.submit({"email": "a@b.com", "password": "123"})

    assert rec.validation_errors == [{"password": "too short (min 6)"}]
    assert check.calls == []


async def test_wrong_password_is_classified(fake_check):
    check = fake_check(error_code="auth/wrong-password")
    rec = Recorder()
    controller = rec.controller(check)

    state = await controller.submit(VALID)

    assert state == SubmissionState(SubmissionStatus.FAILED, FailureKind.WRONG_CREDENTIAL)
    assert rec.failures == [FailureKind.WRONG_CREDENTIAL]
    assert rec.navigations == []


async def test_unrecognised_code_is_unknown(fake_check):
    rec = Recorder()
    controller = rec.controller(fake_check(error_code="auth/teapot"))

    await controller.submit(VALID)

    assert rec.failures == [FailureKind.UNKNOWN]


async def test_non_provider_exception_is_unknown(fake_check):
    rec = Recorder()
    controller = rec.controller(fake_check(error=ConnectionError("reset by peer")))

    state = await controller.submit(VALID)

    assert state.failure is FailureKind.UNKNOWN
    assert rec.failures == [FailureKind.UNKNOWN]


async def test_submit_while_submitting_is_ignored(fake_check):
    check = fake_check()
    release = check.hold()
    rec = Recorder()
    controller = rec.controller(check)

    first = asyncio.create_task(controller.submit(VALID))
    await asyncio.sleep(0)
    assert controller.state.status is SubmissionStatus.SUBMITTING
    assert not controller.can_submit(VALID)

    second = await controller.submit(VALID)
    assert second.status is SubmissionStatus.SUBMITTING
    assert len(check.calls) == 1

    release.set()
    await first
    assert len(check.calls) == 1
    assert rec.navigations == [DASHBOARD]


async def test_resubmit_after_failure_starts_fresh_attempt(fake_check):
    check = fake_check(error_code="auth/user-not-found")
    rec = Recorder()
    controller = rec.controller(check)

    await controller.submit(VALID)
    assert controller.state.failure is FailureKind.ACCOUNT_NOT_FOUND

    check.error_code = None
    state = await controller.submit(VALID)

    assert state.status is SubmissionStatus.SUCCEEDED
    assert state.failure is None
    assert len(check.calls) == 2
    assert rec.failures == [FailureKind.ACCOUNT_NOT_FOUND]
    assert len(rec.navigations) == 1


async def test_dispose_mid_submit_drops_late_success(fake_check):
    check = fake_check()
    release = check.hold()
    rec = Recorder()
    controller = rec.controller(check)

    task = asyncio.create_task(controller.submit(VALID))
    await asyncio.sleep(0)
    controller.dispose()
    release.set()
    state = await task

    assert state.status is SubmissionStatus.SUBMITTING
    assert controller.state.status is SubmissionStatus.SUBMITTING
    assert rec.emissions == 0


async def test_dispose_mid_submit_drops_late_rejection(fake_check):
    check = fake_check(error_code="auth/user-disabled")
    release = check.hold()
    rec = Recorder()
    controller = rec.controller(check)

    task = asyncio.create_task(controller.submit(VALID))
    await asyncio.sleep(0)
    controller.dispose()
    release.set()
    await task

    assert controller.state.failure is None
    assert rec.emissions == 0


async def test_submit_after_dispose_is_a_noop(fake_check):
    check = fake_check()
    rec = Recorder()
    controller = rec.controller(check)
    controller.dispose()

    state = await controller.submit(VALID)

    assert state.status is SubmissionStatus.IDLE
    assert check.calls == []
    assert rec.emissions == 0
    assert not controller.can_submit(VALID)


async def test_extra_subscribers_receive_events(fake_check):
    seen = []
    controller = SignInController(fake_check(error_code="auth/invalid-email"), protected_route=DASHBOARD)
    controller.subscribe(SIGNIN_FAILED, lambda event: seen.append(event.payload))
    controller.subscribe(SIGNIN_SUCCEEDED, lambda event: seen.append("nope"))

    await controller.submit(VALID)

    assert seen == [{"kind": FailureKind.INVALID_EMAIL}]


async def test_field_errors_and_can_submit_have_no_side_effects(fake_check):
    check = fake_check()
    rec = Recorder()
    controller = rec.controller(check)

    assert controller.field_errors({"email": "x", "password": "y"}) == {
        "email": "invalid format",
        "password": "too short (min 6)",
    }
    assert controller.can_submit(VALID)
    assert not controller.can_submit({"email": "a@b.com", "password": ""})
    assert controller.state.status is SubmissionStatus.IDLE
    assert rec.emissions == 0
    assert check.calls == []


async def test_cancelled_submit_returns_to_idle(fake_check):
    check = fake_check()
    release = check.hold()
    rec = Recorder()
    controller = rec.controller(check)

    task = asyncio.create_task(controller.submit(VALID))
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert controller.state.status is SubmissionStatus.IDLE
    assert controller.can_submit(VALID)
    assert rec.emissions == 0

    release.set()
    state = await controller.submit(VALID)

    assert state.status is SubmissionStatus.SUCCEEDED
    assert len(check.calls) == 2
    assert rec.navigations == [DASHBOARD]


async def test_timeout_around_submit_leaves_controller_usable(fake_check):
    check = fake_check()
    check.hold()
    controller = Recorder().controller(check)

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(controller.submit(VALID), timeout=0.01)

    assert controller.state.status is SubmissionStatus.IDLE
    assert not controller.state.in_flight


async def test_cancel_after_dispose_does_not_mutate(fake_check):
    check = fake_check()
    check.hold()
    controller = Recorder().controller(check)

    task = asyncio.create_task(controller.submit(VALID))
    await asyncio.sleep(0)
    controller.dispose()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert controller.state.status is SubmissionStatus.SUBMITTING


async def test_raising_success_handler_keeps_terminal_state(fake_check):
    check = fake_check()

    def broken_navigation(route):
        raise RuntimeError("router unavailable")

    controller = SignInController(check, protected_route=DASHBOARD, on_success=broken_navigation)

    with pytest.raises(RuntimeError):
        await controller.submit(VALID)

    assert controller.state.status is SubmissionStatus.SUCCEEDED
    assert controller.can_submit(VALID)


async def test_raising_failure_handler_does_not_block_resubmit(fake_check):
    check = fake_check(error_code="auth/wrong-password")
    failures = []

    def flaky_toast(kind):
        failures.append(kind)
        if len(failures) == 1:
            raise RuntimeError("toast unavailable")

    controller = SignInController(check, protected_route=DASHBOARD, on_failure=flaky_toast)

    with pytest.raises(RuntimeError):
        await controller.submit(VALID)
    assert controller.state == SubmissionState(SubmissionStatus.FAILED, FailureKind.WRONG_CREDENTIAL)

    state = await controller.submit(VALID)

    assert state.failure is FailureKind.WRONG_CREDENTIAL
    assert len(check.calls) == 2
    assert failures == [FailureKind.WRONG_CREDENTIAL, FailureKind.WRONG_CREDENTIAL]
