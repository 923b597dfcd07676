"""Tests for the navigator coordinator and operation lookup tables."""

from __future__ import annotations

import asyncio

import pytest

from fakes import CoreUserManager, FakeUser, Recorder
from oidc_session.exceptions import NavigatorBusyError, UnsupportedEnvironmentError
from oidc_session.navigator import NavigatorCoordinator, NavigatorPolicy
from oidc_session.operations import (
    NavigatorOperation,
    UserManagerOperation,
    resolve_operations,
)


# ------------------------------------------------------------------ #
# Lookup tables
# ------------------------------------------------------------------ #


class TestResolveOperations:
    def test_full_manager_resolves_every_operation(self, full_manager):
        table = resolve_operations(full_manager, NavigatorOperation)
        assert set(table) == set(NavigatorOperation)
        assert table[NavigatorOperation.SIGNIN_POPUP] is full_manager.signin_popup

    def test_missing_operations_resolve_to_none(self, core_manager):
        table = resolve_operations(core_manager, UserManagerOperation)
        assert all(impl is None for impl in table.values())

    def test_no_manager(self):
        table = resolve_operations(None, NavigatorOperation)
        assert len(table) == 7
        assert all(impl is None for impl in table.values())

    def test_non_callable_attribute_is_unsupported(self, core_manager):
        core_manager.revoke_tokens = "not a method"
        table = resolve_operations(core_manager, UserManagerOperation)
        assert table[UserManagerOperation.REVOKE_TOKENS] is None


# ------------------------------------------------------------------ #
# Navigator operations
# ------------------------------------------------------------------ #


class TestNavigatorOperations:
    @pytest.mark.asyncio
    async def test_success_returns_result_and_closes(self, full_manager, recorder: Recorder):
        coordinator = NavigatorCoordinator(full_manager, recorder.dispatch)
        result = await coordinator.navigators[NavigatorOperation.SIGNIN_POPUP]()

        assert result == FakeUser("popup")
        assert recorder.types == ["NAVIGATOR_INIT", "NAVIGATOR_CLOSE"]
        assert recorder.events[0].method is NavigatorOperation.SIGNIN_POPUP
        assert recorder.state.is_loading is False
        assert recorder.state.active_navigator is None

    @pytest.mark.asyncio
    async def test_arguments_are_forwarded(self, full_manager, recorder: Recorder):
        coordinator = NavigatorCoordinator(full_manager, recorder.dispatch)
        await coordinator.navigators[NavigatorOperation.SIGNIN_REDIRECT](
            {"state": "return-to"}, extra_query_params={"ui_locales": "fr"}
        )
        full_manager.signin_redirect.assert_awaited_once_with(
            {"state": "return-to"}, extra_query_params={"ui_locales": "fr"}
        )

    @pytest.mark.asyncio
    async def test_failure_is_recorded_not_raised(self, full_manager, recorder: Recorder):
        err = RuntimeError("popup blocked")
        full_manager.signin_popup.side_effect = err
        coordinator = NavigatorCoordinator(full_manager, recorder.dispatch)

        result = await coordinator.navigators[NavigatorOperation.SIGNIN_POPUP]()

        assert result is None
        assert recorder.types == ["NAVIGATOR_INIT", "ERROR", "NAVIGATOR_CLOSE"]
        assert recorder.state.error is err
        assert recorder.state.is_loading is False
        assert recorder.state.active_navigator is None

    def test_unsupported_operation_raises_synchronously(self, core_manager, recorder: Recorder):
        coordinator = NavigatorCoordinator(core_manager, recorder.dispatch)
        signin = coordinator.navigators[NavigatorOperation.SIGNIN_POPUP]

        with pytest.raises(UnsupportedEnvironmentError) as exc_info:
            signin()

        assert exc_info.value.operation == "signin_popup"
        assert "UserManager.signin_popup" in str(exc_info.value)
        assert recorder.events == []

    def test_no_manager_makes_everything_unsupported(self, recorder: Recorder):
        coordinator = NavigatorCoordinator(None, recorder.dispatch)
        for fn in coordinator.navigators.values():
            with pytest.raises(UnsupportedEnvironmentError):
                fn()
        for fn in coordinator.passthrough.values():
            with pytest.raises(UnsupportedEnvironmentError):
                fn()
        assert recorder.events == []

    @pytest.mark.asyncio
    async def test_cancellation_still_closes(self, full_manager, recorder: Recorder):
        full_manager.signin_silent.side_effect = asyncio.CancelledError()
        coordinator = NavigatorCoordinator(full_manager, recorder.dispatch)

        with pytest.raises(asyncio.CancelledError):
            await coordinator.navigators[NavigatorOperation.SIGNIN_SILENT]()

        assert recorder.types == ["NAVIGATOR_INIT", "NAVIGATOR_CLOSE"]
        assert coordinator.in_flight == 0


# ------------------------------------------------------------------ #
# Pass-through operations
# ------------------------------------------------------------------ #


class TestPassthroughOperations:
    @pytest.mark.asyncio
    async def test_bound_to_manager_without_state_changes(self, full_manager, recorder: Recorder):
        coordinator = NavigatorCoordinator(full_manager, recorder.dispatch)
        query = coordinator.passthrough[UserManagerOperation.QUERY_SESSION_STATUS]

        assert await query() == {"sub": "alice"}
        assert recorder.events == []

    def test_unsupported_passthrough(self, core_manager, recorder: Recorder):
        coordinator = NavigatorCoordinator(core_manager, recorder.dispatch)
        with pytest.raises(UnsupportedEnvironmentError, match="revoke_tokens"):
            coordinator.passthrough[UserManagerOperation.REVOKE_TOKENS]()


# ------------------------------------------------------------------ #
# Overlapping operations
# ------------------------------------------------------------------ #


def _gated_manager() -> tuple[CoreUserManager, asyncio.Event, asyncio.Event]:
    manager = CoreUserManager()
    gate_popup = asyncio.Event()
    gate_silent = asyncio.Event()

    async def signin_popup():
        await gate_popup.wait()
        return "popup"

    async def signin_silent():
        await gate_silent.wait()
        return "silent"

    manager.signin_popup = signin_popup
    manager.signin_silent = signin_silent
    return manager, gate_popup, gate_silent


class TestConcurrentNavigators:
    @pytest.mark.asyncio
    async def test_last_wins_shares_single_slot(self, recorder: Recorder):
        manager, gate_popup, gate_silent = _gated_manager()
        coordinator = NavigatorCoordinator(manager, recorder.dispatch)

        popup = asyncio.create_task(coordinator.navigators[NavigatorOperation.SIGNIN_POPUP]())
        await asyncio.sleep(0)
        assert recorder.state.active_navigator is NavigatorOperation.SIGNIN_POPUP

        silent = asyncio.create_task(coordinator.navigators[NavigatorOperation.SIGNIN_SILENT]())
        await asyncio.sleep(0)
        assert recorder.state.active_navigator is NavigatorOperation.SIGNIN_SILENT
        assert coordinator.in_flight == 2

        # The first operation to finish clears the slot even though the
        # silent sign-in is still running.
        gate_popup.set()
        assert await popup == "popup"
        assert recorder.state.active_navigator is None
        assert recorder.state.is_loading is False

        gate_silent.set()
        assert await silent == "silent"

        assert recorder.types == [
            "NAVIGATOR_INIT",
            "NAVIGATOR_INIT",
            "NAVIGATOR_CLOSE",
            "NAVIGATOR_CLOSE",
        ]

    @pytest.mark.asyncio
    async def test_reject_concurrent_refuses_second_operation(self, recorder: Recorder):
        manager, gate_popup, _ = _gated_manager()
        coordinator = NavigatorCoordinator(
            manager, recorder.dispatch, policy=NavigatorPolicy.REJECT_CONCURRENT
        )

        popup = asyncio.create_task(coordinator.navigators[NavigatorOperation.SIGNIN_POPUP]())
        await asyncio.sleep(0)

        with pytest.raises(NavigatorBusyError):
            await coordinator.navigators[NavigatorOperation.SIGNIN_SILENT]()
        assert recorder.state.active_navigator is NavigatorOperation.SIGNIN_POPUP

        gate_popup.set()
        await popup

        # Once idle, a new operation is accepted again.
        assert await coordinator.navigators[NavigatorOperation.SIGNIN_POPUP]() == "popup"

        assert recorder.types == [
            "NAVIGATOR_INIT",
            "NAVIGATOR_CLOSE",
            "NAVIGATOR_INIT",
            "NAVIGATOR_CLOSE",
        ]
