"""Tests for AuthStateStore."""

from __future__ import annotations

from fakes import FakeUser
from oidc_session.models import AuthState
from oidc_session.state import AuthStateStore, Initialised, NavigatorClose, UserLoaded


def test_initial_state():
    store = AuthStateStore()
    assert store.state == AuthState(is_loading=True, is_authenticated=False)
    assert store.state.user is None
    assert store.state.active_navigator is None
    assert store.state.error is None


def test_dispatch_returns_and_stores_new_state():
    store = AuthStateStore()
    user = FakeUser()
    new_state = store.dispatch(Initialised(user))
    assert new_state is store.state
    assert store.state.user is user


def test_listeners_receive_each_state_in_order():
    store = AuthStateStore()
    seen: list[AuthState] = []
    store.subscribe(seen.append)

    store.dispatch(Initialised(None))
    store.dispatch(UserLoaded(FakeUser()))

    assert [s.is_authenticated for s in seen] == [False, True]
    assert seen[-1] is store.state


def test_unsubscribe_stops_notifications():
    store = AuthStateStore()
    seen: list[AuthState] = []
    unsubscribe = store.subscribe(seen.append)
    unsubscribe()
    unsubscribe()
    store.dispatch(NavigatorClose())
    assert seen == []


def test_failing_listener_does_not_break_dispatch(caplog):
    store = AuthStateStore()
    seen: list[AuthState] = []

    def broken(state: AuthState) -> None:
        raise RuntimeError("listener bug")

    store.subscribe(broken)
    store.subscribe(seen.append)

    with caplog.at_level("WARNING", logger="oidc_session.state.store"):
        store.dispatch(Initialised(None))

    assert store.state.is_loading is False
    assert len(seen) == 1
    assert "listener bug" in caplog.text


def test_custom_initial_state_and_reducer():
    calls = []

    def counting_reducer(state, event):
        calls.append(event)
        return state

    initial = AuthState(is_loading=False)
    store = AuthStateStore(initial=initial, reducer=counting_reducer)
    store.dispatch(NavigatorClose())
    assert store.state is initial
    assert len(calls) == 1
