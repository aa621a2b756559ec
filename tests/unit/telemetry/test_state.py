# tests/unit/telemetry/test_state.py
"""Tests for the pure reconcile() transition function."""

from typing import Any

import pytest

from playbridge.contracts.session import ContentItem, SessionInputs
from playbridge.telemetry.state import NO_TRANSITION, UNBOUND, Bound, Session, Transition, Unbound, reconcile
from playbridge.testing import FakePlayer

MOVIE = ContentItem("m1", "Movie")
SEQUEL = ContentItem("m2", "Sequel")


def complete_inputs(for_player: FakePlayer, **overrides: Any) -> SessionInputs:
    """Complete inputs for for_player; any field, player included, can be overridden."""
    values = {"player": for_player, "item": MOVIE, "token": "tok", "viewer_id": 42, "feed_id": "shelf1"}
    values.update(overrides)
    return SessionInputs(**values)


class TestReconcileFromUnbound:
    def test_incomplete_inputs_are_noop(self) -> None:
        assert reconcile(UNBOUND, SessionInputs(item=MOVIE, token="tok")) is NO_TRANSITION

    def test_complete_inputs_set_up(self) -> None:
        inputs = complete_inputs(FakePlayer())

        transition = reconcile(UNBOUND, inputs)

        assert transition == Transition(teardown=None, setup=inputs)
        assert not transition.is_noop

    def test_missing_sink_is_noop(self) -> None:
        assert reconcile(UNBOUND, complete_inputs(FakePlayer()), sink_available=False).is_noop

    def test_empty_token_counts_as_missing(self) -> None:
        assert reconcile(UNBOUND, complete_inputs(FakePlayer(), token="")).is_noop


class TestReconcileFromBound:
    def test_same_inputs_are_noop(self) -> None:
        player = FakePlayer()
        state = Bound(Session(inputs=complete_inputs(player)))

        assert reconcile(state, complete_inputs(player)) is NO_TRANSITION

    @pytest.mark.parametrize(
        "change",
        [
            {"item": SEQUEL},
            {"token": "rotated"},
            {"viewer_id": None},
            {"feed_id": "shelf2"},
        ],
    )
    def test_changed_input_tears_down_then_sets_up(self, change: dict) -> None:
        player = FakePlayer()
        session = Session(inputs=complete_inputs(player))
        new_inputs = complete_inputs(player, **change)

        transition = reconcile(Bound(session), new_inputs)

        assert transition.teardown is session
        assert transition.setup is new_inputs

    def test_different_player_instance_rebinds_even_if_equal(self) -> None:
        first, second = FakePlayer(name="p"), FakePlayer(name="p")
        session = Session(inputs=complete_inputs(first))

        transition = reconcile(Bound(session), complete_inputs(second))

        assert transition.teardown is session
        assert transition.setup is not None

    @pytest.mark.parametrize("missing", ["player", "item", "token"])
    def test_incomplete_inputs_tear_down_only(self, missing: str) -> None:
        player = FakePlayer()
        session = Session(inputs=complete_inputs(player))

        transition = reconcile(Bound(session), complete_inputs(player, **{missing: None}))

        assert transition == Transition(teardown=session, setup=None)

    def test_sink_removed_tears_down(self) -> None:
        player = FakePlayer()
        session = Session(inputs=complete_inputs(player))

        transition = reconcile(Bound(session), complete_inputs(player), sink_available=False)

        assert transition.teardown is session
        assert transition.setup is None


class TestReconcileIsPure:
    def test_state_and_inputs_untouched(self) -> None:
        player = FakePlayer()
        session = Session(inputs=complete_inputs(player))
        state = Bound(session)

        reconcile(state, complete_inputs(player, item=SEQUEL))

        assert state.session is session
        assert session.subscriptions == []
        assert not session.released

    def test_unknown_state_rejected(self) -> None:
        with pytest.raises(TypeError, match="Unknown bridge state"):
            reconcile("bound", SessionInputs())  # type: ignore[arg-type]

    def test_state_flags(self) -> None:
        assert Unbound().bound is False
        assert Bound(Session(inputs=SessionInputs())).bound is True
