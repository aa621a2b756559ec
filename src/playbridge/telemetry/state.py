# src/playbridge/telemetry/state.py
"""Session state machine for the telemetry bridge.

The bridge is either Unbound or Bound to exactly one Session. Every change
to the session inputs goes through reconcile(), a pure function that decides
which session (if any) must be torn down and which inputs (if any) must be
bound next. The bridge applies teardown strictly before setup, so two
subscription sets never forward events for the same player at once.

Transition table:

    current   inputs complete   same inputs   result
    -------   ---------------   -----------   ------------------
    Unbound   no                -             no-op
    Unbound   yes               -             setup
    Bound     yes               yes           no-op
    Bound     yes               no            teardown, setup
    Bound     no                -             teardown
"""

from __future__ import annotations

from dataclasses import dataclass, field

from playbridge.contracts.session import SessionInputs
from playbridge.telemetry.subscription import Subscription


@dataclass(eq=False)
class Session:
    """A bound SessionInputs and the subscriptions installed for it.

    ``released`` flips once; teardown of a released session is a no-op.
    """

    inputs: SessionInputs
    subscriptions: list[Subscription] = field(default_factory=list)
    released: bool = False


@dataclass(frozen=True, slots=True)
class Unbound:
    """No live subscription set."""

    bound = False


@dataclass(frozen=True, slots=True)
class Bound:
    """One live subscription set."""

    session: Session
    bound = True


BridgeState = Unbound | Bound

UNBOUND = Unbound()


@dataclass(frozen=True, slots=True)
class Transition:
    """Actions to apply, in order: teardown first, then setup.

    Attributes:
        teardown: Session to unsubscribe and flush, or None
        setup: Inputs to bind a fresh subscription set to, or None
    """

    teardown: Session | None = None
    setup: SessionInputs | None = None

    @property
    def is_noop(self) -> bool:
        return self.teardown is None and self.setup is None


NO_TRANSITION = Transition()


def reconcile(state: BridgeState, inputs: SessionInputs, *, sink_available: bool = True) -> Transition:
    """Compute the transition from state for the new inputs.

    Args:
        state: Current bridge state
        inputs: Freshly recomputed session inputs
        sink_available: False when no analytics sink is installed; treated
            like a missing required input

    Returns:
        Transition to apply. Pure: neither state nor inputs are modified.
    """
    can_bind = sink_available and inputs.complete

    match state:
        case Bound(session=session):
            if can_bind and session.inputs.same_as(inputs):
                return NO_TRANSITION
            return Transition(teardown=session, setup=inputs if can_bind else None)
        case Unbound():
            if can_bind:
                return Transition(setup=inputs)
            return NO_TRANSITION
        case _:
            raise TypeError(f"Unknown bridge state: {state!r}")
