# src/playbridge/replay.py
"""Replay scripted playback sessions through a TelemetryBridge.

A script is a YAML document with a ``steps`` list. Each step is a bare
command name or a single-key mapping:

    steps:
      - set_token: tok
      - set_viewer: 42
      - load_item: {item_id: m1, title: Movie, feed_id: shelf1}
      - bind: {player: p1, duration: 5400}
      - emit: item-ready
      - emit: {event: time, position: 12.5, duration: 5400}
      - emit: {event: seek, offset: 600}
      - load_item: {item_id: m2, title: Sequel}
      - unbind
      - close

Players are PlayerEventBus instances created on first bind and addressed by
name. ``emit`` without a player targets the most recently bound one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Any, Literal

import yaml
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from playbridge.contracts.events import PlayerEvent, SeekParams, TimeParams
from playbridge.contracts.session import ContentItem
from playbridge.core.events import PlayerEventBus
from playbridge.core.logging import get_logger
from playbridge.telemetry.bridge import TelemetryBridge
from playbridge.telemetry.providers import StaticIdentityProvider, StaticTokenProvider

logger = get_logger(__name__)


class ReplayScriptError(Exception):
    """Raised when a replay script cannot be parsed.

    Attributes:
        step_index: Zero-based index of the offending step, None for
            document-level problems
        message: Human-readable error description
    """

    def __init__(self, message: str, step_index: int | None = None) -> None:
        self.step_index = step_index
        self.message = message
        where = f"step {step_index}: " if step_index is not None else ""
        super().__init__(f"{where}{message}")


class _Step(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}


class BindStep(_Step):
    kind: Literal["bind"] = "bind"
    player: str = Field(min_length=1)
    duration: float | None = Field(default=None, ge=0)


class UnbindStep(_Step):
    kind: Literal["unbind"] = "unbind"


class LoadItemStep(_Step):
    kind: Literal["load_item"] = "load_item"
    item_id: str | None = None
    title: str = ""
    feed_id: str = ""


class SetTokenStep(_Step):
    kind: Literal["set_token"] = "set_token"
    token: str | None = None


class SetViewerStep(_Step):
    kind: Literal["set_viewer"] = "set_viewer"
    viewer_id: int | str | None = None


class SetDurationStep(_Step):
    kind: Literal["set_duration"] = "set_duration"
    duration: float = Field(ge=0)
    player: str | None = None


class EmitStep(_Step):
    kind: Literal["emit"] = "emit"
    event: PlayerEvent
    player: str | None = None
    position: float = 0.0
    duration: float | None = None
    offset: float = 0.0


class CloseStep(_Step):
    kind: Literal["close"] = "close"


ReplayStep = Annotated[
    BindStep | UnbindStep | LoadItemStep | SetTokenStep | SetViewerStep | SetDurationStep | EmitStep | CloseStep,
    Field(discriminator="kind"),
]

_STEP_ADAPTER: TypeAdapter[ReplayStep] = TypeAdapter(ReplayStep)

# Field a scalar argument maps to, per command
_SCALAR_FIELDS: dict[str, str] = {
    "bind": "player",
    "load_item": "item_id",
    "set_token": "token",
    "set_viewer": "viewer_id",
    "set_duration": "duration",
    "emit": "event",
}


def _normalize_step(raw: Any, index: int) -> dict[str, Any]:
    if isinstance(raw, str):
        return {"kind": raw}
    if not isinstance(raw, dict) or len(raw) != 1:
        raise ReplayScriptError("each step must be a command name or a single-key mapping", index)
    ((kind, value),) = raw.items()
    if isinstance(value, dict):
        return {"kind": kind, **value}
    if value is None:
        return {"kind": kind}
    if kind not in _SCALAR_FIELDS:
        raise ReplayScriptError(f"command '{kind}' takes no scalar argument", index)
    return {"kind": kind, _SCALAR_FIELDS[kind]: value}


def parse_script(document: Any) -> list[ReplayStep]:
    """Validate a loaded YAML document into replay steps.

    Raises:
        ReplayScriptError: On the first invalid step
    """
    if not isinstance(document, dict) or "steps" not in document:
        raise ReplayScriptError("script must be a mapping with a 'steps' list")
    raw_steps = document["steps"]
    if not isinstance(raw_steps, list):
        raise ReplayScriptError("'steps' must be a list")

    steps: list[ReplayStep] = []
    for index, raw in enumerate(raw_steps):
        normalized = _normalize_step(raw, index)
        try:
            steps.append(_STEP_ADAPTER.validate_python(normalized))
        except ValidationError as e:
            raise ReplayScriptError(str(e), index) from e
    return steps


def load_script(path: Path) -> list[ReplayStep]:
    """Read and validate a replay script file.

    Raises:
        FileNotFoundError: If path does not exist
        ReplayScriptError: If the YAML is malformed or a step is invalid
    """
    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ReplayScriptError(f"invalid YAML: {e}") from e
    return parse_script(document)


@dataclass
class ReplayResult:
    """Outcome of a replay run."""

    steps_run: int = 0
    events_emitted: int = 0
    players: list[str] = field(default_factory=list)
    health_metrics: dict[str, Any] = field(default_factory=dict)


class ReplayRunner:
    """Drive a TelemetryBridge through replay steps.

    The bridge must have been built with the same provider instances, so
    that set_token/set_viewer steps take effect on the next reconcile.
    """

    def __init__(
        self,
        bridge: TelemetryBridge,
        token_provider: StaticTokenProvider,
        identity_provider: StaticIdentityProvider,
    ) -> None:
        self._bridge = bridge
        self._token_provider = token_provider
        self._identity_provider = identity_provider
        self._players: dict[str, PlayerEventBus] = {}
        self._current: str | None = None

    def _player(self, name: str | None) -> PlayerEventBus:
        target = name if name is not None else self._current
        if target is None or target not in self._players:
            raise ReplayScriptError(f"no player named {target!r} has been bound")
        return self._players[target]

    def run(self, steps: list[ReplayStep]) -> ReplayResult:
        result = ReplayResult()
        for index, step in enumerate(steps):
            try:
                emitted = self._run_step(step)
            except ReplayScriptError as e:
                raise ReplayScriptError(e.message, index) from e
            result.steps_run += 1
            result.events_emitted += emitted
        result.players = sorted(self._players)
        result.health_metrics = self._bridge.health_metrics
        return result

    def _run_step(self, step: ReplayStep) -> int:
        logger.debug("replay_step", kind=step.kind)
        match step:
            case BindStep(player=name, duration=duration):
                player = self._players.setdefault(name, PlayerEventBus())
                if duration is not None:
                    player.set_duration(duration)
                self._current = name
                self._bridge.bind(player)
            case UnbindStep():
                self._bridge.bind(None)
            case LoadItemStep(item_id=item_id, title=title, feed_id=feed_id):
                item = ContentItem(item_id=item_id, title=title) if item_id else None
                self._bridge.load_item(item, feed_id=feed_id)
            case SetTokenStep(token=token):
                self._token_provider.set_token(token)
                self._bridge.refresh()
            case SetViewerStep(viewer_id=viewer_id):
                self._identity_provider.sign_in(viewer_id)
                self._bridge.refresh()
            case SetDurationStep(duration=duration, player=name):
                self._player(name).set_duration(duration)
            case EmitStep():
                self._emit(step)
                return 1
            case CloseStep():
                self._bridge.close()
        return 0

    def _emit(self, step: EmitStep) -> None:
        player = self._player(step.player)
        match step.event:
            case PlayerEvent.TIME:
                duration = step.duration if step.duration is not None else player.get_duration()
                player.emit(step.event, TimeParams(position=step.position, duration=duration))
            case PlayerEvent.SEEK:
                player.emit(step.event, SeekParams(position=step.position, offset=step.offset, duration=step.duration))
            case _:
                player.emit(step.event)
