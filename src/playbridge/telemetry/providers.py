# src/playbridge/telemetry/providers.py
"""Token and identity providers.

The bridge reads both providers every time it reconciles. Hosts usually
back them with their account and configuration stores; the static
providers here cover configuration-driven tokens and simple hosts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from playbridge.core.logging import get_logger

if TYPE_CHECKING:
    from playbridge.core.config import BridgeSettings

logger = get_logger(__name__)


@runtime_checkable
class FeatureTokenProvider(Protocol):
    """Yields the analytics token, or None when analytics is disabled."""

    def analytics_token(self) -> str | None: ...


@runtime_checkable
class IdentityProvider(Protocol):
    """Yields the signed-in viewer's numeric id, or None for anonymous viewers."""

    def viewer_id(self) -> int | None: ...


def coerce_viewer_id(raw: Any) -> int | None:
    """Normalize a raw account id into a viewer id.

    Falsy ids (None, 0, "") mean anonymous. Integer strings are converted.
    Anything else is not a usable viewer id and is reported as anonymous.

    This is deliberately narrower than JavaScript's ``Number()``: exponent
    and fractional strings such as "1e3" or "4.5" are not integer ids and
    come back as None rather than 1000 or 4.5.

    Example:
        >>> coerce_viewer_id("42")
        42
        >>> coerce_viewer_id("1e3")
        >>> coerce_viewer_id("")
    """
    if not raw:
        return None
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if raw.is_integer() else None
    try:
        return int(str(raw).strip())
    except ValueError:
        logger.debug("viewer_id_not_numeric", raw_type=type(raw).__name__)
        return None


class StaticTokenProvider:
    """Holds a token the host replaces when its configuration changes."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token or None

    @classmethod
    def from_settings(cls, settings: BridgeSettings) -> StaticTokenProvider:
        """Token from configuration; None when telemetry is disabled."""
        if not settings.enabled:
            return cls(None)
        return cls(settings.analytics_token)

    def set_token(self, token: str | None) -> None:
        self._token = token or None

    def analytics_token(self) -> str | None:
        return self._token


class StaticIdentityProvider:
    """Holds the signed-in viewer's id; raw account ids are coerced."""

    def __init__(self, raw_id: Any = None) -> None:
        self._viewer_id = coerce_viewer_id(raw_id)

    def sign_in(self, raw_id: Any) -> None:
        self._viewer_id = coerce_viewer_id(raw_id)

    def sign_out(self) -> None:
        self._viewer_id = None

    def viewer_id(self) -> int | None:
        return self._viewer_id
