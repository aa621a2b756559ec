# src/playbridge/telemetry/sinks/base.py
"""Shared plumbing for sinks that turn each call into a record."""

from __future__ import annotations

import hashlib
from typing import Any

from playbridge.contracts.events import SinkCall


def token_fingerprint(token: str) -> str:
    """Stable, non-reversible stand-in for a token in output."""
    digest = hashlib.sha256(token.encode("utf-8")).hexdigest()
    return f"sha256:{digest[:12]}"


class CallRecordSink:
    """AnalyticsSink that routes every call to ``_emit(call, fields)``.

    Subclasses decide where the record goes. Field names follow the
    AnalyticsSink method signatures.
    """

    def _emit(self, call: SinkCall, fields: dict[str, Any]) -> None:
        raise NotImplementedError

    def ready(
        self,
        token: str,
        origin: str,
        feed_id: str,
        item_id: str,
        title: str,
        viewer_id: int | None,
    ) -> None:
        self._emit(
            SinkCall.READY,
            {
                "token": token,
                "origin": origin,
                "feed_id": feed_id,
                "item_id": item_id,
                "title": title,
                "viewer_id": viewer_id,
            },
        )

    def time(self, position: float, duration: float) -> None:
        self._emit(SinkCall.TIME, {"position": position, "duration": duration})

    def seek(self, offset: float, duration: float) -> None:
        self._emit(SinkCall.SEEK, {"offset": offset, "duration": duration})

    def seeked(self) -> None:
        self._emit(SinkCall.SEEKED, {})

    def complete(self) -> None:
        self._emit(SinkCall.COMPLETE, {})

    def ad_impression(self) -> None:
        self._emit(SinkCall.AD_IMPRESSION, {})

    def remove(self) -> None:
        self._emit(SinkCall.REMOVE, {})
