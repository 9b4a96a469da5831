"""
Listen session.

Per listening session:
- Owns the receiver state (immutable reducer pattern), exclusively
- Feeds snapshots to the pure reducer, one at a time, in arrival order
- Executes reducer notifications (listener callbacks, JSONL logging)
- Flushes deterministically on stop

The receiver state exists only between start() and stop(); a new session
(or a restart) always begins from a fresh, empty state.
"""

from __future__ import annotations

from contextlib import aclosing
from typing import Any
from uuid import uuid4

from adapters.audio.base import SnapshotSource
from audio.frames import SpectrumSnapshot
from observability.logger import log_event, now_ms
from observability.metrics import start_timer, stop_timer
from protocol.errors import DeviceUnavailable, SessionNotActive
from receiver.notifications import (
    LogEvent,
    MessageComplete,
    ModeChanged,
    Notification,
    SignatureDetected,
    SymbolDecoded,
)
from receiver.reducer import flush, reduce_frame
from receiver.settings import DecoderSettings
from receiver.state_dataclass import DecodedMessage, ReceiverState
from session.listener import ReceiverListener


def _new_session_id() -> str:
    return f"rx_{uuid4().hex[:12]}"


class ListenSession:
    """
    Runtime boundary between a snapshot source and the receiver reducer.

    Guarantees:
    - Reducer is called exactly once per fed snapshot
    - Notifications are executed after the state has been updated
    - stop() is safe between any two frames and always flushes
    """

    def __init__(
        self,
        *,
        settings: DecoderSettings | None = None,
        listener: ReceiverListener | None = None,
        session_id: str | None = None,
    ) -> None:
        self._settings = settings or DecoderSettings()
        self._listener = listener or ReceiverListener()
        self.session_id = session_id or _new_session_id()

        self._state: ReceiverState | None = None
        self._messages: list[DecodedMessage] = []
        self._stop_requested = False
        self._timer_id: str | None = None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def listening(self) -> bool:
        return self._state is not None

    @property
    def state(self) -> ReceiverState | None:
        """Current receiver state; None when not listening."""
        return self._state

    @property
    def messages(self) -> tuple[DecodedMessage, ...]:
        """Messages completed since the last start()."""
        return tuple(self._messages)

    def log_context(self) -> dict[str, Any]:
        ctx: dict[str, Any] = {"session_id": self.session_id}
        if self._state is not None:
            ctx["phase"] = self._state.phase.value
            ctx["mode"] = self._state.mode.value
        return ctx

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin listening with a fresh state (discarding any previous one)."""
        if self._state is not None:
            self.stop()
        self._state = ReceiverState.fresh(
            require_start_signature=self._settings.require_start_signature,
        )
        self._messages = []
        self._stop_requested = False
        self._timer_id = start_timer("listen_session")
        log_event({"ts_ms": now_ms(), "event_type": "LISTEN_STARTED", **self.log_context()})

    def request_stop(self) -> None:
        """Ask run() to stop before the next frame."""
        self._stop_requested = True

    def stop(self) -> DecodedMessage | None:
        """
        Stop listening and flush.

        Returns:
            The partial message flushed from the buffer, or None if nothing
            was being received. Calling stop() when not listening is a no-op.
        """
        if self._state is None:
            return None

        _, notes = flush(self._state, self._settings, ts_ms=now_ms())
        frames_seen = self._state.frames_seen
        self._state = None
        flushed = self._dispatch(notes)

        if self._timer_id is not None:
            stop_timer(
                self._timer_id,
                session_id=self.session_id,
                details={"frames": frames_seen, "messages": len(self._messages)},
            )
            self._timer_id = None

        log_event({
            "ts_ms": now_ms(),
            "event_type": "LISTEN_STOPPED",
            "session_id": self.session_id,
            "frames": frames_seen,
            "messages": len(self._messages),
        })
        return flushed[-1] if flushed else None

    # ------------------------------------------------------------------
    # Frame path
    # ------------------------------------------------------------------

    def feed(self, snapshot: SpectrumSnapshot) -> tuple[Notification, ...]:
        """
        Reduce one snapshot.

        Raises:
            SessionNotActive if the session is not listening.
        """
        if self._state is None:
            raise SessionNotActive(f"session {self.session_id} is not listening")

        self._state, notes = reduce_frame(self._state, snapshot, self._settings)
        self._dispatch(notes)
        return notes

    async def run(self, source: SnapshotSource) -> tuple[DecodedMessage, ...]:
        """
        Listen to `source` until it ends or request_stop() is called.

        Raises:
            DeviceUnavailable if the source cannot be opened; no receiver
            state is created in that case.
        """
        try:
            await source.open()
        except OSError as e:
            log_event({
                "ts_ms": now_ms(),
                "event_type": "LISTEN_DEVICE_UNAVAILABLE",
                "session_id": self.session_id,
                "error": str(e),
            })
            raise DeviceUnavailable(f"microphone unavailable: {e}") from e

        self.start()
        try:
            async with aclosing(source.frames()) as frames:
                async for snapshot in frames:
                    if self._stop_requested:
                        break
                    self.feed(snapshot)
        except OSError as e:
            raise DeviceUnavailable(f"microphone failed: {e}") from e
        finally:
            self.stop()
            await source.close()
        return self.messages

    # ------------------------------------------------------------------
    # Notification execution
    # ------------------------------------------------------------------

    def _dispatch(self, notes: tuple[Notification, ...]) -> list[DecodedMessage]:
        completed: list[DecodedMessage] = []
        for note in notes:
            if isinstance(note, SymbolDecoded):
                self._listener.on_symbol_decoded(note.symbol)
            elif isinstance(note, ModeChanged):
                self._listener.on_mode_changed(note.mode)
            elif isinstance(note, SignatureDetected):
                self._listener.on_signature_detected(note.name)
            elif isinstance(note, MessageComplete):
                self._messages.append(note.message)
                completed.append(note.message)
                self._listener.on_message_complete(note.message)
            elif isinstance(note, LogEvent):
                log_event({"ts_ms": now_ms(), "session_id": self.session_id, **note.event})
        return completed
