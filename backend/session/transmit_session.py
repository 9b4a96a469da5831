"""
Transmit session.

Owns one speaker-side collaborator and sends planned transmissions through
it, strictly one tone at a time.

Guarantees:
- Tones never overlap: each emit_tone() is awaited to completion before
  the next is scheduled.
- A stop request only prevents FUTURE tones; the tone currently sounding
  always finishes, so no clipped symbol reaches the channel.
- Invalid payloads are rejected before the device is touched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence
from uuid import uuid4

import numpy as np

from adapters.audio.base import ToneEmitter
from observability.logger import log_event, now_ms
from observability.metrics import timed
from protocol.errors import DeviceUnavailable, TransmitterBusy
from protocol.framing import (
    Transmission,
    TransmitSettings,
    plan_text,
    plan_voice,
    prepare_voice_clip,
)


def _new_session_id() -> str:
    return f"tx_{uuid4().hex[:12]}"


@dataclass(frozen=True)
class TransmitReport:
    """Outcome of one transmission."""
    tones_planned: int
    tones_emitted: int

    @property
    def completed(self) -> bool:
        return self.tones_emitted == self.tones_planned


class TransmitSession:
    """One speaker, one transmission at a time."""

    def __init__(
        self,
        emitter: ToneEmitter,
        *,
        settings: TransmitSettings | None = None,
        session_id: str | None = None,
    ) -> None:
        self._emitter = emitter
        self._settings = settings or TransmitSettings()
        self.session_id = session_id or _new_session_id()
        self._busy = False
        self._stop_requested = False

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        return self._busy

    def request_stop(self) -> None:
        """Skip every tone not yet started. Safe to call at any time."""
        if self._busy:
            self._stop_requested = True

    # ------------------------------------------------------------------
    # Payload helpers
    # ------------------------------------------------------------------

    async def transmit_text(self, text: str) -> TransmitReport:
        return await self.transmit(plan_text(text, settings=self._settings))

    async def transmit_voice(
        self,
        samples: Sequence[float] | np.ndarray,
        *,
        source_rate_hz: int | None = None,
    ) -> TransmitReport:
        """
        Send a voice clip. If `source_rate_hz` is given the clip is first
        resampled to the voice symbol rate.
        """
        if source_rate_hz is not None:
            samples = prepare_voice_clip(np.asarray(samples, dtype=np.float32), source_rate_hz)
        return await self.transmit(plan_voice(samples, settings=self._settings))

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    def _log(self, event_type: str, **fields: Any) -> None:
        log_event({
            "ts_ms": now_ms(),
            "event_type": event_type,
            "session_id": self.session_id,
            **fields,
        })

    async def transmit(self, plan: Transmission) -> TransmitReport:
        """
        Emit every tone of `plan` in order.

        Raises:
            TransmitterBusy if a transmission is already running.
            DeviceUnavailable if the emitter cannot be opened or fails.
        """
        if self._busy:
            raise TransmitterBusy(f"session {self.session_id} is already transmitting")

        self._busy = True
        self._stop_requested = False
        emitted = 0
        try:
            try:
                await self._emitter.open()
            except OSError as e:
                self._log("TX_DEVICE_UNAVAILABLE", error=str(e))
                raise DeviceUnavailable(f"speaker unavailable: {e}") from e

            self._log(
                "TX_STARTED",
                mode=plan.mode,
                symbols=plan.symbol_count,
                tones=len(plan.tones),
                airtime_s=round(plan.duration_s, 3),
            )
            try:
                with timed("tx_airtime", session_id=self.session_id) as extra:
                    for tone in plan.tones:
                        if self._stop_requested:
                            break
                        try:
                            await self._emitter.emit_tone(tone)
                        except OSError as e:
                            raise DeviceUnavailable(f"speaker failed: {e}") from e
                        emitted += 1
                    extra["tones_emitted"] = emitted
            finally:
                await self._emitter.close()
        finally:
            self._busy = False

        report = TransmitReport(tones_planned=len(plan.tones), tones_emitted=emitted)
        self._log(
            "TX_COMPLETE" if report.completed else "TX_STOPPED",
            tones_emitted=emitted,
            tones_planned=report.tones_planned,
        )
        return report
