"""
Simulated acoustic channel.

Renders tone commands straight into spectral snapshots, without sampling
any audio: each frame puts the envelope-scaled level of the sounding tone
into the tone's nearest bin, optionally over seeded background noise.

Used by tests and tools/simulate_link.py to exercise transmitter and
receiver end to end.
"""

from __future__ import annotations

import asyncio
import math
from typing import AsyncIterator, Iterable, Iterator

import numpy as np

from adapters.audio.base import SnapshotSource, ToneEmitter
from audio.frames import SpectrumSnapshot
from constants import (
    ANALYSIS_BIN_COUNT,
    ANALYSIS_SAMPLE_RATE_HZ,
    MAGNITUDE_MAX,
    SIM_FRAME_PERIOD_S,
    frequency_to_bin,
)
from protocol.framing import ToneCommand


def simulate_frames(
    tones: Iterable[ToneCommand],
    *,
    frame_period_s: float = SIM_FRAME_PERIOD_S,
    sample_rate_hz: int = ANALYSIS_SAMPLE_RATE_HZ,
    bin_count: int = ANALYSIS_BIN_COUNT,
    noise_level: int = 0,
    lead_in_frames: int = 0,
    tail_frames: int = 0,
    seed: int | None = None,
) -> Iterator[SpectrumSnapshot]:
    """
    Render a tone plan into snapshots, frames aligned to each tone's start.

    The tone's peak gain maps to full scale (255); the envelope scales it
    down, so the first frame of every tone and its release tail read as
    silence to the receiver.

    noise_level:
        Upper bound (exclusive) of uniform per-bin background noise.
    """
    if frame_period_s <= 0:
        raise ValueError("frame_period_s must be > 0")

    rng = np.random.default_rng(seed)
    seq = 0

    def _frame(bin_idx: int | None, level: int) -> SpectrumSnapshot:
        nonlocal seq
        seq += 1
        if noise_level > 0:
            mags = rng.integers(0, noise_level, size=bin_count).astype(np.uint8)
        else:
            mags = np.zeros(bin_count, dtype=np.uint8)
        if bin_idx is not None:
            mags[bin_idx] = max(int(mags[bin_idx]), level)
        return SpectrumSnapshot(
            magnitudes=mags,
            sample_rate_hz=sample_rate_hz,
            sequence_num=seq,
            ts_ms=int(seq * frame_period_s * 1000),
        )

    for _ in range(lead_in_frames):
        yield _frame(None, 0)

    for tone in tones:
        bin_idx = frequency_to_bin(
            tone.frequency_hz,
            sample_rate_hz=sample_rate_hz,
            bin_count=bin_count,
        )
        n_frames = max(1, math.ceil(tone.duration_s / frame_period_s - 1e-9))
        for j in range(n_frames):
            rel = tone.gain_at(j * frame_period_s) / tone.gain if tone.gain > 0 else 0.0
            yield _frame(bin_idx, int(rel * MAGNITUDE_MAX))

    for _ in range(tail_frames):
        yield _frame(None, 0)


class LoopbackChannel(ToneEmitter):
    """
    In-memory speaker: records every emitted tone.

    realtime:
        If True, emit_tone sleeps for the tone's duration; otherwise it only
        yields to the event loop.
    """

    def __init__(self, *, realtime: bool = False) -> None:
        self._realtime = realtime
        self.tones: list[ToneCommand] = []

    async def emit_tone(self, tone: ToneCommand) -> None:
        self.tones.append(tone)
        await asyncio.sleep(tone.duration_s if self._realtime else 0)

    def clear(self) -> None:
        self.tones.clear()


class LoopbackSource(SnapshotSource):
    """
    In-memory microphone: replays whatever a LoopbackChannel recorded.

    The stream ends after the recorded tones plus `tail_frames` of silence;
    a live device would keep yielding until stopped.
    """

    def __init__(
        self,
        channel: LoopbackChannel,
        *,
        noise_level: int = 0,
        lead_in_frames: int = 4,
        tail_frames: int = 4,
        seed: int | None = None,
    ) -> None:
        self._channel = channel
        self._noise_level = noise_level
        self._lead_in_frames = lead_in_frames
        self._tail_frames = tail_frames
        self._seed = seed

    async def frames(self) -> AsyncIterator[SpectrumSnapshot]:
        for snapshot in simulate_frames(
            list(self._channel.tones),
            noise_level=self._noise_level,
            lead_in_frames=self._lead_in_frames,
            tail_frames=self._tail_frames,
            seed=self._seed,
        ):
            yield snapshot
            await asyncio.sleep(0)
