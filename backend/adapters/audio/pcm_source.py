"""
Snapshot source fed by raw PCM16 blocks.

Bridges a capture collaborator that delivers little-endian PCM16 mono
blocks (one block per analysis frame) to the receiver: each block is
appended to a rolling window and analysed into one SpectrumSnapshot.
"""

from __future__ import annotations

from typing import AsyncIterable, AsyncIterator

import numpy as np

from adapters.audio.base import SnapshotSource
from audio.analysis import analyse_block
from audio.frames import SpectrumSnapshot
from audio.pcm import pcm16le_to_float32
from constants import ANALYSIS_FFT_SIZE, ANALYSIS_SAMPLE_RATE_HZ


class PcmSnapshotSource(SnapshotSource):
    """Analyse each incoming PCM block over the last `fft_size` samples."""

    def __init__(
        self,
        blocks: AsyncIterable[bytes],
        *,
        sample_rate_hz: int = ANALYSIS_SAMPLE_RATE_HZ,
        fft_size: int = ANALYSIS_FFT_SIZE,
    ) -> None:
        self._blocks = blocks
        self._sample_rate_hz = sample_rate_hz
        self._fft_size = fft_size
        self._window = np.zeros(fft_size, dtype=np.float32)

    async def frames(self) -> AsyncIterator[SpectrumSnapshot]:
        seq = 0
        samples_seen = 0
        async for block in self._blocks:
            audio = pcm16le_to_float32(block)
            if audio.size == 0:
                continue
            self._window = np.concatenate([self._window, audio])[-self._fft_size:]
            samples_seen += audio.size
            seq += 1
            yield analyse_block(
                self._window,
                sample_rate_hz=self._sample_rate_hz,
                sequence_num=seq,
                ts_ms=(samples_seen * 1000) // self._sample_rate_hz,
                fft_size=self._fft_size,
            )
