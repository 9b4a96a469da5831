"""
Dominant-frequency extraction (pure).

One estimate per frame, never smoothed across frames: symbol durations are
long relative to the frame period, so several frames land inside each
transmitted tone and the tone segmenter absorbs the jitter.
"""

from __future__ import annotations

import numpy as np

from audio.frames import SpectrumSnapshot
from constants import NOISE_FLOOR, bin_to_frequency


def dominant_bin(magnitudes: np.ndarray, *, noise_floor: int = NOISE_FLOOR) -> int | None:
    """
    Index of the strongest bin, or None for silence / noise.

    Ties resolve to the lowest bin.
    """
    if len(magnitudes) == 0:
        return None
    idx = int(np.argmax(magnitudes))
    if magnitudes[idx] < noise_floor:
        return None
    return idx


def dominant_peak(
    snapshot: SpectrumSnapshot,
    *,
    noise_floor: int = NOISE_FLOOR,
) -> tuple[float, int] | None:
    """
    (frequency in Hz, magnitude 0..255) of the strongest bin.

    None below the noise floor.
    """
    idx = dominant_bin(snapshot.magnitudes, noise_floor=noise_floor)
    if idx is None:
        return None
    freq = bin_to_frequency(
        idx,
        sample_rate_hz=snapshot.sample_rate_hz,
        bin_count=snapshot.bin_count,
    )
    return freq, int(snapshot.magnitudes[idx])


def dominant_frequency(
    snapshot: SpectrumSnapshot,
    *,
    noise_floor: int = NOISE_FLOOR,
) -> float | None:
    """Frequency in Hz of the strongest bin, or None below the noise floor."""
    peak = dominant_peak(snapshot, noise_floor=noise_floor)
    return None if peak is None else peak[0]
