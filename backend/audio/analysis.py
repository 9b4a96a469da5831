"""
Byte-scaled magnitude spectra from raw audio.

Turns float32 sample windows into SpectrumSnapshot frames the receiver can
consume. The scaling follows the usual browser analyser convention:
Blackman window, magnitude normalised by FFT size, converted to dB and
mapped linearly from [min_db, max_db] onto 0..255.

Only the last `window_size` samples are windowed; the rest of the FFT
frame is zero padding. Bin spacing stays at sample_rate / fft_size while
the time resolution is set by the shorter window.
"""
from __future__ import annotations

from typing import Iterator

import numpy as np
from scipy.signal import get_window

from audio.frames import SpectrumSnapshot
from constants import (
    ANALYSIS_FFT_SIZE,
    ANALYSIS_MAX_DB,
    ANALYSIS_MIN_DB,
    ANALYSIS_WINDOW_SIZE,
    MAGNITUDE_MAX,
)


def magnitude_spectrum(
    samples: np.ndarray,
    *,
    fft_size: int = ANALYSIS_FFT_SIZE,
    min_db: float = ANALYSIS_MIN_DB,
    max_db: float = ANALYSIS_MAX_DB,
    window_size: int | None = None,
) -> np.ndarray:
    """
    Compute a 0..255 magnitude spectrum of the last `window_size` samples.

    window_size defaults to ANALYSIS_WINDOW_SIZE (capped at fft_size).
    Shorter inputs are zero-padded at the front so the most recent audio
    always sits at the end of the window.

    Returns:
        uint8 array of length fft_size // 2 (index 0 = DC).
    """
    if fft_size <= 0 or fft_size % 2 != 0:
        raise ValueError("fft_size must be a positive even number")
    if max_db <= min_db:
        raise ValueError("max_db must be greater than min_db")
    if window_size is None:
        window_size = min(ANALYSIS_WINDOW_SIZE, fft_size)
    if not 0 < window_size <= fft_size:
        raise ValueError("window_size must lie in (0, fft_size]")

    audio = np.asarray(samples, dtype=np.float64)[-window_size:]
    if audio.size < window_size:
        audio = np.concatenate([np.zeros(window_size - audio.size), audio])

    window = get_window("blackman", window_size, fftbins=True)
    spectrum = np.abs(np.fft.rfft(audio * window, n=fft_size))[: fft_size // 2] / fft_size

    with np.errstate(divide="ignore"):
        db = 20.0 * np.log10(spectrum)

    scaled = (db - min_db) * (MAGNITUDE_MAX / (max_db - min_db))
    scaled = np.nan_to_num(scaled, nan=0.0, neginf=0.0, posinf=float(MAGNITUDE_MAX))
    return np.clip(scaled, 0, MAGNITUDE_MAX).astype(np.uint8)


def analyse_block(
    samples: np.ndarray,
    *,
    sample_rate_hz: int,
    sequence_num: int = 0,
    ts_ms: int = 0,
    fft_size: int = ANALYSIS_FFT_SIZE,
) -> SpectrumSnapshot:
    """Wrap `magnitude_spectrum` into a SpectrumSnapshot."""
    return SpectrumSnapshot(
        magnitudes=magnitude_spectrum(samples, fft_size=fft_size),
        sample_rate_hz=sample_rate_hz,
        sequence_num=sequence_num,
        ts_ms=ts_ms,
    )


def iter_snapshots(
    samples: np.ndarray,
    *,
    sample_rate_hz: int,
    hop_size: int,
    fft_size: int = ANALYSIS_FFT_SIZE,
) -> Iterator[SpectrumSnapshot]:
    """
    Slide an analysis window over a whole recording.

    One snapshot per `hop_size` samples; each analyses the audio ending
    at that hop (zero-padded at the very start).
    """
    if hop_size <= 0:
        raise ValueError("hop_size must be > 0")

    audio = np.asarray(samples, dtype=np.float32)
    seq = 0
    for end in range(hop_size, audio.size + 1, hop_size):
        seq += 1
        yield analyse_block(
            audio[max(0, end - fft_size) : end],
            sample_rate_hz=sample_rate_hz,
            sequence_num=seq,
            ts_ms=(end * 1000) // sample_rate_hz,
            fft_size=fft_size,
        )
