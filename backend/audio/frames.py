"""
Spectral frame primitives.

Pure data containers only.
No behavior beyond trivial derived properties, no queues, no timing logic.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from constants import ANALYSIS_SAMPLE_RATE_HZ


@dataclass(frozen=True, eq=False)
class SpectrumSnapshot:
    """
    One magnitude-spectrum analysis frame, as delivered by a capture source.

    magnitudes:
        Per-bin magnitudes on a 0..255 scale, index 0 = DC. The last bin
        sits just below Nyquist (bin_count = fft_size / 2).

    sample_rate_hz:
        Sample rate of the audio the spectrum was computed from.

    sequence_num:
        Monotonic frame counter from the source. Observability only.
    """
    magnitudes: np.ndarray
    sample_rate_hz: int = ANALYSIS_SAMPLE_RATE_HZ
    sequence_num: int = 0
    ts_ms: int = 0

    @property
    def bin_count(self) -> int:
        return int(len(self.magnitudes))

    @property
    def bin_width_hz(self) -> float:
        if self.bin_count == 0:
            return 0.0
        return (self.sample_rate_hz / 2.0) / self.bin_count
