"""
CONSTANTS-AS-WIRE-FORMAT
------------------------
Single source of truth for the acoustic link.

Rules:
- If changing a value changes what is heard on the air, it belongs here.
- Two independent implementations interoperate only if these values match.
- No magic numbers elsewhere in the codebase.
"""

from __future__ import annotations

from typing import Final, Tuple

# =============================================================================
# Symbol Codec (carrier mapping)
# =============================================================================

BASE_FREQ_HZ: Final[float] = 1000.0

# Text: one tone per character, raw char code times step
TEXT_FREQ_STEP_HZ: Final[float] = 50.0
TEXT_CODE_MIN: Final[int] = 32   # ' '
TEXT_CODE_MAX: Final[int] = 126  # '~'

# Voice: quantised sample level, denser step than text
VOICE_FREQ_STEP_HZ: Final[float] = 20.0
VOICE_LEVEL_MAX: Final[int] = 255

# Receiver data windows: [BASE, BASE + 256 * step)
DATA_BAND_SYMBOLS: Final[int] = 256
TEXT_BAND_HZ: Final[Tuple[float, float]] = (
    BASE_FREQ_HZ,
    BASE_FREQ_HZ + DATA_BAND_SYMBOLS * TEXT_FREQ_STEP_HZ,
)
VOICE_BAND_HZ: Final[Tuple[float, float]] = (
    BASE_FREQ_HZ,
    BASE_FREQ_HZ + DATA_BAND_SYMBOLS * VOICE_FREQ_STEP_HZ,
)

# =============================================================================
# Signatures (framing markers)
# =============================================================================

START_SIGNATURE_HZ: Final[Tuple[float, ...]] = (2000.0, 2500.0, 3000.0)
END_SIGNATURE_HZ: Final[Tuple[float, ...]] = (3000.0, 2500.0, 2000.0)
VOICE_MARKER_HZ: Final[Tuple[float, ...]] = (4000.0, 4500.0, 5000.0)

# Each received tone must lie within this window of the signature tone
SIGNATURE_TOLERANCE_HZ: Final[float] = 100.0

# =============================================================================
# Symbol timing & envelope
# =============================================================================

SIGNATURE_TONE_S: Final[float] = 0.1
TEXT_TONE_S: Final[float] = 0.05
VOICE_TONE_S: Final[float] = 0.02

# Attack ramp; the release ramp ends exactly at the symbol boundary.
ENVELOPE_ATTACK_S: Final[float] = 0.01
TONE_GAIN: Final[float] = 0.3

# =============================================================================
# Voice clips
# =============================================================================

VOICE_SAMPLE_RATE_HZ: Final[int] = 8_000
MAX_VOICE_SAMPLES: Final[int] = 100

# =============================================================================
# Spectral analysis (receiver)
# =============================================================================

ANALYSIS_SAMPLE_RATE_HZ: Final[int] = 48_000
ANALYSIS_FFT_SIZE: Final[int] = 2048
ANALYSIS_BIN_COUNT: Final[int] = ANALYSIS_FFT_SIZE // 2

# Samples actually windowed per frame (zero-padded to ANALYSIS_FFT_SIZE).
# Must stay well under TEXT_TONE_S so back-to-back repeats of one
# character show a clear magnitude dip at their shared boundary.
ANALYSIS_WINDOW_SIZE: Final[int] = 1024

# Byte-scaled magnitude range (0..255) maps this dB window
ANALYSIS_MIN_DB: Final[float] = -100.0
ANALYSIS_MAX_DB: Final[float] = -30.0
MAGNITUDE_MAX: Final[int] = 255

NOISE_FLOOR: Final[int] = 50

# Consecutive frames on one symbol before it counts as a tone onset
HOLD_FRAMES: Final[int] = 1

# A run on one symbol that dips this far below its peak and rises again
# by the same amount is a new tone (about 6.6 dB on the 0..255 scale)
RETRIGGER_DROP: Final[int] = 24

# Simulated channel frame period (must stay well below VOICE_TONE_S)
SIM_FRAME_PERIOD_S: Final[float] = 0.005

# =============================================================================
# Helper Functions
# =============================================================================

def bin_to_frequency(bin_index: int, *, sample_rate_hz: float, bin_count: int) -> float:
    """
    Convert an analysis bin index to its frequency in Hz.

    Defensive behavior:
    - Empty spectra map every bin to 0.0.
    """
    if bin_count <= 0:
        return 0.0
    return bin_index * (sample_rate_hz / 2.0) / bin_count


def frequency_to_bin(frequency_hz: float, *, sample_rate_hz: float, bin_count: int) -> int:
    """Nearest analysis bin for a frequency, clamped to the spectrum."""
    if bin_count <= 0:
        return 0
    idx = int(frequency_hz * bin_count / (sample_rate_hz / 2.0) + 0.5)
    return max(0, min(bin_count - 1, idx))
