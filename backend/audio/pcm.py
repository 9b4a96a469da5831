"""PCM conversion and resampling utilities."""
from fractions import Fraction

import numpy as np
from scipy import signal


def pcm16le_to_float32(pcm_bytes: bytes) -> np.ndarray:
    """
    Convert PCM16 little-endian mono bytes to float32 in [-1.0, 1.0).

    No resampling. No channel mixing.
    """
    if len(pcm_bytes) % 2 != 0:
        # Truncated sample; caller should treat as malformed block upstream.
        pcm_bytes = pcm_bytes[: len(pcm_bytes) - 1]

    audio_i16 = np.frombuffer(pcm_bytes, dtype="<i2")  # little-endian int16
    audio_f32 = audio_i16.astype(np.float32) / 32768.0
    return audio_f32


def float32_to_pcm16le(samples: np.ndarray) -> bytes:
    """
    Convert float samples to PCM16 little-endian mono bytes.

    Samples are clipped to [-1.0, 1.0] first.
    """
    clipped = np.clip(np.asarray(samples, dtype=np.float32), -1.0, 1.0)
    audio_i16 = np.round(clipped * 32767.0).astype("<i2")
    return audio_i16.tobytes()


def resample(samples: np.ndarray, source_rate_hz: int, target_rate_hz: int) -> np.ndarray:
    """
    Resample a mono float clip with a polyphase filter.

    Raises:
        ValueError if either rate is not positive.
    """
    if source_rate_hz <= 0 or target_rate_hz <= 0:
        raise ValueError("sample rates must be > 0")

    audio = np.asarray(samples, dtype=np.float32)
    if source_rate_hz == target_rate_hz or audio.size == 0:
        return audio

    ratio = Fraction(target_rate_hz, source_rate_hz)
    out = signal.resample_poly(audio, ratio.numerator, ratio.denominator)
    return out.astype(np.float32)
