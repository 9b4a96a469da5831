# pylint: disable=missing-module-docstring,missing-function-docstring

import numpy as np
import pytest

from audio.frames import SpectrumSnapshot
from codec.symbols import decode_text, encode_text
from constants import (
    END_SIGNATURE_HZ,
    NOISE_FLOOR,
    SIGNATURE_TOLERANCE_HZ,
    START_SIGNATURE_HZ,
    VOICE_MARKER_HZ,
    bin_to_frequency,
    frequency_to_bin,
)
from receiver.peak import dominant_bin, dominant_frequency


def test_bin_to_frequency_uses_nyquist_over_bin_count():
    assert bin_to_frequency(0, sample_rate_hz=48_000, bin_count=1024) == 0.0
    assert bin_to_frequency(512, sample_rate_hz=48_000, bin_count=1024) == 12_000.0
    assert bin_to_frequency(1, sample_rate_hz=44_100, bin_count=1024) == pytest.approx(21.533, abs=1e-3)


def test_dominant_bin_picks_strongest():
    mags = np.array([0, 10, 120, 80, 121, 3], dtype=np.uint8)
    assert dominant_bin(mags) == 4


def test_dominant_bin_ties_resolve_to_lowest():
    mags = np.array([0, 200, 0, 200], dtype=np.uint8)
    assert dominant_bin(mags) == 1


def test_peak_below_noise_floor_is_silence():
    mags = np.full(1024, NOISE_FLOOR - 1, dtype=np.uint8)
    assert dominant_bin(mags) is None
    assert dominant_frequency(SpectrumSnapshot(magnitudes=mags)) is None


def test_peak_at_noise_floor_is_accepted():
    mags = np.zeros(1024, dtype=np.uint8)
    mags[300] = NOISE_FLOOR
    assert dominant_bin(mags) == 300


def test_empty_snapshot_is_silence():
    assert dominant_frequency(SpectrumSnapshot(magnitudes=np.zeros(0, dtype=np.uint8))) is None


def test_bin_quantisation_never_flips_a_character():
    # Default analysis resolution is 23.4 Hz, under half the 50 Hz text step
    for code in range(32, 127):
        ch = chr(code)
        idx = frequency_to_bin(encode_text(ch), sample_rate_hz=48_000, bin_count=1024)
        mags = np.zeros(1024, dtype=np.uint8)
        mags[idx] = 255
        freq = dominant_frequency(SpectrumSnapshot(magnitudes=mags, sample_rate_hz=48_000))
        assert freq is not None
        assert decode_text(freq) == ch


def test_signature_windows_are_disjoint():
    # No received tone can sit inside two different signature tone windows
    windows = sorted({*START_SIGNATURE_HZ, *END_SIGNATURE_HZ, *VOICE_MARKER_HZ})
    for lo, hi in zip(windows, windows[1:]):
        assert hi - lo > 2 * SIGNATURE_TOLERANCE_HZ


def test_framing_tones_outside_printable_text_except_shared_paren():
    # 2000 / 2500 Hz never decode to text; 3000 Hz is '(' and is
    # disambiguated by ordered signature matching
    assert decode_text(2000.0) is None
    assert decode_text(2500.0) is None
    assert decode_text(3000.0) == "("
