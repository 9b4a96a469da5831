"""
Framing signatures.

A signature is an ordered, fixed sequence of tones. Receivers recognise it
only as an exact ordered match (each tone within tolerance), never from a
single tone, so an isolated data symbol that happens to share a frequency
with a signature tone is not mistaken for framing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from constants import (
    END_SIGNATURE_HZ,
    SIGNATURE_TOLERANCE_HZ,
    START_SIGNATURE_HZ,
    VOICE_MARKER_HZ,
)


class SignatureName(str, Enum):
    """Stable discriminants for logging and notifications."""

    START = "START"
    END = "END"
    VOICE_MARKER = "VOICE_MARKER"


@dataclass(frozen=True)
class Signature:
    """An ordered tone sequence with a name."""
    name: SignatureName
    tones_hz: tuple[float, ...]

    def __len__(self) -> int:
        return len(self.tones_hz)


START = Signature(SignatureName.START, START_SIGNATURE_HZ)
END = Signature(SignatureName.END, END_SIGNATURE_HZ)
VOICE_MARKER = Signature(SignatureName.VOICE_MARKER, VOICE_MARKER_HZ)

SIGNATURES: tuple[Signature, ...] = (START, END, VOICE_MARKER)


def _tone_matches(expected_hz: float, observed_hz: float, tolerance_hz: float) -> bool:
    return abs(expected_hz - observed_hz) <= tolerance_hz


def is_prefix(
    signature: Signature,
    observed_hz: Sequence[float],
    *,
    tolerance_hz: float = SIGNATURE_TOLERANCE_HZ,
) -> bool:
    """
    True if `observed_hz` matches the first len(observed_hz) tones.

    A complete match is also a prefix. The empty sequence is a prefix of
    every signature.
    """
    if len(observed_hz) > len(signature):
        return False
    return all(
        _tone_matches(expected, observed, tolerance_hz)
        for expected, observed in zip(signature.tones_hz, observed_hz)
    )


def matches(
    signature: Signature,
    observed_hz: Sequence[float],
    *,
    tolerance_hz: float = SIGNATURE_TOLERANCE_HZ,
) -> bool:
    """True if `observed_hz` is exactly the signature, tone for tone."""
    return len(observed_hz) == len(signature) and is_prefix(
        signature, observed_hz, tolerance_hz=tolerance_hz
    )
