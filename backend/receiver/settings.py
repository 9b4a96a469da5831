"""
Receiver tuning knobs.

Immutable and per-session. Built from AppConfig by the caller; defaults
come from constants.
"""

from __future__ import annotations

from dataclasses import dataclass

from constants import HOLD_FRAMES, NOISE_FLOOR, RETRIGGER_DROP, SIGNATURE_TOLERANCE_HZ


@dataclass(frozen=True)
class DecoderSettings:
    """
    noise_floor:
        Peak magnitude (0..255) below which a frame counts as silence.

    hold_frames:
        Consecutive frames on one symbol needed before it is an onset.

    signature_tolerance_hz:
        Per-tone window for signature matching.

    require_start_signature:
        If False the receiver starts inside a TEXT frame and decodes
        everything it hears until END.

    retrigger_drop:
        Magnitude dip (and recovery) inside one run that starts a new
        tone on the same symbol.
    """
    noise_floor: int = NOISE_FLOOR
    hold_frames: int = HOLD_FRAMES
    signature_tolerance_hz: float = SIGNATURE_TOLERANCE_HZ
    require_start_signature: bool = True
    retrigger_drop: int = RETRIGGER_DROP

    def __post_init__(self) -> None:
        if self.hold_frames < 1:
            raise ValueError("hold_frames must be >= 1")
        if self.signature_tolerance_hz <= 0:
            raise ValueError("signature_tolerance_hz must be > 0")
        if self.retrigger_drop <= 0:
            raise ValueError("retrigger_drop must be > 0")
