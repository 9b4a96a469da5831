"""
Receiver phase enumeration.

Rules:
- This enum defines ONLY the framing phases.
- Transitions are defined exclusively in the receiver reducer.
"""

from __future__ import annotations

from enum import Enum


class Phase(str, Enum):
    """
    Where the receiver is relative to a transmission frame.

    IDLE:
        Waiting for START (or VOICE_MARKER). Data tones are ignored.

    RECEIVING:
        Inside a frame; data tones are decoded into the buffer until END.
    """

    IDLE = "IDLE"
    RECEIVING = "RECEIVING"
