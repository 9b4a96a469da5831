"""
Payload mode enumeration.

A transmission body is homogeneous: every symbol is text or every symbol
is voice. The receiver's interpretation mode uses the same values.
"""

from __future__ import annotations

from enum import Enum


class Mode(str, Enum):
    """
    Interpretation of data tones.

    TEXT:
        One printable ASCII character per tone (50 Hz step).

    VOICE:
        One quantised audio sample per tone (20 Hz step).
        Entered on the transmit side by prefixing VOICE_MARKER.
    """

    TEXT = "TEXT"
    VOICE = "VOICE"
