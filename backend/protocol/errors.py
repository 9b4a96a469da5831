"""
Error taxonomy for the acoustic link.

Decode misses are NOT errors: a frame whose dominant frequency matches no
band is expected under noise and is ignored by the receiver without raising.
"""

from __future__ import annotations


class AcousticLinkError(Exception):
    """Base class for acoustic link errors."""


class InputRejected(AcousticLinkError):
    """
    Raised when a payload cannot be transmitted.

    Empty or whitespace-only text, characters outside printable ASCII, or
    a voice clip with no samples. Always raised before the first tone is
    scheduled, so a rejected transmission never leaves partial audio on air.
    """


class SymbolOutOfRange(InputRejected):
    """Raised by the codec when a character or sample has no carrier."""


class DeviceUnavailable(AcousticLinkError):
    """
    Raised when the speaker or microphone collaborator cannot be used.

    The session aborts and discards any state it created.
    """


class TransmitterBusy(AcousticLinkError):
    """Raised when a second transmission is started on a busy session."""


class SessionNotActive(AcousticLinkError):
    """Raised when frames are fed to a listen session that is not listening."""
