"""
Receiver callbacks.

Subclass and override what you need; every hook defaults to a no-op.
Hooks run synchronously on the frame path, in decision order, and must
not block.
"""

from __future__ import annotations

from codec.symbols import Symbol
from protocol.enums.mode import Mode
from protocol.signatures import SignatureName
from receiver.state_dataclass import DecodedMessage


class ReceiverListener:
    """Outward notifications from a ListenSession."""

    def on_symbol_decoded(self, symbol: Symbol) -> None:
        """A data symbol was appended to the buffer."""

    def on_mode_changed(self, mode: Mode) -> None:
        """Data tones are now interpreted as `mode`."""

    def on_signature_detected(self, name: SignatureName) -> None:
        """A complete START / END / VOICE_MARKER was heard."""

    def on_message_complete(self, message: DecodedMessage) -> None:
        """A frame closed on END, or was flushed by a stop."""
