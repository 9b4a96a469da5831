"""
Outward notifications emitted by the receiver reducer.

Rules:
- Notifications describe facts the reducer decided.
- They are executed by the listen session (callbacks, logging).
- No behavior, no IO, no clocks.
Invariant:
    - All concrete Notification subclasses MUST be frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from codec.symbols import Symbol
from protocol.enums.mode import Mode
from protocol.signatures import SignatureName
from receiver.state_dataclass import DecodedMessage


class NotificationType(str, Enum):
    """Stable discriminants used for logging and dispatch."""

    SYMBOL_DECODED = "SYMBOL_DECODED"
    MODE_CHANGED = "MODE_CHANGED"
    SIGNATURE_DETECTED = "SIGNATURE_DETECTED"
    MESSAGE_COMPLETE = "MESSAGE_COMPLETE"
    LOG_EVENT = "LOG_EVENT"


class Notification:
    """
    Base notification type.

    notification_type is an explicit discriminant and must never be
    inferred from Python type identity.
    """

    notification_type: NotificationType


@dataclass(frozen=True)
class SymbolDecoded(Notification):
    """A data tone was decoded and appended to the buffer."""
    symbol: Symbol
    mode: Mode
    frequency_hz: float
    notification_type: NotificationType = NotificationType.SYMBOL_DECODED


@dataclass(frozen=True)
class ModeChanged(Notification):
    """The receiver's interpretation of data tones changed."""
    mode: Mode
    notification_type: NotificationType = NotificationType.MODE_CHANGED


@dataclass(frozen=True)
class SignatureDetected(Notification):
    """A complete framing signature was heard."""
    name: SignatureName
    notification_type: NotificationType = NotificationType.SIGNATURE_DETECTED


@dataclass(frozen=True)
class MessageComplete(Notification):
    """A frame closed (END) or was flushed (stop)."""
    message: DecodedMessage
    notification_type: NotificationType = NotificationType.MESSAGE_COMPLETE


@dataclass(frozen=True)
class LogEvent(Notification):
    """
    Structured log payload.

    The session adds session-level fields before writing it.
    """
    event: dict[str, Any]
    notification_type: NotificationType = NotificationType.LOG_EVENT
