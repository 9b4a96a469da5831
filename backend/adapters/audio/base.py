"""
Audio I/O collaborator contracts.

This module defines the *interface only*: no framing, no decoding, no
session state lives here.

Key invariants:
- emit_tone() returns only after the tone has finished sounding; the
  transmitter relies on this to keep symbols strictly serial.
- frames() yields snapshots in capture order at a fixed frame rate and is
  unbounded while the source is open.
- Device access failures surface as DeviceUnavailable (or OSError, which
  sessions translate).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncIterator

from audio.frames import SpectrumSnapshot
from protocol.framing import ToneCommand


class ToneEmitter(ABC):
    """
    Abstract speaker-side collaborator.

    Implementations are responsible for:
    - Synthesising a sine at tone.frequency_hz with tone's envelope
    - Blocking (awaiting) for the full tone.duration_s

    Non-responsibilities:
    - No sequencing across tones
    - No knowledge of signatures or payloads
    """

    async def open(self) -> None:
        """Acquire the output device. Default: nothing to acquire."""

    async def close(self) -> None:
        """Release the output device. Must be idempotent."""

    @abstractmethod
    async def emit_tone(self, tone: ToneCommand) -> None:
        """Sound one tone and return when it has finished playing."""
        raise NotImplementedError


class SnapshotSource(ABC):
    """
    Abstract microphone-side collaborator.

    Implementations are responsible for:
    - Producing one SpectrumSnapshot per analysis frame
    - Preserving arrival order

    Non-responsibilities:
    - No peak picking, no classification, no receiver state
    """

    async def open(self) -> None:
        """Acquire the input device. Default: nothing to acquire."""

    async def close(self) -> None:
        """Release the input device. Must be idempotent."""

    @abstractmethod
    def frames(self) -> AsyncIterator[SpectrumSnapshot]:
        """Return an async iterator over snapshots, oldest first."""
        raise NotImplementedError
