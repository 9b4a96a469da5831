"""
Application configuration.

Responsibilities:
- Read environment variables (entry points load `.env` first)
- Provide a typed, immutable config object
- Build per-session settings for transmitter and receiver

Non-responsibilities:
- No wire constants (see constants.py); only receiver/transmitter tuning
- No runtime mutation
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from constants import (
    HOLD_FRAMES,
    MAX_VOICE_SAMPLES,
    NOISE_FLOOR,
    RETRIGGER_DROP,
    SIGNATURE_TOLERANCE_HZ,
    TONE_GAIN,
)
from protocol.framing import TransmitSettings
from receiver.settings import DecoderSettings


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable application configuration.

    Constructed once at process startup and passed down to sessions.
    """

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    env: str

    # ------------------------------------------------------------------
    # Receiver
    # ------------------------------------------------------------------

    noise_floor: int
    hold_frames: int
    signature_tolerance_hz: float
    require_start_signature: bool
    retrigger_drop: int

    # ------------------------------------------------------------------
    # Transmitter
    # ------------------------------------------------------------------

    tone_gain: float
    max_voice_samples: int

    # ------------------------------------------------------------------
    # Session settings
    # ------------------------------------------------------------------

    def decoder_settings(self) -> DecoderSettings:
        return DecoderSettings(
            noise_floor=self.noise_floor,
            hold_frames=self.hold_frames,
            signature_tolerance_hz=self.signature_tolerance_hz,
            require_start_signature=self.require_start_signature,
            retrigger_drop=self.retrigger_drop,
        )

    def transmit_settings(self) -> TransmitSettings:
        return TransmitSettings(
            gain=self.tone_gain,
            max_voice_samples=self.max_voice_samples,
        )

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env() -> AppConfig:
        """
        Load configuration from environment variables.

        Raises:
            ValueError if a numeric variable does not parse.
        """
        return AppConfig(
            env=os.environ.get("ENV", "dev"),

            noise_floor=int(os.environ.get("NOISE_FLOOR", NOISE_FLOOR)),
            hold_frames=int(os.environ.get("HOLD_FRAMES", HOLD_FRAMES)),
            signature_tolerance_hz=float(
                os.environ.get("SIGNATURE_TOLERANCE_HZ", SIGNATURE_TOLERANCE_HZ)
            ),
            require_start_signature=_env_bool("REQUIRE_START_SIGNATURE", True),
            retrigger_drop=int(os.environ.get("RETRIGGER_DROP", RETRIGGER_DROP)),

            tone_gain=float(os.environ.get("TONE_GAIN", TONE_GAIN)),
            max_voice_samples=int(os.environ.get("MAX_VOICE_SAMPLES", MAX_VOICE_SAMPLES)),
        )
