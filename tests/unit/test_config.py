# pylint: disable=missing-module-docstring,missing-function-docstring

import pytest

from config import AppConfig
from constants import (
    HOLD_FRAMES,
    MAX_VOICE_SAMPLES,
    NOISE_FLOOR,
    RETRIGGER_DROP,
    SIGNATURE_TOLERANCE_HZ,
    TONE_GAIN,
)


ENV_VARS = (
    "ENV",
    "NOISE_FLOOR",
    "HOLD_FRAMES",
    "SIGNATURE_TOLERANCE_HZ",
    "REQUIRE_START_SIGNATURE",
    "RETRIGGER_DROP",
    "TONE_GAIN",
    "MAX_VOICE_SAMPLES",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_match_wire_constants():
    cfg = AppConfig.load_from_env()

    assert cfg.env == "dev"
    assert cfg.noise_floor == NOISE_FLOOR
    assert cfg.hold_frames == HOLD_FRAMES
    assert cfg.signature_tolerance_hz == SIGNATURE_TOLERANCE_HZ
    assert cfg.require_start_signature is True
    assert cfg.retrigger_drop == RETRIGGER_DROP
    assert cfg.tone_gain == TONE_GAIN
    assert cfg.max_voice_samples == MAX_VOICE_SAMPLES


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ENV", "prod")
    monkeypatch.setenv("NOISE_FLOOR", "80")
    monkeypatch.setenv("HOLD_FRAMES", "2")
    monkeypatch.setenv("SIGNATURE_TOLERANCE_HZ", "60.5")
    monkeypatch.setenv("REQUIRE_START_SIGNATURE", "no")
    monkeypatch.setenv("RETRIGGER_DROP", "30")
    monkeypatch.setenv("TONE_GAIN", "0.5")
    monkeypatch.setenv("MAX_VOICE_SAMPLES", "400")

    cfg = AppConfig.load_from_env()
    decoder = cfg.decoder_settings()
    transmit = cfg.transmit_settings()

    assert cfg.env == "prod"
    assert decoder.noise_floor == 80
    assert decoder.hold_frames == 2
    assert decoder.signature_tolerance_hz == 60.5
    assert decoder.require_start_signature is False
    assert decoder.retrigger_drop == 30
    assert transmit.gain == 0.5
    assert transmit.max_voice_samples == 400


@pytest.mark.parametrize("raw", ["1", "true", "YES", " on "])
def test_boolean_flags_accept_common_spellings(monkeypatch: pytest.MonkeyPatch, raw: str):
    monkeypatch.setenv("REQUIRE_START_SIGNATURE", raw)
    assert AppConfig.load_from_env().require_start_signature is True


def test_unparseable_number_raises(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HOLD_FRAMES", "two")
    with pytest.raises(ValueError):
        AppConfig.load_from_env()


def test_invalid_decoder_tuning_is_rejected(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HOLD_FRAMES", "0")
    cfg = AppConfig.load_from_env()
    with pytest.raises(ValueError):
        cfg.decoder_settings()


def test_non_positive_retrigger_drop_is_rejected(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("RETRIGGER_DROP", "0")
    with pytest.raises(ValueError):
        AppConfig.load_from_env().decoder_settings()
