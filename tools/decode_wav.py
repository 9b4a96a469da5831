"""
Decode every message found in a recorded WAV file.

    python tools/decode_wav.py capture.wav
    python tools/decode_wav.py --frame-ms 10 capture.wav

Only 16-bit PCM is supported; multi-channel files are decoded from the
first channel.
"""
import argparse
import sys
import wave

import numpy as np
from dotenv import load_dotenv

from audio.analysis import iter_snapshots
from audio.pcm import pcm16le_to_float32
from config import AppConfig
from constants import SIM_FRAME_PERIOD_S
from protocol.enums.mode import Mode
from session.listen_session import ListenSession


def read_wav(path: str) -> tuple[np.ndarray, int]:
    with wave.open(path, "rb") as wf:
        if wf.getsampwidth() != 2:
            raise ValueError(f"{path}: expected 16-bit PCM, got {wf.getsampwidth() * 8}-bit")
        channels = wf.getnchannels()
        rate = wf.getframerate()
        audio = pcm16le_to_float32(wf.readframes(wf.getnframes()))
    return audio[::channels], rate


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Decode FSK messages from a WAV recording")
    parser.add_argument("path")
    parser.add_argument("--frame-ms", type=float, default=SIM_FRAME_PERIOD_S * 1000,
                        help="analysis hop in milliseconds")
    args = parser.parse_args(argv)

    load_dotenv()
    cfg = AppConfig.load_from_env()

    try:
        audio, rate = read_wav(args.path)
    except (OSError, wave.Error, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    print(f"sample_rate: {rate}, samples: {audio.size}", file=sys.stderr)

    rx = ListenSession(settings=cfg.decoder_settings())
    rx.start()
    hop = max(1, int(rate * args.frame_ms / 1000))
    for snapshot in iter_snapshots(audio, sample_rate_hz=rate, hop_size=hop):
        rx.feed(snapshot)
    rx.stop()

    for msg in rx.messages:
        suffix = "" if msg.terminated else "  [unterminated]"
        if msg.mode is Mode.TEXT:
            print(msg.text + suffix)
        else:
            print(np.array2string(msg.samples(), precision=3) + suffix)
    return 0 if rx.messages else 1


if __name__ == "__main__":
    raise SystemExit(main())
