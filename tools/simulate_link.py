"""
Send a message through the simulated acoustic channel and decode it.

    python tools/simulate_link.py "Hello, world"
    python tools/simulate_link.py --noise 40 --hold-frames 2 "CQ CQ"
    python tools/simulate_link.py --voice-tone 440

Configuration comes from the environment (and `.env`); flags override it.
"""
import argparse
import asyncio
import sys
from dataclasses import replace

import numpy as np
from dotenv import load_dotenv

from adapters.audio.loopback import LoopbackChannel, LoopbackSource
from config import AppConfig
from constants import VOICE_SAMPLE_RATE_HZ
from protocol.enums.mode import Mode
from protocol.errors import AcousticLinkError
from session.listen_session import ListenSession
from session.transmit_session import TransmitSession


async def run(args: argparse.Namespace, cfg: AppConfig) -> int:
    channel = LoopbackChannel()
    tx = TransmitSession(channel, settings=cfg.transmit_settings())

    if args.voice_tone is not None:
        t = np.arange(VOICE_SAMPLE_RATE_HZ // 10) / VOICE_SAMPLE_RATE_HZ
        clip = 0.8 * np.sin(2 * np.pi * args.voice_tone * t)
        report = await tx.transmit_voice(clip)
    else:
        report = await tx.transmit_text(args.text)

    rx = ListenSession(settings=cfg.decoder_settings())
    source = LoopbackSource(channel, noise_level=args.noise, seed=args.seed)
    messages = await rx.run(source)

    print(f"sent {report.tones_emitted} tones", file=sys.stderr)
    for msg in messages:
        if msg.mode is Mode.TEXT:
            print(msg.text)
        else:
            print(np.array2string(msg.samples(), precision=3))
    return 0 if messages else 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Simulated acoustic FSK link")
    parser.add_argument("text", nargs="?", default="Hi")
    parser.add_argument("--voice-tone", type=float, default=None,
                        help="send a synthetic voice clip at this pitch (Hz) instead of text")
    parser.add_argument("--noise", type=int, default=0, help="background noise level (0..255)")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--hold-frames", type=int, default=None)
    args = parser.parse_args(argv)

    load_dotenv()
    cfg = AppConfig.load_from_env()
    if args.hold_frames is not None:
        cfg = replace(cfg, hold_frames=args.hold_frames)

    try:
        return asyncio.run(run(args, cfg))
    except AcousticLinkError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
