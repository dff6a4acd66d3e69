#!/usr/bin/env python3
"""
Command-line diagnostics for a mixer on the network.

Usage:
    python -m xmix [--host H] [--port P] [--config FILE] status
    python -m xmix query /ch/01/mix/fader
    python -m xmix send /ch/01/mix/fader 0.75
    python -m xmix recall 3
    python -m xmix fader 1 [0.75]

Host and port fall back to OSC_HOST / OSC_PORT, then to config defaults.
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

import yaml

from xmix.client import MixerClient
from xmix.config import load_config
from xmix.errors import MixerError
from xmix.log import set_level


def parse_argument(arg: str):
    """Parse a command-line argument to the appropriate type.

    Attempts to convert string arguments to int or float, preserving
    strings if conversion fails.
    """
    try:
        return int(arg)
    except ValueError:
        pass
    try:
        return float(arg)
    except ValueError:
        pass
    return arg


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="xmix", description="X32 / X-Air mixer OSC diagnostics")
    parser.add_argument("--host", type=str, default=None,
                        help="Mixer IP or hostname (default: OSC_HOST or 192.168.1.70)")
    parser.add_argument("--port", type=int, default=None,
                        help="Mixer OSC port (default: OSC_PORT or 10024)")
    parser.add_argument("--config", type=str, default=None,
                        help="YAML configuration file")

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("status", help="Detect the mixer and print its status")

    query = commands.add_parser("query", help="Query an OSC address")
    query.add_argument("address")

    send = commands.add_parser("send", help="Send a raw OSC message")
    send.add_argument("address")
    send.add_argument("args", nargs="*", type=parse_argument)

    recall = commands.add_parser("recall", help="Recall a scene (1-based)")
    recall.add_argument("scene", type=int)

    fader = commands.add_parser("fader", help="Read or set a channel fader")
    fader.add_argument("channel", type=int)
    fader.add_argument("level", type=float, nargs="?")

    return parser


async def run_command(mixer: MixerClient, args: argparse.Namespace) -> None:
    await mixer.connect()
    try:
        if args.command == "query":
            print(await mixer.query_custom(args.address))
        elif args.command == "send":
            await mixer.send_custom(args.address, args.args)
            print(f"Sent {args.address} {args.args}")
        elif args.command == "recall":
            await mixer.recall_scene(args.scene)
            print(f"Recalled scene {args.scene}")
        elif args.command == "fader":
            if args.level is None:
                print(await mixer.get_fader(args.channel))
            else:
                await mixer.set_fader(args.channel, args.level)
                print(f"Channel {args.channel} fader -> {args.level}")
    finally:
        mixer.close()


async def show_status(mixer: MixerClient) -> bool:
    """Print status JSON; returns whether the mixer answered."""
    error = None
    try:
        await mixer.connect()
    except MixerError as e:
        error = str(e)
    try:
        status = await mixer.get_status()
    finally:
        mixer.close()

    if error:
        status["error"] = error
    print(json.dumps(status, indent=2))
    return status["connected"]


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.host:
        config['mixer']['host'] = args.host
    if args.port is not None:
        config['mixer']['port'] = args.port
    set_level(config['logging']['level'])

    try:
        mixer = MixerClient.from_config(config)
        if args.command == "status":
            return 0 if asyncio.run(show_status(mixer)) else 1
        else:
            asyncio.run(run_command(mixer, args))
    except (MixerError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
