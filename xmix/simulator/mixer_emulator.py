#!/usr/bin/env python3
"""
Mixer Emulator - Integration Testing

Emulates an X32 or X-Air mixer's OSC surface for tests without hardware.

Features:
- Answers its own family's identification address only
- Stores parameter values: a message with arguments sets, without queries
- Scene load/save bookkeeping (/-snap/index, names)
- Counts /xremote keepalives
- Fault injection: mute all replies, ignore addresses, delay replies
- Records every received message for assertions

Note: Values are stored as raw wire arguments; the emulator does no unit
conversion and knows nothing about valid address trees.
"""

import argparse
import asyncio
import signal
import sys
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pythonosc import osc_server
from pythonosc.dispatcher import Dispatcher

from xmix.families import MixerFamily, profile_for
from xmix.log import get_logger
from xmix.osc import KEEPALIVE_ADDRESS, build_message

logger = get_logger(__name__)

# Identification replies as real firmware formats them
IDENTIFICATION = {
    MixerFamily.XAIR: ("192.168.1.70", "XR18-EMU", "XR18", "1.17"),
    MixerFamily.X32: ("V2.07", "X32-EMU", "X32", "4.06"),
}


class MixerEmulator:
    """Emulated mixer listening on a UDP port.

    Args:
        family: Dialect to speak (default: X-Air)
        ip: Address to bind (default: 127.0.0.1)
        port: UDP port; 0 picks a free one, readable from .port after start()
        respond: When False, nothing is ever answered
        ignored: Addresses whose queries are never answered
        reply_delay: Seconds to wait before each reply
        state: Initial {address: args} values
    """

    def __init__(self, family: MixerFamily = MixerFamily.XAIR, ip: str = "127.0.0.1",
                 port: int = 0, respond: bool = True, ignored: Iterable[str] = (),
                 reply_delay: float = 0.0, state: Optional[Dict[str, Any]] = None):
        self.family = family
        self.profile = profile_for(family)
        self.ip = ip
        self.port = port
        self.respond = respond
        self.ignored = set(ignored)
        self.reply_delay = reply_delay

        scene_base = self.profile.indices["scene"].base
        self.state: Dict[str, Tuple[Any, ...]] = {
            "/-snap/index": (scene_base,),
            "/-snap/name": ("",),
        }
        for address, value in (state or {}).items():
            self.set_value(address, value)

        # Stored scene names keyed by wire index
        self.scene_names: Dict[int, str] = {}

        # Statistics
        self.received: List[Tuple[str, Tuple[Any, ...]]] = []
        self.keepalive_count = 0
        self.reply_count = 0

        self.dispatcher = Dispatcher()
        self.dispatcher.map(KEEPALIVE_ADDRESS, self._on_keepalive, needs_reply_address=True)
        self.dispatcher.map("/-snap/load", self._on_scene_load, needs_reply_address=True)
        self.dispatcher.map("/-snap/save", self._on_scene_save, needs_reply_address=True)
        self.dispatcher.map("/-snap/store", self._on_scene_save, needs_reply_address=True)
        self.dispatcher.set_default_handler(self._on_message, needs_reply_address=True)

        self.transport: Optional[asyncio.DatagramTransport] = None

    # ------------------------------------------------------------------
    # State inspection API
    # ------------------------------------------------------------------

    def set_value(self, address: str, value: Any) -> None:
        """Store a value; a tuple or list stores several arguments."""
        self.state[address] = tuple(value) if isinstance(value, (list, tuple)) else (value,)

    def get_value(self, address: str) -> Any:
        """First stored argument for an address, or None."""
        args = self.state.get(address)
        return args[0] if args else None

    def messages_for(self, address: str) -> List[Tuple[Any, ...]]:
        """Arguments of every received message sent to an address."""
        return [args for addr, args in self.received if addr == address]

    @property
    def addresses(self) -> List[str]:
        return [addr for addr, _ in self.received]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        server = osc_server.AsyncIOOSCUDPServer((self.ip, self.port), self.dispatcher,
                                                asyncio.get_running_loop())
        self.transport, _ = await server.create_serve_endpoint()
        self.port = self.transport.get_extra_info('sockname')[1]
        logger.info(f"{self.profile.display_name} emulator listening on {self.ip}:{self.port}")

    def stop(self) -> None:
        if self.transport is not None:
            self.transport.close()
            self.transport = None

    async def __aenter__(self) -> "MixerEmulator":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _on_keepalive(self, client_address, address, *args):
        self.received.append((address, args))
        self.keepalive_count += 1

    def _on_scene_load(self, client_address, address, *args):
        self.received.append((address, args))
        if not args:
            return
        index = int(args[0])
        self.state["/-snap/index"] = (index,)
        if not self.profile.indexed_scene_names:
            self.state["/-snap/name"] = (self.scene_names.get(index, ""),)

    def _on_scene_save(self, client_address, address, *args):
        self.received.append((address, args))
        if not args:
            return
        index = int(args[0])
        self.state["/-snap/index"] = (index,)
        if not self.profile.indexed_scene_names:
            self.scene_names[index] = str(self.get_value("/-snap/name") or "")

    def _on_message(self, client_address, address, *args):
        self.received.append((address, args))

        if args:
            self.state[address] = args
            return

        if address == self.profile.info_address:
            self._reply(client_address, address, IDENTIFICATION[self.family])
        elif address in self.state:
            self._reply(client_address, address, self.state[address])

    def _reply(self, client_address, address: str, args: Tuple[Any, ...]) -> None:
        if not self.respond or address in self.ignored:
            return
        if self.reply_delay > 0:
            asyncio.get_running_loop().call_later(
                self.reply_delay, self._send, client_address, address, args)
        else:
            self._send(client_address, address, args)

    def _send(self, client_address, address: str, args: Tuple[Any, ...]) -> None:
        if self.transport is None or self.transport.is_closing():
            return
        self.transport.sendto(build_message(address, args), client_address)
        self.reply_count += 1


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="X32 / X-Air mixer emulator for integration testing")
    parser.add_argument("--family", choices=["x-air", "x32"], default="x-air",
                        help="Dialect to emulate (default: x-air)")
    parser.add_argument("--ip", type=str, default="127.0.0.1",
                        help="IP address to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=None,
                        help="UDP port (default: 10024 for x-air, 10023 for x32)")
    args = parser.parse_args()

    family = MixerFamily(args.family)
    port = args.port if args.port is not None else profile_for(family).default_port
    emulator = MixerEmulator(family=family, ip=args.ip, port=port)

    async def run():
        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, stop_event.set)

        await emulator.start()
        print(f"Mixer emulator ({emulator.profile.display_name}) on {emulator.ip}:{emulator.port}")
        await stop_event.wait()
        emulator.stop()

        print("\nStopped.")
        print(f"  Messages received: {len(emulator.received)}")
        print(f"  Replies sent: {emulator.reply_count}")
        print(f"  Keepalives: {emulator.keepalive_count}")

    asyncio.run(run())
    sys.exit(0)


if __name__ == "__main__":
    main()
