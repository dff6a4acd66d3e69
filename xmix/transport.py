"""
UDP transport to a single mixer.

One asyncio datagram endpoint per session. Sends are fire-and-forget; every
inbound message is offered to a reply handler (the RequestCorrelator), which
returns True when it claimed the message.
"""

import asyncio
from typing import Any, Callable, Optional, Sequence, Tuple

from pythonosc import osc_packet

from xmix.errors import MixerConnectionError
from xmix.log import get_logger
from xmix.osc import MessageStatistics, build_message, parse_datagram

logger = get_logger(__name__)

ReplyHandler = Callable[[str, Tuple[Any, ...]], bool]


class MixerTransport(asyncio.DatagramProtocol):
    """asyncio UDP endpoint connected to (host, port).

    Args:
        host: Mixer hostname or IP
        port: Mixer OSC port
        stats: Shared statistics (created if omitted)
    """

    def __init__(self, host: str, port: int, stats: Optional[MessageStatistics] = None):
        self.host = host
        self.port = port
        self.stats = stats if stats is not None else MessageStatistics()
        self.transport: Optional[asyncio.DatagramTransport] = None
        self.reply_handler: Optional[ReplyHandler] = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self.transport is not None and not self._closed

    def set_reply_handler(self, handler: Optional[ReplyHandler]) -> None:
        self.reply_handler = handler

    async def open(self) -> None:
        """Create the endpoint.

        Raises:
            MixerConnectionError: If the socket cannot be created or the host
                does not resolve
        """
        if self.is_open:
            return
        loop = asyncio.get_running_loop()
        try:
            await loop.create_datagram_endpoint(lambda: self, remote_addr=(self.host, self.port))
        except OSError as e:
            raise MixerConnectionError(
                f"Cannot open UDP endpoint to {self.host}:{self.port}: {e}"
            ) from e
        self._closed = False
        logger.info(f"UDP endpoint open to {self.host}:{self.port}")

    def close(self) -> None:
        if self.transport is not None and not self._closed:
            self.transport.close()
            logger.info(f"UDP endpoint to {self.host}:{self.port} closed")
        self._closed = True

    def send(self, address: str, args: Sequence[Any] = ()) -> None:
        """Write one OSC message.

        Raises:
            MixerConnectionError: If the endpoint is not open
        """
        if not self.is_open:
            raise MixerConnectionError(f"Transport to {self.host}:{self.port} is not open")
        self.transport.sendto(build_message(address, args))
        self.stats.increment('sent')
        logger.debug(f"-> {address} {list(args)}")

    # ------------------------------------------------------------------
    # asyncio.DatagramProtocol
    # ------------------------------------------------------------------

    def connection_made(self, transport):
        self.transport = transport

    def connection_lost(self, exc):
        self._closed = True
        if exc is not None:
            logger.warning(f"UDP endpoint lost: {exc}")

    def error_received(self, exc):
        # ICMP port unreachable surfaces here when nothing listens at the far end
        logger.debug(f"UDP error from {self.host}:{self.port}: {exc}")

    def datagram_received(self, data, addr):
        try:
            messages = parse_datagram(data)
        except (osc_packet.ParseError, UnicodeDecodeError) as e:
            self.stats.increment('malformed')
            logger.debug(f"Dropped malformed datagram from {addr}: {e}")
            return

        for address, args in messages:
            self.stats.increment('received')
            logger.debug(f"<- {address} {list(args)}")
            claimed = self.reply_handler(address, args) if self.reply_handler else False
            if not claimed:
                self.stats.increment('unmatched')
