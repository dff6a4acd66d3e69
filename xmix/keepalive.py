"""
/xremote keepalive.

The mixer pushes parameter changes only to clients that renewed /xremote in
the last 10 seconds. Failures are logged and the loop keeps going; nothing
here ever tears the session down.
"""

import asyncio
from typing import Any, Callable, Optional, Sequence

from xmix.errors import MixerConnectionError
from xmix.log import get_logger
from xmix.osc import KEEPALIVE_ADDRESS, KEEPALIVE_INTERVAL, MessageStatistics

logger = get_logger(__name__)


class KeepaliveScheduler:
    """Send the keepalive once now, then every `interval` seconds.

    Args:
        send: Function writing one message
        interval: Seconds between sends
        address: Keepalive address
        stats: Shared statistics
    """

    def __init__(self, send: Callable[[str, Sequence[Any]], None],
                 interval: float = KEEPALIVE_INTERVAL,
                 address: str = KEEPALIVE_ADDRESS,
                 stats: Optional[MessageStatistics] = None):
        self.send = send
        self.interval = interval
        self.address = address
        self.stats = stats if stats is not None else MessageStatistics()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Send immediately and schedule the periodic task (idempotent)."""
        if self.running:
            return
        self._send_once()
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug(f"Keepalive {self.address} every {self.interval:.1f}s")

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self._send_once()

    def _send_once(self) -> None:
        try:
            self.send(self.address, ())
        except (OSError, MixerConnectionError) as e:
            logger.warning(f"Keepalive {self.address} failed: {e}")
            return
        self.stats.increment('keepalives')
