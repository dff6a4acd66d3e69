"""
Request/reply correlation over a connectionless link.

The mixer answers a query by echoing the queried address with the value.
Nothing ties a reply to a request except that address, so the pending table
is keyed by it: at most one outstanding waiter per address.

Matching, in order:
    1. Exact address match
    2. The reply extends a pending address ("/-snap" answered by "/-snap/name")

A waiter resolves at most once. Replies without arguments are ignored.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from xmix.errors import MixerConnectionError, QueryTimeout
from xmix.log import get_logger
from xmix.osc import DEFAULT_QUERY_TIMEOUT, MessageStatistics

logger = get_logger(__name__)

SendFunction = Callable[[str, Sequence[Any]], None]


@dataclass
class PendingRequest:
    address: str
    future: asyncio.Future
    deadline: float
    timer: Optional[asyncio.TimerHandle] = None


class RequestCorrelator:
    """Pending-request table plus query/resolve.

    Args:
        send: Function writing one message (normally MixerTransport.send)
        stats: Shared statistics
    """

    def __init__(self, send: SendFunction, stats: Optional[MessageStatistics] = None):
        self.send = send
        self.stats = stats if stats is not None else MessageStatistics()
        self.pending: Dict[str, PendingRequest] = {}

    def pending_addresses(self) -> List[str]:
        return list(self.pending.keys())

    async def query(self, address: str, args: Sequence[Any] = (),
                    timeout: float = DEFAULT_QUERY_TIMEOUT) -> Any:
        """Send a query and return the first reply argument.

        Raises:
            QueryTimeout: No reply within timeout
        """
        reply = await self.query_args(address, args, timeout)
        return reply[0]

    async def query_args(self, address: str, args: Sequence[Any] = (),
                         timeout: float = DEFAULT_QUERY_TIMEOUT) -> Tuple[Any, ...]:
        """Send a query and return every reply argument.

        A query for an address already in flight joins it instead of sending
        again; both callers get the same reply or the same timeout.

        Raises:
            QueryTimeout: No reply within timeout
        """
        existing = self.pending.get(address)
        if existing is not None:
            logger.debug(f"Joining in-flight query {address}")
            return await asyncio.shield(existing.future)

        loop = asyncio.get_running_loop()
        pending = PendingRequest(
            address=address,
            future=loop.create_future(),
            deadline=loop.time() + timeout,
        )
        pending.timer = loop.call_later(timeout, self._expire, pending, timeout)

        # Register before sending: a fast reply must find its waiter
        self.pending[address] = pending
        try:
            self.send(address, args)
        except Exception:
            self._discard(pending)
            raise

        return await asyncio.shield(pending.future)

    def resolve(self, address: str, args: Tuple[Any, ...]) -> bool:
        """Deliver an inbound message. Returns True if a waiter took it."""
        if not args:
            return False

        pending = self.pending.get(address)
        if pending is None:
            pending = self._prefix_match(address)
        if pending is None:
            return False

        self._discard(pending)
        if not pending.future.done():
            pending.future.set_result(tuple(args))
        self.stats.increment('matched')
        return True

    def cancel_all(self) -> None:
        """Fail every waiter; used at teardown."""
        for pending in list(self.pending.values()):
            self._discard(pending)
            if not pending.future.done():
                pending.future.set_exception(
                    MixerConnectionError(f"Connection closed while waiting for {pending.address}")
                )

    def _prefix_match(self, address: str) -> Optional[PendingRequest]:
        for key, pending in self.pending.items():
            if address.startswith(key.rstrip('/') + '/'):
                return pending
        return None

    def _discard(self, pending: PendingRequest) -> None:
        if self.pending.get(pending.address) is pending:
            del self.pending[pending.address]
        if pending.timer is not None:
            pending.timer.cancel()

    def _expire(self, pending: PendingRequest, timeout: float) -> None:
        self._discard(pending)
        if pending.future.done():
            return
        self.stats.increment('timeouts')
        logger.warning(f"No reply from {pending.address} within {timeout:.3f}s")
        pending.future.set_exception(QueryTimeout(pending.address, timeout))
