"""
Tests for the /xremote keepalive scheduler.
"""

import asyncio
from unittest.mock import Mock, patch

from xmix.errors import MixerConnectionError
from xmix.keepalive import KeepaliveScheduler
from xmix.osc import KEEPALIVE_ADDRESS, KEEPALIVE_INTERVAL, MessageStatistics


class TestKeepaliveScheduler:
    """start()/stop() cadence and failure handling."""

    def test_defaults(self):
        scheduler = KeepaliveScheduler(Mock())
        assert scheduler.interval == KEEPALIVE_INTERVAL == 9.0
        assert scheduler.address == KEEPALIVE_ADDRESS == "/xremote"
        assert scheduler.running is False

    def test_sends_immediately_on_start(self):
        send = Mock()

        async def scenario():
            scheduler = KeepaliveScheduler(send, interval=10.0)
            scheduler.start()
            running = scheduler.running
            scheduler.stop()
            return running

        assert asyncio.run(scenario()) is True
        send.assert_called_once_with("/xremote", ())

    def test_repeats_every_interval(self):
        send = Mock()
        stats = MessageStatistics()

        async def scenario():
            scheduler = KeepaliveScheduler(send, interval=0.05, stats=stats)
            scheduler.start()
            await asyncio.sleep(0.18)
            scheduler.stop()

        asyncio.run(scenario())
        # Immediate send plus three intervals
        assert 3 <= send.call_count <= 5
        assert stats.get('keepalives') == send.call_count

    def test_start_is_idempotent(self):
        send = Mock()

        async def scenario():
            scheduler = KeepaliveScheduler(send, interval=10.0)
            scheduler.start()
            scheduler.start()
            scheduler.stop()

        asyncio.run(scenario())
        assert send.call_count == 1

    def test_stop_cancels_task(self):
        send = Mock()

        async def scenario():
            scheduler = KeepaliveScheduler(send, interval=0.02)
            scheduler.start()
            scheduler.stop()
            await asyncio.sleep(0.1)
            return scheduler.running

        assert asyncio.run(scenario()) is False
        assert send.call_count == 1

    def test_send_failure_logged_and_loop_continues(self):
        failures = [OSError("network down"), MixerConnectionError("closed")]

        def flaky_send(address, args):
            if failures:
                raise failures.pop(0)

        send = Mock(side_effect=flaky_send)

        async def scenario():
            scheduler = KeepaliveScheduler(send, interval=0.03)
            with patch('xmix.keepalive.logger') as mock_logger:
                scheduler.start()
                await asyncio.sleep(0.1)
                scheduler.stop()
                return mock_logger.warning.call_count

        warnings = asyncio.run(scenario())
        assert warnings == 2
        assert send.call_count >= 3
