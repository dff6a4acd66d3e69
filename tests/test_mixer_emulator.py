"""
Tests for the mixer emulator.

Validates state storage, identification replies, fault injection and
scene bookkeeping. Network tests talk to it with a raw asyncio endpoint.
"""

import asyncio

import pytest

from xmix.families import MixerFamily
from xmix.osc import build_message, parse_datagram
from xmix.simulator.mixer_emulator import IDENTIFICATION, MixerEmulator


class _Collector(asyncio.DatagramProtocol):
    def __init__(self):
        self.replies = asyncio.Queue()

    def datagram_received(self, data, addr):
        for message in parse_datagram(data):
            self.replies.put_nowait(message)


async def exchange(emulator, messages, wait=0.1):
    """Send messages to a started emulator and collect replies for `wait` seconds."""
    loop = asyncio.get_running_loop()
    transport, collector = await loop.create_datagram_endpoint(
        _Collector, remote_addr=("127.0.0.1", emulator.port))
    try:
        for address, args in messages:
            transport.sendto(build_message(address, args))
        await asyncio.sleep(wait)
        replies = []
        while not collector.replies.empty():
            replies.append(collector.replies.get_nowait())
        return replies
    finally:
        transport.close()


def run_exchange(messages, wait=0.1, **options):
    async def scenario():
        emulator = MixerEmulator(**options)
        await emulator.start()
        try:
            return await exchange(emulator, messages, wait), emulator
        finally:
            emulator.stop()

    return asyncio.run(scenario())


# =============================================================================
# Construction and state API
# =============================================================================

class TestMixerEmulatorState:
    """State API without networking."""

    def test_initialization(self):
        emulator = MixerEmulator()
        assert emulator.family is MixerFamily.XAIR
        assert emulator.ip == "127.0.0.1"
        assert emulator.port == 0
        assert emulator.respond is True
        assert emulator.keepalive_count == 0
        assert emulator.received == []

    def test_initial_scene_index_per_family(self):
        assert MixerEmulator(MixerFamily.XAIR).get_value("/-snap/index") == 1
        assert MixerEmulator(MixerFamily.X32).get_value("/-snap/index") == 0

    def test_initial_state(self):
        emulator = MixerEmulator(state={"/ch/01/mix/fader": 0.75, "/pair": (1, 2)})
        assert emulator.get_value("/ch/01/mix/fader") == 0.75
        assert emulator.state["/pair"] == (1, 2)

    def test_get_value_missing(self):
        assert MixerEmulator().get_value("/nothing") is None


# =============================================================================
# Network behaviour
# =============================================================================

class TestMixerEmulatorNetwork:
    """Replies over UDP."""

    def test_answers_own_identification(self):
        replies, _ = run_exchange([("/xinfo", ())])
        assert replies == [("/xinfo", IDENTIFICATION[MixerFamily.XAIR])]

    def test_ignores_other_identification(self):
        replies, emulator = run_exchange([("/info", ())])
        assert replies == []
        assert emulator.addresses == ["/info"]

    def test_x32_identification(self):
        replies, _ = run_exchange([("/xinfo", ()), ("/info", ())], family=MixerFamily.X32)
        assert replies == [("/info", IDENTIFICATION[MixerFamily.X32])]

    def test_set_then_query(self):
        replies, emulator = run_exchange([
            ("/ch/01/mix/fader", (0.5,)),
            ("/ch/01/mix/fader", ()),
        ])
        assert replies == [("/ch/01/mix/fader", (0.5,))]
        assert emulator.messages_for("/ch/01/mix/fader") == [(0.5,), ()]

    def test_unknown_query_unanswered(self):
        replies, _ = run_exchange([("/ch/09/mix/fader", ())])
        assert replies == []

    def test_respond_false(self):
        replies, _ = run_exchange([("/xinfo", ())], respond=False)
        assert replies == []

    def test_ignored_address(self):
        replies, _ = run_exchange(
            [("/lr/mix/fader", ()), ("/-snap/index", ())],
            state={"/lr/mix/fader": 0.75},
            ignored=["/lr/mix/fader"],
        )
        assert replies == [("/-snap/index", (1,))]

    def test_reply_delay(self):
        fast, _ = run_exchange([("/xinfo", ())], wait=0.05, reply_delay=0.2)
        slow, _ = run_exchange([("/xinfo", ())], wait=0.3, reply_delay=0.2)
        assert fast == []
        assert len(slow) == 1

    def test_keepalive_counted(self):
        replies, emulator = run_exchange([("/xremote", ()), ("/xremote", ())])
        assert replies == []
        assert emulator.keepalive_count == 2

    def test_scene_load_updates_index(self):
        replies, emulator = run_exchange([("/-snap/load", (4,)), ("/-snap/index", ())])
        assert replies == [("/-snap/index", (4,))]

    def test_xair_scene_names_tracked(self):
        _, emulator = run_exchange([
            ("/-snap/name", ("Verse",)),
            ("/-snap/save", (2,)),
            ("/-snap/name", ("Other",)),
            ("/-snap/load", (2,)),
        ])
        assert emulator.scene_names == {2: "Verse"}
        assert emulator.get_value("/-snap/name") == "Verse"

    def test_stop_is_idempotent(self):
        async def scenario():
            emulator = MixerEmulator()
            await emulator.start()
            assert emulator.port > 0
            emulator.stop()
            emulator.stop()
            return emulator.transport

        assert asyncio.run(scenario()) is None
