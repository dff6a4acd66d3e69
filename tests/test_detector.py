"""
Tests for family detection against in-process emulators.

Each test opens a real UDP endpoint to a MixerEmulator on 127.0.0.1.
"""

import asyncio

import pytest

from xmix.correlator import RequestCorrelator
from xmix.detector import FamilyDetector
from xmix.errors import DeviceNotDetected
from xmix.families import MixerFamily
from xmix.osc import MessageStatistics
from xmix.simulator.mixer_emulator import MixerEmulator
from xmix.transport import MixerTransport


async def detect_against(emulator: MixerEmulator, timeout: float = 0.1):
    """Start the emulator, run detection, return (family, detector)."""
    await emulator.start()
    stats = MessageStatistics()
    transport = MixerTransport("127.0.0.1", emulator.port, stats)
    correlator = RequestCorrelator(transport.send, stats)
    transport.set_reply_handler(correlator.resolve)
    await transport.open()
    detector = FamilyDetector(correlator, "127.0.0.1", emulator.port, timeout=timeout)
    try:
        return await detector.detect(), detector
    finally:
        transport.close()
        emulator.stop()


class TestFamilyDetector:
    """detect() probes /xinfo then /info."""

    def test_detects_xair_on_first_probe(self):
        emulator = MixerEmulator(MixerFamily.XAIR)
        family, detector = asyncio.run(detect_against(emulator))

        assert family is MixerFamily.XAIR
        assert detector.info[2] == "XR18"
        assert emulator.addresses == ["/xinfo"]

    def test_detects_x32_after_xair_probe_times_out(self):
        emulator = MixerEmulator(MixerFamily.X32)
        family, detector = asyncio.run(detect_against(emulator))

        assert family is MixerFamily.X32
        assert detector.info[2] == "X32"
        assert emulator.addresses == ["/xinfo", "/info"]

    def test_silent_device_raises(self):
        emulator = MixerEmulator(MixerFamily.XAIR, respond=False)

        with pytest.raises(DeviceNotDetected) as exc_info:
            asyncio.run(detect_against(emulator))

        error = exc_info.value
        assert error.host == "127.0.0.1"
        assert error.probes == ("/xinfo", "/info")
        assert "OSC_HOST" in str(error)

    def test_no_retry(self):
        """Each probe is sent exactly once."""
        emulator = MixerEmulator(MixerFamily.XAIR, respond=False)

        with pytest.raises(DeviceNotDetected):
            asyncio.run(detect_against(emulator))

        assert emulator.addresses.count("/xinfo") == 1
        assert emulator.addresses.count("/info") == 1
