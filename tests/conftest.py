"""Pytest fixtures for mixer tests.

Provides:
- run_mixer: run an async scenario against a connected MixerClient and an
  in-process MixerEmulator, with cleanup of both

Tests stay synchronous and drive the event loop with asyncio.run().
"""

import asyncio

import pytest

from xmix.client import MixerClient
from xmix.families import MixerFamily
from xmix.simulator.mixer_emulator import MixerEmulator

# Short timeouts keep the X32 detection path (one /xinfo miss) fast
QUERY_TIMEOUT = 0.3
PROBE_TIMEOUT = 0.1


def make_client(port: int, **options) -> MixerClient:
    options.setdefault('query_timeout', QUERY_TIMEOUT)
    options.setdefault('probe_timeout', PROBE_TIMEOUT)
    options.setdefault('keepalive_interval', 60.0)
    return MixerClient("127.0.0.1", port, **options)


def run_with_mixer(scenario, family=MixerFamily.XAIR, client_options=None, **emulator_options):
    """Run scenario(client, emulator) against a fresh emulator.

    Returns whatever the scenario returns.
    """
    async def runner():
        emulator = MixerEmulator(family, **emulator_options)
        await emulator.start()
        client = make_client(emulator.port, **(client_options or {}))
        try:
            await client.connect()
            return await scenario(client, emulator)
        finally:
            client.close()
            emulator.stop()

    return asyncio.run(runner())


@pytest.fixture
def run_mixer():
    """Fixture providing run_with_mixer().

    Example:
        def test_fader(run_mixer):
            async def scenario(client, emulator):
                await client.set_fader(1, 0.5)
                return await client.get_fader(1)

            assert run_mixer(scenario) == 0.5
    """
    return run_with_mixer
