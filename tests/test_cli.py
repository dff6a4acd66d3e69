"""
Tests for the command-line diagnostics.

Commands run against an emulator started on a background thread's event
loop, since main() drives its own loop with asyncio.run().
"""

import asyncio
import json
import threading
import time

import pytest

from xmix import cli
from xmix.families import MixerFamily
from xmix.simulator.mixer_emulator import MixerEmulator


@pytest.fixture
def emulator():
    """X-Air emulator running on its own loop in a daemon thread."""
    loop = asyncio.new_event_loop()
    instance = MixerEmulator(MixerFamily.XAIR, state={"/ch/01/mix/fader": 0.5})
    started = threading.Event()

    def run():
        asyncio.set_event_loop(loop)
        loop.run_until_complete(instance.start())
        started.set()
        loop.run_forever()

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    started.wait(timeout=2.0)
    yield instance
    loop.call_soon_threadsafe(instance.stop)
    loop.call_soon_threadsafe(loop.stop)
    thread.join(timeout=2.0)
    loop.close()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ('OSC_HOST', 'OSC_PORT', 'XMIX_LOG_LEVEL'):
        monkeypatch.delenv(name, raising=False)


def run_cli(emulator, *args):
    return cli.main(["--host", "127.0.0.1", "--port", str(emulator.port), *args])


def received(emulator, message, timeout=1.0):
    """Poll until the emulator has seen a message."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if message in emulator.received:
            return True
        time.sleep(0.01)
    return False


# =============================================================================
# Argument parsing
# =============================================================================

class TestParseArgument:
    """parse_argument() tries int, then float, then keeps the string."""

    def test_int(self):
        assert cli.parse_argument("42") == 42

    def test_float(self):
        assert cli.parse_argument("0.75") == 0.75

    def test_string(self):
        assert cli.parse_argument("Kick") == "Kick"


class TestParser:
    """Subcommand parsing."""

    def test_send_arguments_typed(self):
        args = cli.build_parser().parse_args(["send", "/ch/01/config/name", "Kick", "3"])
        assert args.address == "/ch/01/config/name"
        assert args.args == ["Kick", 3]

    def test_fader_level_optional(self):
        args = cli.build_parser().parse_args(["fader", "2"])
        assert args.channel == 2
        assert args.level is None

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


# =============================================================================
# Commands
# =============================================================================

class TestCommands:
    """main() against the emulator."""

    def test_status(self, emulator, capsys):
        assert run_cli(emulator, "status") == 0
        status = json.loads(capsys.readouterr().out)
        assert status["connected"] is True
        assert status["family"] == "x-air"

    def test_query(self, emulator, capsys):
        assert run_cli(emulator, "query", "/ch/01/mix/fader") == 0
        assert float(capsys.readouterr().out) == pytest.approx(0.5)

    def test_fader_read(self, emulator, capsys):
        assert run_cli(emulator, "fader", "1") == 0
        assert float(capsys.readouterr().out) == pytest.approx(0.5)

    def test_fader_set(self, emulator):
        assert run_cli(emulator, "fader", "2", "0.25") == 0
        assert received(emulator, ("/ch/02/mix/fader", (0.25,)))

    def test_send(self, emulator):
        assert run_cli(emulator, "send", "/ch/03/config/name", "Snare") == 0
        assert received(emulator, ("/ch/03/config/name", ("Snare",)))

    def test_recall(self, emulator):
        assert run_cli(emulator, "recall", "4") == 0
        assert received(emulator, ("/-snap/load", (4,)))

    def test_query_timeout_exit_code(self, emulator, capsys):
        assert run_cli(emulator, "query", "/ch/09/mix/fader") == 1
        assert "Timeout" in capsys.readouterr().err

    def test_out_of_range_exit_code(self, emulator, capsys):
        assert run_cli(emulator, "fader", "17", "0.5") == 1
        assert "out of range" in capsys.readouterr().err

    def test_missing_config_file(self, tmp_path, capsys):
        assert cli.main(["--config", str(tmp_path / "missing.yaml"), "status"]) == 1
        assert "not found" in capsys.readouterr().err

    def test_invalid_yaml_config(self, tmp_path, capsys):
        path = tmp_path / "broken.yaml"
        path.write_text("mixer: [host: 10.0.0.1\n")
        assert cli.main(["--config", str(path), "status"]) == 1
        assert capsys.readouterr().err.startswith("Error: ")
