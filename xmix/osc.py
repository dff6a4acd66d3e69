#!/usr/bin/env python3
"""
xmix OSC Infrastructure - Shared OSC codec, constants and statistics.

Wraps python-osc for the two directions the mixer link needs, validates
addresses and ports, and tracks message counters for diagnostics.

Classes:
    - MessageStatistics: Thread-safe message counter with formatted output

Functions:
    - build_message(address, args): Encode one OSC message datagram
    - parse_datagram(data): Decode a datagram (message or bundle) to (address, args) pairs
    - validate_address(address): Validate an OSC address path
    - validate_port(port): Validate port in range 1-65535

Constants:
    - PORT_X32: Default OSC port for X32/M32 consoles (10023)
    - PORT_XAIR: Default OSC port for X-Air rack mixers (10024)
    - DEFAULT_QUERY_TIMEOUT: Reply timeout for ordinary queries (1.0s)
    - PROBE_TIMEOUT: Reply timeout for identification probes (0.5s)
    - KEEPALIVE_ADDRESS, KEEPALIVE_INTERVAL: Push subscription refresh
"""

import re
import threading
from typing import Any, Dict, List, Sequence, Tuple
from pythonosc import osc_message_builder
from pythonosc import osc_packet


# ============================================================================
# CONSTANTS
# ============================================================================

# Mixer OSC ports (fixed by firmware)
PORT_X32 = 10023       # X32 / M32 consoles
PORT_XAIR = 10024      # X-Air XR12/XR16/XR18/MR18

# Query timeouts in seconds
DEFAULT_QUERY_TIMEOUT = 1.0
PROBE_TIMEOUT = 0.5

# The mixer only pushes parameter changes to clients that renewed /xremote
# within the last 10 seconds.
KEEPALIVE_ADDRESS = "/xremote"
KEEPALIVE_INTERVAL = 9.0

# Port validation range
PORT_MIN = 1
PORT_MAX = 65535

# Slash-delimited path without OSC pattern characters
ADDRESS_PATTERN = re.compile(r'^/[^\s#*,?\[\]{}]*$')


# ============================================================================
# CODEC
# ============================================================================

def build_message(address: str, args: Sequence[Any] = ()) -> bytes:
    """Encode a single OSC message.

    Argument types are inferred by python-osc: str -> s, int -> i,
    float -> f. Callers pass ints, not bools, for on/off values because
    python-osc encodes bools as the argument-less T/F tags.

    Args:
        address: OSC address (e.g., "/ch/01/mix/fader")
        args: Message arguments

    Returns:
        Raw datagram bytes
    """
    builder = osc_message_builder.OscMessageBuilder(address=address)
    for arg in args:
        builder.add_arg(arg)
    return builder.build().dgram


def parse_datagram(data: bytes) -> List[Tuple[str, Tuple[Any, ...]]]:
    """Decode a datagram into (address, args) pairs.

    Bundles are flattened in order; bundle timetags are ignored since the
    mixer never schedules replies.

    Raises:
        osc_packet.ParseError: If the datagram is not valid OSC
        UnicodeDecodeError: If a string argument is not valid UTF-8
    """
    packet = osc_packet.OscPacket(data)
    return [(timed.message.address, tuple(timed.message.params))
            for timed in packet.messages]


# ============================================================================
# VALIDATION FUNCTIONS
# ============================================================================

def validate_address(address: str) -> None:
    """Validate an OSC address path.

    Args:
        address: OSC address string (e.g., "/ch/01/mix/fader")

    Raises:
        ValueError: If address is not a slash-delimited path

    Examples:
        >>> validate_address("/lr/mix/fader")  # OK
        >>> validate_address("lr/mix")  # Raises ValueError
    """
    if not isinstance(address, str) or not ADDRESS_PATTERN.match(address):
        raise ValueError(f"OSC address must be a path starting with '/', got {address!r}")


def validate_port(port: int) -> None:
    """Validate UDP port number is in valid range.

    Args:
        port: Port number to validate

    Raises:
        ValueError: If port is outside range 1-65535

    Examples:
        >>> validate_port(10024)  # OK
        >>> validate_port(0)  # Raises ValueError
    """
    if isinstance(port, bool) or not isinstance(port, int):
        raise ValueError(f"Port must be an integer, got {port!r}")
    if port < PORT_MIN or port > PORT_MAX:
        raise ValueError(f"Port must be in range {PORT_MIN}-{PORT_MAX}, got {port}")


# ============================================================================
# MESSAGE STATISTICS
# ============================================================================

class MessageStatistics:
    """Thread-safe message statistics tracker with formatted output.

    Typical counters:
        - sent: Datagrams written to the mixer
        - received: Messages decoded from the mixer
        - matched: Replies delivered to a pending query
        - unmatched: Replies nobody was waiting for (dropped)
        - malformed: Datagrams that failed OSC decoding
        - timeouts: Queries that expired without a reply
        - unsupported: Operations skipped for the detected family
        - keepalives: /xremote refreshes sent

    Examples:
        >>> stats = MessageStatistics()
        >>> stats.increment('sent')
        >>> stats.get('sent')
        1
    """

    def __init__(self):
        """Initialize statistics tracker with empty counters."""
        self.counters = {}
        self.lock = threading.Lock()

    def increment(self, counter_name: str, amount: int = 1) -> None:
        """Increment a counter by specified amount (thread-safe).

        Creates the counter if it doesn't exist.
        """
        with self.lock:
            self.counters[counter_name] = self.counters.get(counter_name, 0) + amount

    def get(self, counter_name: str) -> int:
        """Get current value of a counter, or 0 if it doesn't exist."""
        with self.lock:
            return self.counters.get(counter_name, 0)

    def snapshot(self) -> Dict[str, int]:
        """Copy of all counters."""
        with self.lock:
            return dict(self.counters)

    def format_stats(self, title: str = "STATISTICS") -> str:
        """Format counters as a block of text.

        Output format:
            ============================================================
            TITLE
            ============================================================
            Counter Name: value
            ...
            ============================================================
        """
        snapshot = self.snapshot()
        lines = ["=" * 60, title, "=" * 60]
        for name in sorted(snapshot.keys()):
            # Convert snake_case to Title Case for display
            display_name = name.replace('_', ' ').title()
            lines.append(f"{display_name}: {snapshot[name]}")
        lines.append("=" * 60)
        return "\n".join(lines)
