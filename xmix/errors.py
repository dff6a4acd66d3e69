"""
Error types for mixer control.

Detection failures are fatal, query timeouts are recoverable, and index
violations are rejected before anything reaches the wire. Operations a
family does not support never raise; see Translator.route().
"""

from typing import Optional


class MixerError(Exception):
    """Base class for every error raised by xmix."""


class MixerConnectionError(MixerError):
    """The UDP endpoint could not be opened or is no longer usable."""


class NotConnected(MixerError):
    """An operation was invoked before MixerClient.connect() completed."""

    def __init__(self, message: str = "Mixer not connected; call connect() first"):
        super().__init__(message)


class DeviceNotDetected(MixerError):
    """Neither identification probe was answered."""

    def __init__(self, host: str, port: int, probes: tuple = ()):
        self.host = host
        self.port = port
        self.probes = probes
        tried = ", ".join(probes) if probes else "identification probes"
        super().__init__(
            f"No mixer answered {tried} at {host}:{port}. "
            f"Check OSC_HOST and OSC_PORT (X-Air 10024, X32 10023)."
        )


class FamilyAlreadyDetected(MixerError):
    """The session family is write-once."""


class QueryTimeout(MixerError, TimeoutError):
    """A query's reply did not arrive within its timeout."""

    def __init__(self, address: str, timeout: float):
        self.address = address
        self.timeout = timeout
        super().__init__(f"Timeout waiting for response from {address} ({timeout:.3f}s)")


class IndexOutOfRange(MixerError, ValueError):
    """A channel/bus/fx/scene index is outside the detected family's range."""

    def __init__(self, domain: str, index: int, limit: int, family: Optional[str] = None):
        self.domain = domain
        self.index = index
        self.limit = limit
        self.family = family
        where = f" on {family}" if family else ""
        super().__init__(f"{domain} {index} out of range{where}: must be 1-{limit}")
