"""
Mixer family detection.

Probes the X-Air identification address first, then the X32 one. The first
family to answer wins. No retries: a silent device is a configuration error.
"""

from typing import Tuple

from xmix.correlator import RequestCorrelator
from xmix.errors import DeviceNotDetected, QueryTimeout
from xmix.families import DETECTION_ORDER, MixerFamily
from xmix.log import get_logger
from xmix.osc import PROBE_TIMEOUT

logger = get_logger(__name__)


class FamilyDetector:
    """Identify which OSC dialect the device at host:port speaks.

    Args:
        correlator: Correlator bound to an open transport
        host, port: Used for log and error messages
        timeout: Per-probe reply timeout in seconds
    """

    def __init__(self, correlator: RequestCorrelator, host: str, port: int,
                 timeout: float = PROBE_TIMEOUT):
        self.correlator = correlator
        self.host = host
        self.port = port
        self.timeout = timeout
        self.info: Tuple = ()

    async def detect(self) -> MixerFamily:
        """Run the probes.

        Returns:
            The detected family (never UNKNOWN)

        Raises:
            DeviceNotDetected: If no probe is answered
        """
        probes = []
        for profile in DETECTION_ORDER:
            probes.append(profile.info_address)
            logger.debug(f"Probing {profile.info_address} at {self.host}:{self.port}")
            try:
                self.info = await self.correlator.query_args(profile.info_address, timeout=self.timeout)
            except QueryTimeout:
                continue
            logger.info(
                f"Detected {profile.display_name} mixer at {self.host}:{self.port} "
                f"({', '.join(str(a) for a in self.info)})"
            )
            return profile.family

        raise DeviceNotDetected(self.host, self.port, tuple(probes))
