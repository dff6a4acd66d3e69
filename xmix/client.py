"""
MixerClient - one object per mixer link.

Owns the session and wires transport, correlator, detector, translator,
keepalive and scenes together. Every logical operation is an async method
taking 1-based human indices and human units.

Usage:
    async with MixerClient("192.168.1.70") as mixer:
        await mixer.set_fader(1, 0.75)
        level = await mixer.get_fader(1)

Operations the detected family has no equivalent for are skipped: setters
do nothing, getters return a fixed placeholder, and nothing is sent.
"""

from typing import Any, Dict, Optional, Sequence, Tuple, Union

from xmix import encoding
from xmix.config import DEFAULT_HOST
from xmix.correlator import RequestCorrelator
from xmix.detector import FamilyDetector
from xmix.errors import MixerError, NotConnected
from xmix.families import FamilyProfile, MixerFamily, Operation, profile_for
from xmix.keepalive import KeepaliveScheduler
from xmix.log import get_logger
from xmix.osc import (
    DEFAULT_QUERY_TIMEOUT,
    KEEPALIVE_INTERVAL,
    PORT_XAIR,
    PROBE_TIMEOUT,
    MessageStatistics,
    validate_address,
    validate_port,
)
from xmix.scenes import SceneController
from xmix.session import DeviceSession
from xmix.translator import Translator
from xmix.transport import MixerTransport

logger = get_logger(__name__)


class MixerClient:
    """Async client for X32 and X-Air mixers.

    Args:
        host: Mixer hostname or IP
        port: Mixer OSC port (10024 X-Air, 10023 X32)
        query_timeout: Reply timeout for queries (seconds)
        probe_timeout: Reply timeout for each detection probe (seconds)
        keepalive_interval: Seconds between /xremote refreshes
    """

    db_to_send_level = staticmethod(encoding.db_to_send_level)

    def __init__(self, host: str = DEFAULT_HOST, port: int = PORT_XAIR,
                 query_timeout: float = DEFAULT_QUERY_TIMEOUT,
                 probe_timeout: float = PROBE_TIMEOUT,
                 keepalive_interval: float = KEEPALIVE_INTERVAL):
        validate_port(port)
        self.session = DeviceSession(host, port)
        self.query_timeout = query_timeout
        self.probe_timeout = probe_timeout

        self.stats = MessageStatistics()
        self.transport = MixerTransport(host, port, self.stats)
        self.correlator = RequestCorrelator(self.transport.send, self.stats)
        self.transport.set_reply_handler(self.correlator.resolve)
        self.keepalive = KeepaliveScheduler(self.transport.send, keepalive_interval, stats=self.stats)
        self.detector = FamilyDetector(self.correlator, host, port, probe_timeout)

        self.translator: Optional[Translator] = None
        self.scenes: Optional[SceneController] = None

    @classmethod
    def from_config(cls, config: Dict) -> "MixerClient":
        """Build a client from a load_config() dictionary."""
        return cls(
            host=config['mixer']['host'],
            port=config['mixer']['port'],
            query_timeout=config['timeouts']['query'],
            probe_timeout=config['timeouts']['probe'],
            keepalive_interval=config['keepalive']['interval'],
        )

    # ==================================================================
    # LIFECYCLE
    # ==================================================================

    @property
    def family(self) -> MixerFamily:
        return self.session.family

    @property
    def profile(self) -> Optional[FamilyProfile]:
        return self.translator.profile if self.translator else None

    @property
    def connected(self) -> bool:
        return self.session.connected

    async def connect(self) -> MixerFamily:
        """Open the endpoint, detect the family, start the keepalive.

        Detection runs once per session; reconnecting reuses the result.

        Raises:
            MixerConnectionError: If the UDP endpoint cannot be opened
            DeviceNotDetected: If neither identification probe is answered
        """
        if self.session.connected:
            return self.session.family

        await self.transport.open()
        try:
            if not self.session.detected:
                self.session.family = await self.detector.detect()
            self.translator = Translator(profile_for(self.session.family))
            self.scenes = SceneController(self.translator, self.correlator,
                                          self.transport.send, self.query_timeout)
            self.keepalive.start()
        except BaseException:
            self.close()
            raise

        self.session.connected = True
        logger.info(f"Connected to {self.translator.profile.display_name} at "
                    f"{self.session.host}:{self.session.port}")
        return self.session.family

    def close(self) -> None:
        """Stop the keepalive, fail pending queries, close the endpoint."""
        self.keepalive.stop()
        self.correlator.cancel_all()
        self.transport.close()
        self.session.connected = False

    async def __aenter__(self) -> "MixerClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ==================================================================
    # GENERIC SET/GET
    # ==================================================================

    def _require_translator(self) -> Translator:
        if not self.session.connected or self.translator is None:
            raise NotConnected()
        return self.translator

    def _skip(self, operation: Operation) -> None:
        self.stats.increment('unsupported')
        logger.debug(f"{operation.value} not supported on {self.translator.profile.display_name}; skipped")

    def _prepare(self, operation: Operation, value: Any,
                 **indices: int) -> Optional[Tuple[str, Any]]:
        """Resolve and encode one mutation without sending it.

        Returns None for operations the family does not support.
        """
        route = self._require_translator().route(operation, **indices)
        if route is None:
            self._skip(operation)
            return None
        return route.address, route.encode(value)

    def _apply(self, *prepared: Optional[Tuple[str, Any]]) -> None:
        for message in prepared:
            if message is not None:
                address, wire = message
                self.transport.send(address, [wire])

    def _set(self, operation: Operation, value: Any, **indices: int) -> None:
        self._apply(self._prepare(operation, value, **indices))

    async def _get(self, operation: Operation, **indices: int) -> Any:
        translator = self._require_translator()
        route = translator.route(operation, **indices)
        if route is None:
            self._skip(operation)
            return translator.placeholder(operation)
        value = await self.correlator.query(route.address, timeout=self.query_timeout)
        return route.decode(value)

    # ==================================================================
    # CHANNELS
    # ==================================================================

    async def set_fader(self, channel: int, level: float) -> None:
        """Channel fader, 0.0-1.0 (0.75 = 0 dB)."""
        self._set(Operation.CHANNEL_FADER, level, channel=channel)

    async def get_fader(self, channel: int) -> float:
        return await self._get(Operation.CHANNEL_FADER, channel=channel)

    async def set_mute(self, channel: int, muted: bool) -> None:
        self._set(Operation.CHANNEL_MUTE, muted, channel=channel)

    async def get_mute(self, channel: int) -> bool:
        return await self._get(Operation.CHANNEL_MUTE, channel=channel)

    async def set_pan(self, channel: int, pan: float) -> None:
        """Pan, -1.0 (left) to 1.0 (right)."""
        self._set(Operation.CHANNEL_PAN, pan, channel=channel)

    async def get_pan(self, channel: int) -> float:
        return await self._get(Operation.CHANNEL_PAN, channel=channel)

    async def set_channel_name(self, channel: int, name: str) -> None:
        self._set(Operation.CHANNEL_NAME, name, channel=channel)

    async def get_channel_name(self, channel: int) -> str:
        return await self._get(Operation.CHANNEL_NAME, channel=channel)

    async def set_channel_color(self, channel: int, color: int) -> None:
        """Scribble strip color, 0-15."""
        self._set(Operation.CHANNEL_COLOR, color, channel=channel)

    async def set_channel_source(self, channel: int, source: int) -> None:
        """Input routing source (0-15 on X-Air, 0-64 on X32)."""
        self._set(Operation.CHANNEL_SOURCE, source, channel=channel)

    async def get_channel_source(self, channel: int) -> int:
        return await self._get(Operation.CHANNEL_SOURCE, channel=channel)

    async def set_low_cut_on(self, channel: int, enabled: bool) -> None:
        self._set(Operation.LOW_CUT_ON, enabled, channel=channel)

    async def get_low_cut_on(self, channel: int) -> bool:
        return await self._get(Operation.LOW_CUT_ON, channel=channel)

    async def set_low_cut(self, channel: int, frequency: float) -> None:
        """Low-cut corner frequency in Hz (20-400)."""
        self._set(Operation.LOW_CUT, frequency, channel=channel)

    async def get_low_cut(self, channel: int) -> float:
        return await self._get(Operation.LOW_CUT, channel=channel)

    # ==================================================================
    # EQ
    # ==================================================================

    async def set_eq_gain(self, channel: int, band: int, gain: float) -> None:
        """EQ band gain in dB (-15 to +15)."""
        self._set(Operation.EQ_GAIN, gain, channel=channel, band=band)

    async def get_eq_gain(self, channel: int, band: int) -> float:
        return await self._get(Operation.EQ_GAIN, channel=channel, band=band)

    async def set_eq_frequency(self, channel: int, band: int, frequency: float) -> None:
        """EQ band frequency in Hz (20-20000)."""
        self._set(Operation.EQ_FREQUENCY, frequency, channel=channel, band=band)

    async def get_eq_frequency(self, channel: int, band: int) -> float:
        return await self._get(Operation.EQ_FREQUENCY, channel=channel, band=band)

    async def set_eq_q(self, channel: int, band: int, q: float) -> None:
        self._set(Operation.EQ_Q, q, channel=channel, band=band)

    async def set_eq_type(self, channel: int, band: int, eq_type: int) -> None:
        self._set(Operation.EQ_TYPE, eq_type, channel=channel, band=band)

    async def set_eq_on(self, channel: int, enabled: bool) -> None:
        self._set(Operation.EQ_ON, enabled, channel=channel)

    # ==================================================================
    # DYNAMICS
    # ==================================================================

    async def set_gate_threshold(self, channel: int, threshold: float) -> None:
        """Gate threshold in dB (-80 to 0)."""
        self._set(Operation.GATE_THRESHOLD, threshold, channel=channel)

    async def get_gate_threshold(self, channel: int) -> float:
        return await self._get(Operation.GATE_THRESHOLD, channel=channel)

    async def set_gate_range(self, channel: int, value: float) -> None:
        self._set(Operation.GATE_RANGE, value, channel=channel)

    async def set_gate_attack(self, channel: int, value: float) -> None:
        self._set(Operation.GATE_ATTACK, value, channel=channel)

    async def set_gate_hold(self, channel: int, value: float) -> None:
        self._set(Operation.GATE_HOLD, value, channel=channel)

    async def set_gate_release(self, channel: int, value: float) -> None:
        self._set(Operation.GATE_RELEASE, value, channel=channel)

    async def set_gate_on(self, channel: int, enabled: bool) -> None:
        self._set(Operation.GATE_ON, enabled, channel=channel)

    async def set_compressor(self, channel: int, threshold: float, ratio: float) -> None:
        """Compressor threshold (dB, -60 to 0) and ratio (1 to 20)."""
        # Both values are encoded before either is sent
        self._apply(self._prepare(Operation.COMP_THRESHOLD, threshold, channel=channel),
                    self._prepare(Operation.COMP_RATIO, ratio, channel=channel))

    async def get_compressor_threshold(self, channel: int) -> float:
        return await self._get(Operation.COMP_THRESHOLD, channel=channel)

    async def get_compressor_ratio(self, channel: int) -> float:
        return await self._get(Operation.COMP_RATIO, channel=channel)

    async def set_compressor_attack(self, channel: int, value: float) -> None:
        self._set(Operation.COMP_ATTACK, value, channel=channel)

    async def set_compressor_release(self, channel: int, value: float) -> None:
        self._set(Operation.COMP_RELEASE, value, channel=channel)

    async def set_compressor_knee(self, channel: int, value: float) -> None:
        self._set(Operation.COMP_KNEE, value, channel=channel)

    async def set_compressor_gain(self, channel: int, value: float) -> None:
        self._set(Operation.COMP_GAIN, value, channel=channel)

    async def set_compressor_on(self, channel: int, enabled: bool) -> None:
        self._set(Operation.COMP_ON, enabled, channel=channel)

    # ==================================================================
    # BUSES AND SENDS
    # ==================================================================

    async def set_bus_fader(self, bus: int, level: float) -> None:
        self._set(Operation.BUS_FADER, level, bus=bus)

    async def get_bus_fader(self, bus: int) -> float:
        return await self._get(Operation.BUS_FADER, bus=bus)

    async def set_bus_mute(self, bus: int, muted: bool) -> None:
        self._set(Operation.BUS_MUTE, muted, bus=bus)

    async def get_bus_mute(self, bus: int) -> bool:
        return await self._get(Operation.BUS_MUTE, bus=bus)

    async def set_bus_pan(self, bus: int, pan: float) -> None:
        self._set(Operation.BUS_PAN, pan, bus=bus)

    async def set_bus_name(self, bus: int, name: str) -> None:
        self._set(Operation.BUS_NAME, name, bus=bus)

    async def get_bus_name(self, bus: int) -> str:
        return await self._get(Operation.BUS_NAME, bus=bus)

    async def set_send_level(self, channel: int, bus: int, level: float) -> None:
        """Channel send to a mix bus, 0.0-1.0."""
        self._set(Operation.SEND_LEVEL, level, channel=channel, send_bus=bus)

    async def get_send_level(self, channel: int, bus: int) -> float:
        return await self._get(Operation.SEND_LEVEL, channel=channel, send_bus=bus)

    async def set_fx_send(self, channel: int, fx: int, level: Optional[float] = None,
                          db: Optional[float] = None) -> None:
        """Channel send to an effect, as a wire level or in dB.

        Raises:
            ValueError: If neither level nor db is given
        """
        if db is not None:
            level = encoding.db_to_send_level(db)
        if level is None:
            raise ValueError("set_fx_send needs either level or db")
        self._set(Operation.FX_SEND, level, channel=channel, fx_send=fx)

    async def get_fx_send(self, channel: int, fx: int) -> float:
        return await self._get(Operation.FX_SEND, channel=channel, fx_send=fx)

    # ==================================================================
    # AUX INPUTS AND MATRIX (X32 only)
    # ==================================================================

    async def set_aux_fader(self, aux: int, level: float) -> None:
        self._set(Operation.AUX_FADER, level, aux=aux)

    async def get_aux_fader(self, aux: int) -> float:
        return await self._get(Operation.AUX_FADER, aux=aux)

    async def set_aux_mute(self, aux: int, muted: bool) -> None:
        self._set(Operation.AUX_MUTE, muted, aux=aux)

    async def get_aux_mute(self, aux: int) -> bool:
        return await self._get(Operation.AUX_MUTE, aux=aux)

    async def set_matrix_fader(self, matrix: int, level: float) -> None:
        self._set(Operation.MATRIX_FADER, level, matrix=matrix)

    async def get_matrix_fader(self, matrix: int) -> float:
        return await self._get(Operation.MATRIX_FADER, matrix=matrix)

    async def set_matrix_mute(self, matrix: int, muted: bool) -> None:
        self._set(Operation.MATRIX_MUTE, muted, matrix=matrix)

    async def get_matrix_mute(self, matrix: int) -> bool:
        return await self._get(Operation.MATRIX_MUTE, matrix=matrix)

    # ==================================================================
    # MAIN MIX
    # ==================================================================

    async def set_main_fader(self, level: float) -> None:
        self._set(Operation.MAIN_FADER, level)

    async def get_main_fader(self) -> float:
        return await self._get(Operation.MAIN_FADER)

    async def set_main_mute(self, muted: bool) -> None:
        self._set(Operation.MAIN_MUTE, muted)

    async def get_main_mute(self) -> bool:
        return await self._get(Operation.MAIN_MUTE)

    async def set_main_pan(self, pan: float) -> None:
        self._set(Operation.MAIN_PAN, pan)

    async def get_main_pan(self) -> float:
        return await self._get(Operation.MAIN_PAN)

    # ==================================================================
    # EFFECTS
    # ==================================================================

    async def set_effect_on(self, fx: int, enabled: bool) -> None:
        self._set(Operation.FX_ON, enabled, fx=fx)

    async def set_effect_mix(self, fx: int, mix: float) -> None:
        self._set(Operation.FX_MIX, mix, fx=fx)

    async def set_effect_param(self, fx: int, param: int, value: float) -> None:
        self._set(Operation.FX_PARAM, value, fx=fx, param=param)

    # ==================================================================
    # SCENES
    # ==================================================================

    async def recall_scene(self, scene: int) -> None:
        self._require_translator()
        self.scenes.recall(scene)

    async def save_scene(self, scene: int, name: Optional[str] = None) -> None:
        self._require_translator()
        self.scenes.save(scene, name)

    async def get_scene_name(self, scene: int) -> str:
        self._require_translator()
        return await self.scenes.name(scene)

    async def get_current_scene(self) -> int:
        self._require_translator()
        return await self.scenes.current()

    # ==================================================================
    # DIAGNOSTICS
    # ==================================================================

    async def send_custom(self, address: str,
                          value: Union[None, Any, Sequence[Any]] = None) -> None:
        """Send a raw OSC message. A list or tuple value sends several arguments."""
        self._require_translator()
        validate_address(address)
        if value is None:
            args = []
        elif isinstance(value, (list, tuple)):
            args = list(value)
        else:
            args = [value]
        self.transport.send(address, args)

    async def query_custom(self, address: str, timeout: Optional[float] = None) -> Any:
        """Query a raw OSC address and return the first reply argument."""
        self._require_translator()
        validate_address(address)
        return await self.correlator.query(address, timeout=timeout or self.query_timeout)

    async def get_status(self) -> Dict[str, Any]:
        """Connection summary. Never raises; failures are reported in 'error'."""
        status: Dict[str, Any] = {
            "connected": self.session.connected,
            "host": self.session.host,
            "port": self.session.port,
            "family": self.session.family.value,
        }

        if not self.session.connected:
            status["error"] = str(NotConnected())
            status["stats"] = self.stats.snapshot()
            return status

        profile = self.translator.profile
        status.update({
            "model": profile.display_name,
            "channels": profile.limit("channel"),
            "buses": profile.limit("bus"),
            "effects": profile.limit("fx"),
            "scenes": profile.limit("scene"),
        })
        try:
            info = await self.correlator.query_args(profile.info_address, timeout=self.probe_timeout)
            status["info"] = list(info)
        except MixerError as e:
            status["connected"] = False
            status["error"] = str(e)

        status["stats"] = self.stats.snapshot()
        return status
