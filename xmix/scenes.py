"""
Scene (snapshot) recall, save and naming.

Callers always number scenes from 1. The X32 stores them from wire index 0
and names each one at /-snap/{iii}/name; the X-Air stores them from 1 and
only exposes the active scene's name at /-snap/name.
"""

from typing import Any, Callable, Optional, Sequence

from xmix.correlator import RequestCorrelator
from xmix.errors import QueryTimeout
from xmix.families import Operation
from xmix.log import get_logger
from xmix.osc import DEFAULT_QUERY_TIMEOUT
from xmix.translator import Translator

logger = get_logger(__name__)


class SceneController:
    """Scene operations for one session.

    Args:
        translator: Translator for the detected family
        correlator: Correlator used for name/index queries
        send: Function writing one message
        timeout: Query timeout in seconds
    """

    def __init__(self, translator: Translator, correlator: RequestCorrelator,
                 send: Callable[[str, Sequence[Any]], None],
                 timeout: float = DEFAULT_QUERY_TIMEOUT):
        self.translator = translator
        self.correlator = correlator
        self.send = send
        self.timeout = timeout

    @property
    def scene_count(self) -> int:
        return self.translator.profile.limit("scene")

    def recall(self, scene: int) -> None:
        """Load a stored scene."""
        index = self.translator.wire_index("scene", scene)
        route = self.translator.route(Operation.SCENE_LOAD)
        self.send(route.address, [index])
        logger.info(f"Recalled scene {scene}")

    def save(self, scene: int, name: Optional[str] = None) -> None:
        """Store the current mix as a scene, optionally naming it."""
        index = self.translator.wire_index("scene", scene)
        store = self.translator.route(Operation.SCENE_SAVE)

        if self.translator.profile.indexed_scene_names:
            self.send(store.address, [index])
            if name:
                label = self.translator.route(Operation.SCENE_NAME, scene=scene)
                self.send(label.address, [label.encode(name)])
        else:
            # The X-Air names the scene at save time from /-snap/name
            if name:
                label = self.translator.route(Operation.SCENE_NAME)
                self.send(label.address, [label.encode(name)])
            self.send(store.address, [index])
        logger.info(f"Saved scene {scene}" + (f" as {name!r}" if name else ""))

    async def name(self, scene: int) -> str:
        """Name of a stored scene.

        On families that only expose the active scene's name, returns "" for
        any other scene, and also when the mixer does not answer.

        Raises:
            QueryTimeout: On X32, if the name query is not answered
        """
        self.translator.check_index("scene", scene)

        if self.translator.profile.indexed_scene_names:
            route = self.translator.route(Operation.SCENE_NAME, scene=scene)
            return route.decode(await self.correlator.query(route.address, timeout=self.timeout))

        try:
            current = await self.current()
            if current != scene:
                return ""
            route = self.translator.route(Operation.SCENE_NAME)
            return route.decode(await self.correlator.query(route.address, timeout=self.timeout))
        except QueryTimeout as e:
            logger.debug(f"Scene {scene} name unavailable: {e}")
            return ""

    async def current(self) -> int:
        """Active scene number (1-based).

        Raises:
            QueryTimeout: If /-snap/index is not answered
        """
        route = self.translator.route(Operation.SCENE_INDEX)
        wire = route.decode(await self.correlator.query(route.address, timeout=self.timeout))
        index_spec = self.translator.profile.indices["scene"]
        return wire - index_spec.base + 1
