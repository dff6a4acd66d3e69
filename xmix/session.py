"""Per-connection device state."""

from dataclasses import dataclass, field

from xmix.errors import FamilyAlreadyDetected
from xmix.families import MixerFamily


@dataclass
class DeviceSession:
    """Host, port and detected family of one mixer link.

    The family starts UNKNOWN and may be assigned exactly once.
    """
    host: str
    port: int
    connected: bool = False
    _family: MixerFamily = field(default=MixerFamily.UNKNOWN, repr=False)

    @property
    def family(self) -> MixerFamily:
        return self._family

    @family.setter
    def family(self, value: MixerFamily) -> None:
        if self._family is not MixerFamily.UNKNOWN:
            raise FamilyAlreadyDetected(
                f"Mixer family already detected as {self._family.value}; "
                f"cannot change to {value.value}"
            )
        self._family = value

    @property
    def detected(self) -> bool:
        return self._family is not MixerFamily.UNKNOWN
