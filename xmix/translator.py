"""
Address/value translation for one detected family.

The translator is pure: it builds addresses and wire values but never sends.
"""

from dataclasses import dataclass
from typing import Any, Optional

from xmix.encoding import EncodingRule
from xmix.errors import IndexOutOfRange
from xmix.families import FamilyProfile, Operation, OPERATION_RULES


@dataclass(frozen=True)
class Route:
    """A resolved (address, rule) pair for one operation."""
    operation: Operation
    address: str
    rule: EncodingRule

    def encode(self, value: Any) -> Any:
        return self.rule.to_wire(value)

    def decode(self, value: Any) -> Any:
        return self.rule.from_wire(value)


class Translator:
    """Turns (operation, indices) into addresses for a FamilyProfile.

    Args:
        profile: Profile of the detected family

    Examples:
        >>> from xmix.families import XAIR_PROFILE
        >>> Translator(XAIR_PROFILE).route(Operation.BUS_FADER, bus=2).address
        '/bus/2/mix/fader'
    """

    def __init__(self, profile: FamilyProfile):
        self.profile = profile

    def check_index(self, domain: str, index: int) -> None:
        """Reject an index outside 1..limit for this family.

        Raises:
            IndexOutOfRange: If the index is not an int in range
        """
        limit = self.profile.limit(domain)
        if isinstance(index, bool) or not isinstance(index, int) or index < 1 or index > limit:
            raise IndexOutOfRange(domain, index, limit, self.profile.display_name)

    def wire_index(self, domain: str, index: int) -> int:
        """Validated wire value of a human index (e.g. scene 1 -> 0 on X32)."""
        self.check_index(domain, index)
        return self.profile.indices[domain].wire(index)

    def route(self, operation: Operation, **indices: int) -> Optional[Route]:
        """Resolve an operation to an address.

        Returns None when the family has no equivalent for the operation.
        Indices are validated only when the family supports the operation,
        so e.g. aux 12 on an X-Air is a no-op rather than an error.

        Raises:
            IndexOutOfRange: If any supplied index is outside the family range
        """
        template = self.profile.routes.get(operation)
        if template is None:
            return None

        segments = {}
        for domain, index in indices.items():
            self.check_index(domain, index)
            segments[domain] = self.profile.indices[domain].segment(index)

        return Route(operation, template.path.format(**segments), template.rule)

    def placeholder(self, operation: Operation) -> Any:
        """Value an unsupported query returns."""
        template = self.profile.routes.get(operation)
        rule = template.rule if template else OPERATION_RULES[operation]
        return rule.placeholder
