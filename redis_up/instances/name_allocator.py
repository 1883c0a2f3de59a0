"""Per-kind counter based instance name allocation."""

import re
from typing import Dict, Optional

from ..core.enums import InstanceKind

_COUNTER_SUFFIX = re.compile(r"-(\d+)$")


def parse_counter(name: str) -> Optional[int]:
    """Return the trailing numeric suffix of a name, if any."""
    match = _COUNTER_SUFFIX.search(name)
    return int(match.group(1)) if match else None


class NameAllocator:
    """Hands out "{prefix}-{kind}-{n}" names from a shared counter mapping.

    The mapping is the registry's own counters dict, so allocations become
    durable with the next registry save.
    """

    def __init__(self, counters: Dict[str, int], prefix: str = "redis") -> None:
        self._counters = counters
        self._prefix = prefix

    def peek(self, kind: InstanceKind) -> int:
        """Current counter value for a kind (0 if never allocated)."""
        return self._counters.get(kind.value, 0)

    def allocate(self, kind: InstanceKind) -> str:
        counter = self.peek(kind) + 1
        self._counters[kind.value] = counter
        return f"{self._prefix}-{kind.value}-{counter}"

    def rollback(self, kind: InstanceKind) -> None:
        """Give back the last allocation for a kind, never going below zero."""
        counter = self.peek(kind)
        if counter > 0:
            self._counters[kind.value] = counter - 1
