"""Persisted catalogue of deployed instances and allocation counters."""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError

from ..core.enums import InstanceKind
from ..core.errors import (
    ConfigFormatError,
    DeserializationError,
    InstanceNotFoundError,
    KindMismatchError,
)
from ..core.log import get_logger
from ..core.types import InstanceDescriptor, RegistryState
from ..utils.codec import from_json_string, to_json_string
from ..utils.filesystem import atomic_write, ensure_dir, read_text
from .name_allocator import parse_counter

logger = get_logger(__name__)


class InstanceRegistry:
    """Mapping of instance name to descriptor, plus per-kind counters.

    The registry is loaded once per command, mutated in memory and written
    back in full with save(). There is no cross-process locking; the last
    writer wins.
    """

    def __init__(
        self,
        state_path: Path,
        instances: Optional[Dict[str, InstanceDescriptor]] = None,
        counters: Optional[Dict[str, int]] = None,
    ) -> None:
        self._state_path = Path(state_path)
        self._instances: Dict[str, InstanceDescriptor] = dict(instances or {})
        self._counters: Dict[str, int] = dict(counters or {})

    @classmethod
    def load(cls, state_path: Path) -> "InstanceRegistry":
        """Load the registry from disk.

        A missing or blank file yields an empty registry.

        Raises:
            ConfigFormatError: If the file exists but cannot be parsed
        """
        state_path = Path(state_path)
        if not state_path.exists():
            logger.debug("No registry at %s, starting empty", state_path)
            return cls(state_path)

        text = read_text(state_path)
        if not text.strip():
            return cls(state_path)

        try:
            state = RegistryState.model_validate(from_json_string(text))
        except DeserializationError as e:
            raise ConfigFormatError(f"Registry file {state_path} is not valid JSON: {e}") from e
        except ValidationError as e:
            raise ConfigFormatError(f"Registry file {state_path} is malformed: {e}") from e

        logger.debug("Loaded %d instances from %s", len(state.instances), state_path)
        return cls(state_path, state.instances, state.counters)

    @property
    def state_path(self) -> Path:
        return self._state_path

    @property
    def counters(self) -> Dict[str, int]:
        """Live counter mapping, shared with the name allocator."""
        return self._counters

    def to_state(self) -> RegistryState:
        return RegistryState(instances=dict(self._instances), counters=dict(self._counters))

    def save(self) -> None:
        """Write the full registry, creating the parent directory if needed."""
        ensure_dir(self._state_path.parent)
        atomic_write(self._state_path, to_json_string(self.to_state().model_dump(mode="json")))
        logger.debug("Saved %d instances to %s", len(self._instances), self._state_path)

    def add(self, descriptor: InstanceDescriptor) -> None:
        """Insert or replace the descriptor under its name."""
        self._instances[descriptor.name] = descriptor

    def remove(self, name: str) -> Optional[InstanceDescriptor]:
        """Remove and return a descriptor, or None if not registered."""
        return self._instances.pop(name, None)

    def get(self, name: str) -> Optional[InstanceDescriptor]:
        return self._instances.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._instances

    def __len__(self) -> int:
        return len(self._instances)

    def list_all(self) -> List[InstanceDescriptor]:
        """All descriptors, newest first."""
        return sorted(self._instances.values(), key=_recency_key, reverse=True)

    def list_by_kind(self, kind: InstanceKind) -> List[InstanceDescriptor]:
        return [d for d in self.list_all() if d.kind == kind]

    def latest_of_kind(self, kind: InstanceKind) -> Optional[InstanceDescriptor]:
        """Most recently created descriptor of a kind.

        Ordered by created_at; the numeric name suffix breaks ties.
        """
        candidates = [d for d in self._instances.values() if d.kind == kind]
        if not candidates:
            return None
        return max(candidates, key=_recency_key)

    def latest(self) -> Optional[InstanceDescriptor]:
        """Most recently created descriptor of any kind."""
        if not self._instances:
            return None
        return max(self._instances.values(), key=_recency_key)

    def resolve(self, kind: InstanceKind, name: Optional[str] = None) -> InstanceDescriptor:
        """Find the instance a stop/info command addresses.

        Args:
            kind: Kind the command operates on
            name: Explicit instance name, or None for the latest of the kind

        Raises:
            InstanceNotFoundError: If nothing matches
            KindMismatchError: If the name belongs to an instance of another kind
        """
        if name is None:
            descriptor = self.latest_of_kind(kind)
            if descriptor is None:
                raise InstanceNotFoundError(
                    f"No {kind.value} instances found. Start one with "
                    f"'redis-up {kind.value} start'."
                )
            return descriptor

        descriptor = self.get(name)
        if descriptor is None:
            raise InstanceNotFoundError(f"Instance '{name}' not found", instance=name)
        if descriptor.kind != kind:
            raise KindMismatchError(
                f"Instance '{name}' is a {descriptor.kind.value} instance, not {kind.value}",
                instance=name,
                expected=kind.value,
                actual=descriptor.kind.value,
            )
        return descriptor


def _recency_key(descriptor: InstanceDescriptor) -> Tuple:
    return (descriptor.created_at, parse_counter(descriptor.name) or 0, descriptor.name)
