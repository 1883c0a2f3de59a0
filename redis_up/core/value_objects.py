"""Domain primitives for instance identification."""

import re
from dataclasses import dataclass

# Docker container names: first char alphanumeric, then [a-zA-Z0-9_.-]
_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9_.-]*$")
_MAX_NAME_LENGTH = 200


@dataclass(frozen=True)
class InstanceName:
    """Validated instance name. Hashable for use as dictionary key.

    Every container, network and volume of an instance is derived from its
    name, so the name must itself be a valid container name.
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("InstanceName cannot be empty")

        if len(self.value) > _MAX_NAME_LENGTH:
            raise ValueError(
                f"InstanceName must be at most {_MAX_NAME_LENGTH} characters: {self.value}"
            )

        if not _NAME_PATTERN.match(self.value):
            raise ValueError(
                f"InstanceName must start with a letter or digit and contain only "
                f"letters, digits, '_', '.' or '-': {self.value}"
            )

    def __str__(self) -> str:
        return self.value

    def derive(self, suffix: str) -> str:
        """Name of a resource owned by this instance."""
        return f"{self.value}-{suffix}"
