"""Error hierarchy for redis-up."""

from typing import Optional, Dict, Any, List


class RedisUpError(Exception):
    """Base exception for all redis-up errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Configuration and Setup Errors
class ConfigurationError(RedisUpError):
    """Error in tool configuration."""


class ConfigFormatError(ConfigurationError):
    """Persisted state or batch document could not be parsed or validated."""


# Registry lookup errors
class InstanceError(RedisUpError):
    """Base class for registry lookup errors."""

    def __init__(self, message: str, instance: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.instance = instance


class InstanceNotFoundError(InstanceError):
    """No registered instance matches the requested name or kind."""


class KindMismatchError(InstanceError):
    """A registered instance exists under the name but has another kind."""

    def __init__(self, message: str, instance: str, expected: str, actual: str,
                 details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, instance, details)
        self.expected = expected
        self.actual = actual


# Container runtime errors (raised by runtime adapters, unclassified)
class ContainerRuntimeError(RedisUpError):
    """A container runtime operation failed.

    runtime_message holds the daemon's own error text, without the
    operation and target prefix added to message.
    """

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None,
                 runtime_message: Optional[str] = None) -> None:
        super().__init__(message, details)
        self.operation = operation
        self.target = target
        self.runtime_message = runtime_message if runtime_message is not None else message


class ContainerNotFoundError(ContainerRuntimeError):
    """The addressed container, network or volume does not exist."""


class RuntimeUnavailableError(ContainerRuntimeError):
    """The container runtime daemon could not be reached."""


class BootstrapError(RedisUpError):
    """Post-start initialization of a deployment failed."""


# Deployment errors (classified start failures)
class DeploymentError(RedisUpError):
    """Base class for classified start failures.

    Carries the cleanup failures collected while compensating, so that they
    are reported alongside the primary error rather than replacing it.
    """

    def __init__(self, message: str, instance: Optional[str] = None,
                 kind: Optional[str] = None,
                 cleanup_errors: Optional[List[str]] = None,
                 details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.instance = instance
        self.kind = kind
        self.cleanup_errors = list(cleanup_errors or [])


class NameConflictError(DeploymentError):
    """The instance or container name is already taken."""


class PortConflictError(DeploymentError):
    """A host port required by the deployment is already bound."""

    def __init__(self, message: str, port: Optional[int] = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.port = port


class RuntimeFailureError(DeploymentError):
    """Any other failure while realizing a deployment."""


# Filesystem Errors
class FilesystemError(RedisUpError):
    """Filesystem operation error."""


class PathError(FilesystemError):
    """Path-related error."""


class AtomicWriteError(FilesystemError):
    """Atomic write operation failed."""


# Data and Codec Errors
class CodecError(RedisUpError):
    """Data encoding/decoding error."""


class SerializationError(CodecError):
    """Data serialization error."""


class DeserializationError(CodecError):
    """Data deserialization error."""
