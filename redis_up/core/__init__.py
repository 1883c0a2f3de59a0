"""Core framework components."""

from .value_objects import InstanceName

__all__ = ["InstanceName"]
