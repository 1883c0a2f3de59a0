"""Utility modules for redis-up."""

from .output import write_stdout, write_stdout_bytes
from .crypto import generate_password

__all__ = [
    "write_stdout",
    "write_stdout_bytes",
    "generate_password",
]
