"""Random secret generation."""

import secrets

# Excludes look-alike glyphs 0, O, 1, l and I
PASSWORD_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz23456789"


def generate_password(length: int = 16) -> str:
    """Generate a cryptographically secure password from PASSWORD_ALPHABET."""
    if length <= 0:
        raise ValueError("Length must be positive")
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))
