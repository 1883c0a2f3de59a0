"""Tests for password generation."""

import pytest

from redis_up.utils.crypto import PASSWORD_ALPHABET, generate_password


class TestGeneratePassword:
    def test_default_length(self):
        assert len(generate_password()) == 16

    def test_alphabet(self):
        password = generate_password(200)

        assert set(password) <= set(PASSWORD_ALPHABET)
        assert not set(password) & set("0O1lI")

    def test_passwords_differ(self):
        assert generate_password() != generate_password()

    def test_invalid_length(self):
        with pytest.raises(ValueError):
            generate_password(0)
