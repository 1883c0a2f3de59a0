"""Tests for InstanceName."""

import pytest

from redis_up.core.value_objects import InstanceName


class TestInstanceName:
    """Test InstanceName validation."""

    @pytest.mark.parametrize("value", ["redis-basic-1", "my_cache", "a", "cache.v2", "1st"])
    def test_valid_names(self, value):
        """Test container-compatible names are accepted."""
        assert str(InstanceName(value)) == value

    @pytest.mark.parametrize("value", ["", "   ", "-leading", "has space", "slash/name", "ü"])
    def test_invalid_names(self, value):
        """Test names Docker would reject raise ValueError."""
        with pytest.raises(ValueError):
            InstanceName(value)

    def test_too_long(self):
        """Test overly long names are rejected."""
        with pytest.raises(ValueError, match="at most"):
            InstanceName("a" * 201)

    def test_derive(self):
        """Test derived resource names."""
        assert InstanceName("cache").derive("network") == "cache-network"

    def test_hashable(self):
        """Test equal names hash equally."""
        assert len({InstanceName("a"), InstanceName("a")}) == 1
