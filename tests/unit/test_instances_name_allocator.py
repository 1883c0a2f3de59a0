"""Tests for NameAllocator."""

from redis_up.core.enums import InstanceKind
from redis_up.instances.name_allocator import NameAllocator, parse_counter


class TestNameAllocator:
    """Test counter based name allocation."""

    def test_allocates_sequential_names(self):
        allocator = NameAllocator({})

        assert allocator.allocate(InstanceKind.BASIC) == "redis-basic-1"
        assert allocator.allocate(InstanceKind.BASIC) == "redis-basic-2"

    def test_kinds_are_independent(self):
        counters = {}
        allocator = NameAllocator(counters)

        allocator.allocate(InstanceKind.BASIC)
        allocator.allocate(InstanceKind.BASIC)

        assert allocator.allocate(InstanceKind.CLUSTER) == "redis-cluster-1"
        assert counters == {"basic": 2, "cluster": 1}

    def test_rollback_returns_last_name(self):
        """Test a rolled back allocation is handed out again."""
        allocator = NameAllocator({})
        allocator.allocate(InstanceKind.STACK)

        allocator.rollback(InstanceKind.STACK)

        assert allocator.peek(InstanceKind.STACK) == 0
        assert allocator.allocate(InstanceKind.STACK) == "redis-stack-1"

    def test_rollback_never_goes_negative(self):
        counters = {}
        allocator = NameAllocator(counters)

        allocator.rollback(InstanceKind.SENTINEL)

        assert allocator.peek(InstanceKind.SENTINEL) == 0
        assert counters == {}

    def test_custom_prefix(self):
        assert NameAllocator({}, prefix="dev").allocate(InstanceKind.BASIC) == "dev-basic-1"


class TestParseCounter:
    """Test numeric suffix extraction."""

    def test_suffix(self):
        assert parse_counter("redis-basic-12") == 12

    def test_no_suffix(self):
        assert parse_counter("my-cache") is None
