"""Command line interface for redis-up."""
