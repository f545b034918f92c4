from __future__ import annotations


class InvalidSpec(ValueError):
    """Board dimensions or mine count outside the allowed ranges."""


class InvalidArgument(ValueError):
    """Out-of-range index, bad seed, or other malformed call argument."""


class InternalConsistencyError(RuntimeError):
    """A generated board broke one of its own guarantees. Always a bug."""
