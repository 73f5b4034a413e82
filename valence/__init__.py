"""Co-processor HTTP client, SHA-256 hasher, key cache and controller host-call helpers."""

__version__ = "0.3.9"

__all__ = ["client", "hasher", "host", "imports", "memory", "runtime", "zkvm"]