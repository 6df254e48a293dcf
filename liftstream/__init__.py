"""Wire encoding, checked fields, messages, replication batching and cluster helpers for a replicated message-stream server."""

__version__ = "0.1.0"