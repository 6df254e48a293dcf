"""Helpers for the embedded metadata Raft group."""

from __future__ import annotations

from typing import Iterable, List, Protocol, Tuple


class _Logger(Protocol):
    def debug(self, msg: str, *args: object) -> None: ...

    def info(self, msg: str, *args: object) -> None: ...

    def warning(self, msg: str, *args: object) -> None: ...

    def error(self, msg: str, *args: object) -> None: ...


# Level letter following '[' mapped to the logger method name and the number
# of bytes to skip from the bracket: "[DEBUG] ", "[INFO] ", "[WARN] ", "[ERR] ".
_LEVELS = {
    "D": ("debug", 8),
    "I": ("info", 7),
    "W": ("warning", 7),
    "E": ("error", 6),
}


def _text(data: bytes) -> str:
    return data.decode("utf-8", "replace")


class RaftLogForwarder:
    """A writable sink that forwards Raft library log lines to a logger.

    Lines are expected to carry a level tag such as ``[INFO]``; the tag is
    stripped and the rest is logged at the matching level. Lines without a
    bracket are dropped, and nothing is logged when forwarding is disabled.
    """

    def __init__(self, logger: _Logger, enabled: bool = True) -> None:
        self.logger = logger
        self.enabled = enabled
        self.closed = False

    def write(self, data: bytes | str) -> int:
        """Forward one chunk of log output; returns the number of bytes taken."""
        raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        if not self.enabled:
            return len(raw)
        start = raw.find(b"[")
        if start == -1:
            return len(raw)
        letter = raw[start + 1:start + 2].decode("latin-1")
        level = _LEVELS.get(letter)
        if level is None:
            self.logger.info("%s", _text(raw))
        else:
            method, skip = level
            getattr(self.logger, method)("%s", _text(raw[start + skip:]))
        return len(raw)

    def close(self) -> None:
        """Mark the forwarder closed; the logger itself stays open."""
        self.closed = True


def metadata_raft_subject(namespace: str) -> str:
    """Base message-bus subject for metadata Raft traffic in ``namespace``."""
    return f"{namespace}.raft.metadata"


def bootstrap_servers(server_id: str, peers: Iterable[str]) -> List[Tuple[str, str]]:
    """Initial Raft configuration as ``(id, address)`` pairs, this server first.

    The transport addresses servers by their ID, so the address equals the ID.
    """
    servers = [(server_id, server_id)]
    servers.extend((peer, peer) for peer in peers)
    return servers