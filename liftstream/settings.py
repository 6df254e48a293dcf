"""Start-up adjustments a server applies to its configuration."""

from __future__ import annotations

import os
from typing import Iterable, List

_TMP_ROOT = "/tmp"
_DATA_ROOT_NAME = "liftstream"
_MIN_LOG_ROLL_TIME = 1.0


def filter_bootstrap_peers(server_id: str, peers: Iterable[str]) -> List[str]:
    """Drop this server's own ID from the bootstrap peer list, keeping order."""
    return [peer for peer in peers if peer != server_id]


def nats_connection_name(namespace: str, server_id: str, name: str) -> str:
    """Name given to one of the server's message-bus connections."""
    return f"LIFT.{namespace}.{server_id}.{name}"


def clamp_log_roll_time(seconds: float) -> float:
    """Raise a nonzero log roll time below one second to one second.

    Zero means unset and is kept; very short roll times would roll the log
    too often.
    """
    if seconds != 0 and seconds < _MIN_LOG_ROLL_TIME:
        return _MIN_LOG_ROLL_TIME
    return seconds


def default_data_dir(namespace: str) -> str:
    """Data directory used when none is configured."""
    return os.path.join(_TMP_ROOT, _DATA_ROOT_NAME, namespace)