"""Message streams made of one or more partitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class Stream:
    """A named stream bound to a subject, holding partitions by ID.

    Each partition is the unit of replication and must provide ``close()``.
    """

    name: str
    subject: str
    partitions: Dict[int, Any] = field(default_factory=dict)

    def close(self) -> None:
        """Close every partition, stopping at the first one that fails."""
        for partition in self.partitions.values():
            partition.close()