"""Message-bus subjects used by a server to talk to the rest of the cluster."""

from __future__ import annotations

from dataclasses import dataclass

from liftstream.raft import metadata_raft_subject


@dataclass(frozen=True)
class ClusterSubjects:
    """Builds the subjects a server uses within one cluster namespace."""

    namespace: str

    def __init__(self, namespace: str) -> None:
        object.__setattr__(self, "namespace", namespace)

    def metadata_raft(self) -> str:
        """Base subject for metadata Raft operations."""
        return metadata_raft_subject(self.namespace)

    def join(self) -> str:
        """Subject on which servers ask to join the metadata Raft group."""
        return f"{self.metadata_raft()}.join"

    def bootstrap(self) -> str:
        """Subject used to detect other servers started as bootstrap seeds."""
        return f"{self.metadata_raft()}.bootstrap"

    def propagate(self) -> str:
        """Subject on which the metadata leader takes operations forwarded by followers."""
        return f"{self.metadata_raft()}.propagate"

    def server_info(self) -> str:
        """Subject for server information requests."""
        return f"{self.metadata_raft()}.info"

    def partition_status(self, server_id: str) -> str:
        """Subject for partition status requests addressed to ``server_id``."""
        return f"{self.metadata_raft()}.status.{server_id}"

    def partition_notification(self, server_id: str) -> str:
        """Subject on which leaders wake an idle follower ``server_id``."""
        return f"{self.namespace}.notify.{server_id}"