"""
Resource contract shared by every reconcilable kind.

A reconciliation pass for one resource reads the observed snapshot (actual),
derives the desired snapshot (expected), compares them and either applies the
difference or leaves the resource alone. Teardown deletes independently.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping

from netplane.cluster import Cluster

logger = logging.getLogger(__name__)


class ResourceKind(Enum):
    ROUTE_TABLE = "route_table"
    INTERNET_GATEWAY = "internet_gateway"


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time view of a resource, either observed or desired.

    An empty cloud_id means the object does not exist remotely.
    """

    kind: ResourceKind
    name: str
    cloud_id: str = ""
    tags: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "tags", MappingProxyType(dict(self.tags)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "name": self.name,
            "cloud_id": self.cloud_id,
            "tags": dict(self.tags),
        }


class Resource(ABC):
    """One reconcilable cloud object.

    Operations that reach the provider take the EC2 client explicitly; the
    per-pass cache is handed in by the driver.
    """

    kind: ResourceKind

    def __init__(self, name: str):
        self.name = name

    @classmethod
    @abstractmethod
    def for_cluster(cls, cluster: Cluster) -> List["Resource"]:
        """Build every resource of this kind the cluster model calls for."""

    @property
    def cache_key(self):
        return (self.kind, self.name)

    def empty_snapshot(self) -> Snapshot:
        return Snapshot(kind=self.kind, name=self.name)

    @abstractmethod
    def actual(self, ec2, cache, cluster: Cluster) -> Snapshot:
        """Observe what exists remotely."""

    @abstractmethod
    def expected(self, cache, cluster: Cluster) -> Snapshot:
        """Derive what should exist from the cluster model."""

    @abstractmethod
    def apply(self, ec2, actual: Snapshot, expected: Snapshot, cluster: Cluster) -> Snapshot:
        """Converge the remote object to the expected snapshot."""

    @abstractmethod
    def delete(self, ec2, actual: Snapshot, cluster: Cluster) -> Snapshot:
        """Remove the remote object."""

    def render(self, snapshot: Snapshot, cluster: Cluster) -> Cluster:
        """Write derived identifiers back into the cluster model."""
        logger.debug("%s.render", self.kind.value)
        return cluster

    def remember(self, known: Cluster, cluster: Cluster) -> Cluster:
        """Record in the known cluster that this resource now exists remotely."""
        return known

    def forget(self, known: Cluster) -> Cluster:
        """Record in the known cluster that this resource no longer exists."""
        return known

    @abstractmethod
    def tag(self, ec2, cloud_id: str, tags: Mapping[str, str]) -> None:
        """Attach tags to the remote object addressed by cloud_id."""

    def __repr__(self):
        return f"<{type(self).__name__} {self.name}>"
