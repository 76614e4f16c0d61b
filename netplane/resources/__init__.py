"""Reconcilable cloud resources."""

from typing import List

from netplane.cluster import Cluster
from netplane.resources.base import Resource, ResourceKind, Snapshot
from netplane.resources.cache import PassCache
from netplane.resources.compare import is_equal
from netplane.resources.errors import (
    TRANSPORT_FAULTS,
    CardinalityFault,
    ComparisonError,
    DuplicateResource,
    MissingIdentifier,
    MissingPrerequisite,
    ReconcileError,
)
from netplane.resources.routetable import RouteTable

# Kinds with a reconcilable implementation. Internet gateways are only ever
# looked up by tag here.
RESOURCE_TYPES = {
    ResourceKind.ROUTE_TABLE: RouteTable,
}


def build_resources(cluster: Cluster) -> List[Resource]:
    """Every resource the cluster model calls for, in registry order."""
    resources: List[Resource] = []
    for resource_type in RESOURCE_TYPES.values():
        resources.extend(resource_type.for_cluster(cluster))
    return resources


__all__ = [
    "RESOURCE_TYPES",
    "TRANSPORT_FAULTS",
    "CardinalityFault",
    "ComparisonError",
    "DuplicateResource",
    "MissingIdentifier",
    "MissingPrerequisite",
    "PassCache",
    "ReconcileError",
    "Resource",
    "ResourceKind",
    "RouteTable",
    "Snapshot",
    "build_resources",
    "is_equal",
]
