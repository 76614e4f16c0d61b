"""
Identity-by-tag lookups.

EC2 has no relational joins between objects, so every cross-resource
reference is a tag whose value is the referenced entity's logical name. A
lookup must resolve to exactly one object; the resolver never picks among
candidates.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from netplane.metrics import METRICS
from netplane.resources.base import ResourceKind
from netplane.resources.errors import CardinalityFault

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentityTag:
    """A namespaced tag key and the describe call that filters on it."""

    kind: ResourceKind
    key: str
    operation: str
    collection: str


ROUTE_TABLE_SUBNET_PAIR = IdentityTag(
    kind=ResourceKind.ROUTE_TABLE,
    key="kubicorn-route-table-subnet-pair",
    operation="describe_route_tables",
    collection="RouteTables",
)

INTERNET_GATEWAY_NAME = IdentityTag(
    kind=ResourceKind.INTERNET_GATEWAY,
    key="kubicorn-internet-gateway-name",
    operation="describe_internet_gateways",
    collection="InternetGateways",
)


def tag_filter(identity: IdentityTag, value: str) -> List[Dict[str, Any]]:
    return [{"Name": f"tag:{identity.key}", "Values": [value]}]


def describe_tagged(ec2, identity: IdentityTag, value: str) -> List[Dict[str, Any]]:
    """Return every object carrying the identity tag with the given value."""
    filters = tag_filter(identity, value)
    logger.debug("Looking up %s by %s", identity.kind.value, filters)
    METRICS["provider_calls"].labels(operation=identity.operation).inc()
    response = getattr(ec2, identity.operation)(Filters=filters)
    return response.get(identity.collection, [])


def resolve_one(ec2, identity: IdentityTag, value: str) -> Dict[str, Any]:
    """Return the single object identified by the tag, or raise CardinalityFault."""
    matches = describe_tagged(ec2, identity, value)
    if len(matches) != 1:
        raise CardinalityFault(
            kind=identity.kind.value,
            expected=1,
            found=len(matches),
            filters=tag_filter(identity, value),
        )
    return matches[0]


def tags_to_dict(tag_list: List[Dict[str, str]]) -> Dict[str, str]:
    """Flatten an EC2 Tags list into a mapping."""
    return {tag["Key"]: tag["Value"] for tag in tag_list or []}


def dict_to_tags(tags) -> List[Dict[str, str]]:
    """Build an EC2 Tags list from a mapping, ordered by key."""
    return [{"Key": key, "Value": tags[key]} for key in sorted(tags)]
