"""
Route Table resource

Reconciles one route table per subnet: the table lives in the cluster
network, sends 0.0.0.0/0 to the cluster's internet gateway and is associated
with the subnet. The table is re-found on later passes through its
kubicorn-route-table-subnet-pair tag, never through a stored cloud id.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from netplane.cluster import Cluster, ServerPool, Subnet
from netplane.metrics import METRICS
from netplane.resources.base import Resource, ResourceKind, Snapshot
from netplane.resources.compare import is_equal
from netplane.resources.errors import DuplicateResource, MissingIdentifier, MissingPrerequisite
from netplane.resources.identity import (
    INTERNET_GATEWAY_NAME,
    ROUTE_TABLE_SUBNET_PAIR,
    dict_to_tags,
    resolve_one,
    tags_to_dict,
)

logger = logging.getLogger(__name__)

DEFAULT_ROUTE_CIDR = "0.0.0.0/0"


def _call(ec2, operation: str, **kwargs) -> Dict[str, Any]:
    METRICS["provider_calls"].labels(operation=operation).inc()
    return getattr(ec2, operation)(**kwargs)


class RouteTable(Resource):
    kind = ResourceKind.ROUTE_TABLE

    def __init__(self, name: str, subnet: Subnet, server_pool: ServerPool):
        super().__init__(name)
        self.subnet = subnet
        self.server_pool = server_pool

    @classmethod
    def for_cluster(cls, cluster: Cluster) -> List["RouteTable"]:
        """One route table per server pool subnet, named after the subnet."""
        tables = []
        owners = {}
        for pool in cluster.server_pools:
            for subnet in pool.subnets:
                if subnet.name in owners:
                    raise DuplicateResource(
                        f"Subnet name [{subnet.name}] is used by server pools "
                        f"[{owners[subnet.name]}] and [{pool.name}]"
                    )
                owners[subnet.name] = pool.name
                tables.append(cls(name=subnet.name, subnet=subnet, server_pool=pool))
        return tables

    def actual(self, ec2, cache, cluster: Cluster) -> Snapshot:
        logger.debug("routetable.actual")
        cached = cache.get_actual(self.cache_key)
        if cached is not None:
            logger.debug("Using cached routetable [actual]")
            return cached

        # The table cannot exist before its subnet does.
        if self._realized_subnet(cluster) is None:
            return cache.put_actual(self.cache_key, self.empty_snapshot())

        rt = resolve_one(ec2, ROUTE_TABLE_SUBNET_PAIR, self.subnet.name)
        actual = Snapshot(
            kind=self.kind,
            name=self.subnet.name,
            cloud_id=self.subnet.name,
            tags=tags_to_dict(rt.get("Tags", [])),
        )
        return cache.put_actual(self.cache_key, actual)

    def expected(self, cache, cluster: Cluster) -> Snapshot:
        logger.debug("routetable.expected")
        cached = cache.get_expected(self.cache_key)
        if cached is not None:
            logger.debug("Using cached routetable [expected]")
            return cached

        expected = Snapshot(
            kind=self.kind,
            name=self.server_pool.name,
            cloud_id=self.server_pool.name,
            tags={
                "Name": self.server_pool.name,
                "KubernetesCluster": cluster.name,
                ROUTE_TABLE_SUBNET_PAIR.key: self.subnet.name,
            },
        )
        return cache.put_expected(self.cache_key, expected)

    def apply(self, ec2, actual: Snapshot, expected: Snapshot, cluster: Cluster) -> Snapshot:
        logger.debug("routetable.apply")
        if is_equal(actual, expected):
            return expected

        # Subnet must be realized before anything is created.
        subnet_id = self._subnet_identifier(cluster)

        # --- Create Route Table
        output = _call(ec2, "create_route_table", VpcId=cluster.network.identifier)
        route_table_id = output["RouteTable"]["RouteTableId"]
        logger.info("Created Route Table [%s]", route_table_id)

        # --- Lookup Internet Gateway
        ig = resolve_one(ec2, INTERNET_GATEWAY_NAME, cluster.name)
        gateway_id = ig["InternetGatewayId"]
        logger.info("Mapping route table [%s] to internet gateway [%s]", route_table_id, gateway_id)

        # --- Map Route Table to Internet Gateway
        _call(
            ec2,
            "create_route",
            DestinationCidrBlock=DEFAULT_ROUTE_CIDR,
            GatewayId=gateway_id,
            RouteTableId=route_table_id,
        )

        # --- Associate Route table to this particular subnet
        _call(ec2, "associate_route_table", SubnetId=subnet_id, RouteTableId=route_table_id)

        self.tag(ec2, route_table_id, expected.tags)
        logger.info("Associated route table [%s] to subnet [%s]", route_table_id, subnet_id)
        return Snapshot(
            kind=self.kind,
            name=expected.name,
            cloud_id=route_table_id,
            tags=expected.tags,
        )

    def delete(self, ec2, actual: Snapshot, cluster: Cluster) -> Snapshot:
        logger.debug("routetable.delete")
        if not actual.cloud_id:
            raise MissingIdentifier(f"Unable to delete routetable resource without ID [{actual.name}]")

        rt = resolve_one(ec2, ROUTE_TABLE_SUBNET_PAIR, self.subnet.name)
        route_table_id = rt["RouteTableId"]

        associations = rt.get("Associations", [])
        if associations:
            _call(
                ec2,
                "disassociate_route_table",
                AssociationId=associations[0]["RouteTableAssociationId"],
            )
        else:
            logger.debug("Route table [%s] has no association to detach", route_table_id)

        _call(ec2, "delete_route_table", RouteTableId=route_table_id)
        logger.info("Deleted routetable [%s]", route_table_id)

        return Snapshot(kind=self.kind, name=actual.name, tags=actual.tags)

    def remember(self, known: Cluster, cluster: Cluster) -> Cluster:
        subnet = self._realized_subnet(cluster)
        recorded = known.find_subnet(self.server_pool.name, self.subnet.name)
        if subnet is not None and recorded is not None:
            recorded.identifier = subnet.identifier
        return known

    def forget(self, known: Cluster) -> Cluster:
        recorded = known.find_subnet(self.server_pool.name, self.subnet.name)
        if recorded is not None:
            recorded.identifier = ""
        return known

    def tag(self, ec2, cloud_id: str, tags: Mapping[str, str]) -> None:
        logger.debug("routetable.tag")
        for key, val in sorted(tags.items()):
            logger.debug("Registering RouteTable tag [%s] %s", key, val)
        _call(ec2, "create_tags", Resources=[cloud_id], Tags=dict_to_tags(tags))

    def _realized_subnet(self, cluster: Cluster) -> Optional[Subnet]:
        # Looked up in the cluster handed to the call, not the held reference.
        subnet = cluster.find_subnet(self.server_pool.name, self.subnet.name)
        if subnet is None or not subnet.identifier:
            return None
        return subnet

    def _subnet_identifier(self, cluster: Cluster) -> str:
        subnet = self._realized_subnet(cluster)
        if subnet is None:
            raise MissingPrerequisite(
                f"Unable to find subnet id for [{self.server_pool.name}/{self.subnet.name}]"
            )
        return subnet.identifier

