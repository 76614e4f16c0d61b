"""
Cluster Model

Desired-state aggregate for a cluster: its network, and the ordered server
pools with their subnets. Identifiers stay empty until the matching cloud
object has been realized by whichever resource owns it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Network:
    """Cluster network (VPC)."""

    identifier: str = ""


@dataclass
class Subnet:
    """A subnet owned by exactly one server pool."""

    name: str
    identifier: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "identifier": self.identifier}


@dataclass
class ServerPool:
    """A pool of servers and the subnets it is placed in."""

    name: str
    identifier: str = ""
    subnets: List[Subnet] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "identifier": self.identifier,
            "subnets": [s.to_dict() for s in self.subnets],
        }


@dataclass
class Cluster:
    """Root aggregate of the desired cluster topology."""

    name: str
    network: Network = field(default_factory=Network)
    server_pools: List[ServerPool] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "network": {"identifier": self.network.identifier},
            "server_pools": [p.to_dict() for p in self.server_pools],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Cluster":
        """Build a cluster from its dictionary form."""
        pools = []
        for pool_data in data.get("server_pools", []):
            subnets = [
                Subnet(name=s["name"], identifier=s.get("identifier", ""))
                for s in pool_data.get("subnets", [])
            ]
            pools.append(
                ServerPool(
                    name=pool_data["name"],
                    identifier=pool_data.get("identifier", ""),
                    subnets=subnets,
                )
            )
        network = data.get("network") or {}
        return cls(
            name=data["name"],
            network=Network(identifier=network.get("identifier", "")),
            server_pools=pools,
        )

    def unrealized(self) -> "Cluster":
        """Copy of the topology with every identifier cleared."""
        return Cluster(
            name=self.name,
            server_pools=[
                ServerPool(name=p.name, subnets=[Subnet(name=s.name) for s in p.subnets])
                for p in self.server_pools
            ],
        )

    def get_server_pool(self, name: str) -> Optional[ServerPool]:
        """Get a server pool by name."""
        for pool in self.server_pools:
            if pool.name == name:
                return pool
        return None

    def find_subnet(self, pool_name: str, subnet_name: str) -> Optional[Subnet]:
        """Get a subnet by the name of its server pool and its own name."""
        pool = self.get_server_pool(pool_name)
        if pool is None:
            return None
        for subnet in pool.subnets:
            if subnet.name == subnet_name:
                return subnet
        return None

    def adopt_identifiers(self, other: "Cluster"):
        """Copy the identifiers recorded in other onto matching pools and subnets."""
        self.network.identifier = other.network.identifier
        for pool in self.server_pools:
            recorded = other.get_server_pool(pool.name)
            if recorded is None:
                continue
            pool.identifier = recorded.identifier
            for subnet in pool.subnets:
                recorded_subnet = other.find_subnet(pool.name, subnet.name)
                if recorded_subnet is not None:
                    subnet.identifier = recorded_subnet.identifier
