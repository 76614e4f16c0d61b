# api/shared_api_logic.py
import logging
import threading
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from netplane.api.models import ClusterRecord, ServerPoolRecord, SubnetRecord
from netplane.cluster import Cluster, Network, ServerPool, Subnet
from netplane.metrics import METRICS
from netplane.reconciler import ReconciliationEngine, ReconciliationResult

logger = logging.getLogger(__name__)

_cluster_locks: Dict[str, threading.Lock] = {}
_cluster_locks_guard = threading.Lock()


def record_to_cluster(record: ClusterRecord) -> Cluster:
    return Cluster(
        name=record.name,
        network=Network(identifier=record.network_identifier or ""),
        server_pools=[
            ServerPool(
                name=pool.name,
                identifier=pool.identifier or "",
                subnets=[
                    Subnet(name=subnet.name, identifier=subnet.identifier or "")
                    for subnet in pool.subnets
                ],
            )
            for pool in record.server_pools
        ],
    )


def _pool_records(cluster: Cluster) -> List[ServerPoolRecord]:
    pools = []
    for position, pool in enumerate(cluster.server_pools):
        pools.append(
            ServerPoolRecord(
                name=pool.name,
                identifier=pool.identifier,
                position=position,
                subnets=[
                    SubnetRecord(name=subnet.name, identifier=subnet.identifier, position=i)
                    for i, subnet in enumerate(pool.subnets)
                ],
            )
        )
    return pools


# Cluster Services
def save_cluster_logic(db: Session, cluster: Cluster) -> ClusterRecord:
    """
    Store the desired state of a cluster, replacing any previous version.
    Server pools and subnets keep the order they have in the model.
    """
    record = db.get(ClusterRecord, cluster.name)
    if record is None:
        record = ClusterRecord(name=cluster.name)
        db.add(record)
    record.network_identifier = cluster.network.identifier
    record.server_pools = _pool_records(cluster)
    db.commit()
    db.refresh(record)
    METRICS["clusters_total"].set(db.query(ClusterRecord).count())
    return record


def get_cluster_logic(db: Session, name: str) -> Optional[Cluster]:
    record = db.get(ClusterRecord, name)
    if record is None:
        return None
    return record_to_cluster(record)


def list_clusters_logic(db: Session) -> List[Cluster]:
    records = db.query(ClusterRecord).order_by(ClusterRecord.name).all()
    return [record_to_cluster(r) for r in records]


def delete_cluster_logic(db: Session, name: str) -> Optional[ClusterRecord]:
    record = db.get(ClusterRecord, name)
    if record:
        db.delete(record)
        db.commit()
        METRICS["clusters_total"].set(db.query(ClusterRecord).count())
    return record


def get_known_cluster_logic(db: Session, name: str) -> Optional[Cluster]:
    """What earlier passes realized for the cluster, or None if no pass ran yet."""
    record = db.get(ClusterRecord, name)
    if record is None or not record.known_state:
        return None
    return Cluster.from_dict(record.known_state)


def _set_known_state(db: Session, name: str, cluster: Cluster):
    record = db.get(ClusterRecord, name)
    record.known_state = cluster.to_dict()
    db.commit()


def _known_cluster(db: Session, cluster: Cluster) -> Cluster:
    # Desired topology; identifiers only where an earlier pass realized them.
    known = cluster.unrealized()
    recorded = get_known_cluster_logic(db, cluster.name)
    if recorded is not None:
        known.adopt_identifiers(recorded)
    return known


def cluster_lock(name: str) -> threading.Lock:
    """The lock serializing reconcile and teardown passes on one cluster."""
    with _cluster_locks_guard:
        return _cluster_locks.setdefault(name, threading.Lock())


# Reconciliation Services
def reconcile_cluster_logic(db: Session, engine: ReconciliationEngine, name: str) -> Optional[ReconciliationResult]:
    """
    Run one reconciliation pass for a stored cluster.
    Actual state is read against the known cluster, and whatever the pass
    leaves present remotely is recorded as known even if other resources faulted.
    """
    with cluster_lock(name):
        cluster = get_cluster_logic(db, name)
        if cluster is None:
            return None
        result = engine.reconcile(cluster, known=_known_cluster(db, cluster))
        save_cluster_logic(db, result.cluster)
        _set_known_state(db, name, result.known)
    logger.info(f"Reconciled cluster {name}: success={result.success}")
    return result


def teardown_cluster_logic(db: Session, engine: ReconciliationEngine, name: str) -> Optional[ReconciliationResult]:
    """Delete the cloud resources of a stored cluster. The desired state is kept."""
    with cluster_lock(name):
        cluster = get_cluster_logic(db, name)
        if cluster is None:
            return None
        known = get_known_cluster_logic(db, name) or cluster.unrealized()
        result = engine.teardown(known)
        _set_known_state(db, name, result.known)
    logger.info(f"Tore down cluster {name}: success={result.success}")
    return result
