#!/usr/bin/env python3
"""
Resource Reconciliation Engine

Drives the per-resource reconciliation contract for a cluster.
Every pass starts with a fresh cache and runs in three phases:
- Observe actual state of every resource against the known cluster
- Derive expected state of every resource from the desired cluster
- Compare each pair, apply the difference, render into the cluster model

The known cluster carries an identifier only where a resource was realized
by an earlier pass. Actual state is read against it so that identifiers
realized elsewhere (a subnet created by a sibling resource, say) do not hide
objects that were never created. Each resource that ends a pass present
remotely is remembered in the known cluster right away, so a fault elsewhere
in the pass never hides it from the next Actual. Resources reconcile
independently: a fault in one is recorded and the pass moves on. Nothing is
rolled back.
"""

import logging
import os
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from netplane.api.diagnostic_logger import DiagnosticLogger
from netplane.cluster import Cluster
from netplane.metrics import METRICS
from netplane.resources import (
    TRANSPORT_FAULTS,
    DuplicateResource,
    PassCache,
    ReconcileError,
    Resource,
    build_resources,
    is_equal,
)

logger = logging.getLogger(__name__)

FAULTS = (ReconcileError,) + TRANSPORT_FAULTS


class ActionType(Enum):
    APPLY = "apply"
    DELETE = "delete"
    UNCHANGED = "unchanged"


@dataclass
class ReconciliationAction:
    """Outcome of reconciling a single resource."""

    action_type: ActionType
    resource_kind: str
    resource_name: str
    cloud_id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action_type": self.action_type.value,
            "resource_kind": self.resource_kind,
            "resource_name": self.resource_name,
            "cloud_id": self.cloud_id,
        }


@dataclass
class ReconciliationResult:
    """Result of a reconciliation or teardown pass."""

    success: bool
    cluster: Optional[Cluster] = None
    known: Optional[Cluster] = None
    actions_taken: List[ReconciliationAction] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    duration_ms: float = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "actions_taken": [a.to_dict() for a in self.actions_taken],
            "errors": self.errors,
            "duration_ms": self.duration_ms,
        }


class ReconciliationEngine:
    """
    Main reconciliation engine.

    Owns the EC2 client for its lifetime and hands it to every resource
    operation. The pass cache lives only as long as one pass.
    """

    def __init__(self, ec2, interval_seconds: Optional[float] = None, diagnostics: Optional[DiagnosticLogger] = None):
        self.ec2 = ec2
        if interval_seconds is None:
            interval_seconds = float(os.getenv("RECONCILE_INTERVAL", 10))
        self.interval = interval_seconds
        self.diagnostics = diagnostics or DiagnosticLogger()
        self.running = False

    def run(self, run_pass: Callable[[], Optional[ReconciliationResult]], max_passes: Optional[int] = None):
        """Call run_pass every interval seconds until stopped."""
        self.running = True
        passes = 0
        logger.info("Reconciliation Engine: Starting main loop")

        while self.running:
            try:
                result = run_pass()
                if result is None:
                    logger.debug("Reconciliation Engine: Nothing to reconcile")
                else:
                    applied = [a for a in result.actions_taken if a.action_type == ActionType.APPLY]
                    if applied:
                        logger.info(f"Reconciliation: Applied {len(applied)} resources")
                    for error in result.errors:
                        logger.warning(f"Reconciliation Error: {error}")
            except Exception:
                logger.exception("Reconciliation Engine: Unexpected error")

            passes += 1
            if max_passes is not None and passes >= max_passes:
                break
            time.sleep(self.interval)

        self.running = False

    def stop(self):
        """Stop the reconciliation loop."""
        self.running = False

    def reconcile(
        self,
        cluster: Cluster,
        known: Optional[Cluster] = None,
        resources: Optional[List[Resource]] = None,
    ) -> ReconciliationResult:
        """
        Perform one reconciliation pass.

        Steps:
        1. Actual of every resource, against the known cluster
        2. Expected of every resource, from the desired cluster
        3. Compare; apply on difference
        4. Render into the desired cluster, remember in the known cluster

        result.known starts as a copy of known and records every resource
        that exists remotely once the pass is over, faulted or not.
        """
        start_time = time.time()
        known = Cluster.from_dict((known or cluster).to_dict())
        result = ReconciliationResult(success=True, cluster=cluster, known=known)
        cache = PassCache()
        if resources is None:
            resources = self._build_resources(result, cluster)

        # Step 1: observe
        observed = {}
        for resource in resources:
            try:
                observed[resource.cache_key] = resource.actual(self.ec2, cache, known)
            except FAULTS as e:
                self._record_fault(result, resource, "actual", e)

        # Step 2: derive
        desired = {
            resource.cache_key: resource.expected(cache, cluster)
            for resource in resources
            if resource.cache_key in observed
        }

        # Step 3/4: compare, apply, render
        for resource in resources:
            if resource.cache_key not in observed:
                continue
            actual = observed[resource.cache_key]
            expected = desired[resource.cache_key]
            try:
                if is_equal(actual, expected):
                    logger.debug(f"{resource!r} is up to date")
                    result.actions_taken.append(self._action(ActionType.UNCHANGED, resource, actual.cloud_id))
                else:
                    applied = resource.apply(self.ec2, actual, expected, cluster)
                    result.cluster = cluster = resource.render(applied, cluster)
                    result.actions_taken.append(self._action(ActionType.APPLY, resource, applied.cloud_id))
            except FAULTS as e:
                self._record_fault(result, resource, "apply", e)
                continue
            result.known = resource.remember(result.known, cluster)

        return self._finish(result, start_time)

    def teardown(self, cluster: Cluster, resources: Optional[List[Resource]] = None) -> ReconciliationResult:
        """
        Delete every resource of the known cluster that exists remotely.

        result.known is a copy of the cluster with every deleted resource
        forgotten.
        """
        start_time = time.time()
        known = Cluster.from_dict(cluster.to_dict())
        result = ReconciliationResult(success=True, cluster=cluster, known=known)
        cache = PassCache()
        if resources is None:
            resources = self._build_resources(result, known)

        for resource in reversed(resources):
            try:
                actual = resource.actual(self.ec2, cache, known)
                if not actual.cloud_id:
                    logger.debug(f"{resource!r} was never created, nothing to delete")
                    result.actions_taken.append(self._action(ActionType.UNCHANGED, resource))
                    continue
                deleted = resource.delete(self.ec2, actual, known)
                result.cluster = resource.render(deleted, result.cluster)
                result.actions_taken.append(self._action(ActionType.DELETE, resource, actual.cloud_id))
            except FAULTS as e:
                self._record_fault(result, resource, "delete", e)
                continue
            result.known = resource.forget(result.known)

        return self._finish(result, start_time)

    def _build_resources(self, result: ReconciliationResult, cluster: Cluster) -> List[Resource]:
        try:
            return build_resources(cluster)
        except DuplicateResource as e:
            result.success = False
            result.errors.append(str(e))
            METRICS["reconciliation_faults"].labels(fault=type(e).__name__).inc()
            self.diagnostics.log_error(str(e), {"operation": "build", "cluster": cluster.name})
            return []

    def _action(self, action_type: ActionType, resource: Resource, cloud_id: str = "") -> ReconciliationAction:
        return ReconciliationAction(
            action_type=action_type,
            resource_kind=resource.kind.value,
            resource_name=resource.name,
            cloud_id=cloud_id,
        )

    def _record_fault(self, result: ReconciliationResult, resource: Resource, operation: str, error: Exception):
        result.success = False
        result.errors.append(f"{resource.kind.value} [{resource.name}]: {error}")
        METRICS["reconciliation_faults"].labels(fault=type(error).__name__).inc()
        self.diagnostics.log_error(
            str(error),
            {
                "operation": operation,
                "resource_kind": resource.kind.value,
                "resource_name": resource.name,
                "fault": type(error).__name__,
            },
        )

    def _finish(self, result: ReconciliationResult, start_time: float) -> ReconciliationResult:
        result.duration_ms = (time.time() - start_time) * 1000

        METRICS["reconciliation_latency"].observe(result.duration_ms)
        for action in result.actions_taken:
            action_label = f"{action.action_type.value}_{action.resource_kind}"
            METRICS["reconciliation_actions"].labels(action_type=action_label).inc()

        return result
