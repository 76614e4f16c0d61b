"""Reconciliation driver."""

from netplane.reconciler.reconciler import (
    ActionType,
    ReconciliationAction,
    ReconciliationEngine,
    ReconciliationResult,
)

__all__ = ["ActionType", "ReconciliationAction", "ReconciliationEngine", "ReconciliationResult"]
