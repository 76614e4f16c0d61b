#!/usr/bin/env python3
"""
netplane - Main Entry Point

Starts:
- REST API for cluster desired state and reconciliation passes
- Optional background reconciliation loop for one stored cluster
  (RECONCILE_CLUSTER=<name>)
"""

import logging
import os
import threading

import uvicorn

from netplane.api import shared_api_logic as services
from netplane.api.diagnostic_logger import configure_logging
from netplane.api.models import SessionLocal, init_db
from netplane.api.rest_api_server import app
from netplane.provider import build_ec2_client
from netplane.reconciler import ReconciliationEngine

logger = logging.getLogger(__name__)


def start_rest_api():
    """Start the FastAPI REST API server."""
    port = int(os.getenv("REST_PORT", 8000))
    logger.info(f"Starting REST API on port {port}...")
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")


def stored_cluster_pass(engine: ReconciliationEngine, name: str):
    """Return a callable that runs one pass over the named stored cluster."""

    def run_pass():
        db = SessionLocal()
        try:
            return services.reconcile_cluster_logic(db, engine, name)
        finally:
            db.close()

    return run_pass


def start_reconciler(cluster_name: str) -> ReconciliationEngine:
    engine = ReconciliationEngine(build_ec2_client())
    thread = threading.Thread(
        target=engine.run,
        args=(stored_cluster_pass(engine, cluster_name),),
        daemon=True,
    )
    thread.start()
    logger.info(f"Reconciliation Engine started for cluster {cluster_name}")
    return engine


def main():
    configure_logging()
    logger.info("=" * 60)
    logger.info("  netplane")
    logger.info("  Route table reconciliation")
    logger.info("=" * 60)

    init_db()

    cluster_name = os.getenv("RECONCILE_CLUSTER")
    if cluster_name:
        start_reconciler(cluster_name)

    start_rest_api()


if __name__ == "__main__":
    main()
