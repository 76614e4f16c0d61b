# File: netplane/api/rest_api_server.py
"""
netplane REST API Server

FastAPI-based REST API over the cluster state store and the reconciler:
- Clusters (desired state)
- Reconcile / teardown passes
- Health and Prometheus metrics
"""

import logging
from typing import List

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from netplane.api import shared_api_logic as services
from netplane.api.models import ClusterRecord, SessionLocal, init_db
from netplane.cluster import Cluster as ClusterModel
from netplane.metrics import METRICS
from netplane.provider import build_ec2_client
from netplane.reconciler import ReconciliationEngine
from netplane.resources import DuplicateResource, build_resources

logger = logging.getLogger(__name__)

app = FastAPI(
    title="netplane",
    description="Route table reconciliation for cluster networking",
    version="0.1.0",
)


@app.on_event("startup")
def initialize_database_and_metrics():
    init_db()
    db = SessionLocal()
    try:
        METRICS["clusters_total"].set(db.query(ClusterRecord).count())
    finally:
        db.close()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_ec2_client(request: Request):
    # Built on first use and kept for the lifetime of the app.
    if getattr(request.app.state, "ec2", None) is None:
        request.app.state.ec2 = build_ec2_client()
    return request.app.state.ec2


def get_reconciliation_engine(ec2=Depends(get_ec2_client)) -> ReconciliationEngine:
    return ReconciliationEngine(ec2)


class Network(BaseModel):
    identifier: str = ""

class Subnet(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)
    identifier: str = ""

class ServerPool(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)
    identifier: str = ""
    subnets: List[Subnet] = Field(default_factory=list)

class Cluster(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)
    network: Network = Field(default_factory=Network)
    server_pools: List[ServerPool] = Field(default_factory=list)

class ReconciliationAction(BaseModel):
    action_type: str
    resource_kind: str
    resource_name: str
    cloud_id: str

class ReconciliationResult(BaseModel):
    success: bool
    actions_taken: List[ReconciliationAction]
    errors: List[str]
    duration_ms: float


@app.get("/health")
def health():
    return {"status": "healthy"}

@app.get("/metrics")
def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

@app.middleware("http")
async def prometheus_middleware(request: Request, call_next):
    METRICS["api_requests"].labels(method=request.method, endpoint=request.url.path).inc()
    return await call_next(request)


# Cluster endpoints
@app.post("/clusters", response_model=Cluster, status_code=201)
def create_cluster(cluster: Cluster, db: Session = Depends(get_db)):
    model = ClusterModel.from_dict(cluster.model_dump())
    try:
        build_resources(model)
    except DuplicateResource as e:
        raise HTTPException(status_code=422, detail=str(e))
    record = services.save_cluster_logic(db, model)
    return services.record_to_cluster(record).to_dict()

@app.get("/clusters", response_model=List[Cluster])
def list_clusters(db: Session = Depends(get_db)):
    return [c.to_dict() for c in services.list_clusters_logic(db)]

@app.get("/clusters/{name}", response_model=Cluster)
def get_cluster(name: str, db: Session = Depends(get_db)):
    cluster = services.get_cluster_logic(db, name)
    if cluster is None:
        raise HTTPException(status_code=404, detail="Cluster not found")
    return cluster.to_dict()

@app.delete("/clusters/{name}")
def delete_cluster(name: str, db: Session = Depends(get_db)):
    if services.delete_cluster_logic(db, name) is None:
        raise HTTPException(status_code=404, detail="Cluster not found")
    return {"message": "Cluster deleted"}


# Reconciliation endpoints
@app.post("/clusters/{name}/reconcile", response_model=ReconciliationResult)
def reconcile_cluster(
    name: str,
    db: Session = Depends(get_db),
    engine: ReconciliationEngine = Depends(get_reconciliation_engine),
):
    result = services.reconcile_cluster_logic(db, engine, name)
    if result is None:
        raise HTTPException(status_code=404, detail="Cluster not found")
    return result.to_dict()

@app.post("/clusters/{name}/teardown", response_model=ReconciliationResult)
def teardown_cluster(
    name: str,
    db: Session = Depends(get_db),
    engine: ReconciliationEngine = Depends(get_reconciliation_engine),
):
    result = services.teardown_cluster_logic(db, engine, name)
    if result is None:
        raise HTTPException(status_code=404, detail="Cluster not found")
    return result.to_dict()
