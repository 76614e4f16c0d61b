import os

import boto3
import pytest
from botocore.stub import Stubber
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set these BEFORE importing any project modules
os.environ.setdefault("DB_DIR", ".")
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"

from netplane.api.models import Base
from netplane.cluster import Cluster, Network, ServerPool, Subnet
from netplane.reconciler import ReconciliationEngine
from netplane.resources import PassCache

CLUSTER_NAME = "kube-test"

# In-memory state store shared across threads (TestClient runs handlers in a threadpool)
db_engine = create_engine(
    "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=db_engine)
    database = TestingSessionLocal()
    try:
        yield database
    finally:
        database.close()
        Base.metadata.drop_all(bind=db_engine)


@pytest.fixture
def db_factory():
    return TestingSessionLocal


@pytest.fixture
def ec2():
    return boto3.client("ec2", region_name="us-east-1")


@pytest.fixture
def stubber(ec2):
    """Scripted EC2 responses; any unscripted call raises."""
    with Stubber(ec2) as stub:
        yield stub
        stub.assert_no_pending_responses()


@pytest.fixture
def engine(ec2):
    return ReconciliationEngine(ec2, interval_seconds=0)


@pytest.fixture
def cache():
    return PassCache()


@pytest.fixture
def cluster():
    """One pool with one subnet that already exists remotely."""
    return Cluster(
        name=CLUSTER_NAME,
        network=Network(identifier="vpc-1"),
        server_pools=[
            ServerPool(name="pool-a", subnets=[Subnet(name="pool-a", identifier="subnet-1")]),
        ],
    )


@pytest.fixture
def fresh_cluster():
    """Same topology before the subnet is realized."""
    return Cluster(
        name=CLUSTER_NAME,
        network=Network(identifier="vpc-1"),
        server_pools=[
            ServerPool(name="pool-a", subnets=[Subnet(name="pool-a")]),
        ],
    )


def remote_tags(cluster_name=CLUSTER_NAME, pool="pool-a", subnet="pool-a"):
    return [
        {"Key": "KubernetesCluster", "Value": cluster_name},
        {"Key": "Name", "Value": pool},
        {"Key": "kubicorn-route-table-subnet-pair", "Value": subnet},
    ]


def route_table_filter(subnet="pool-a"):
    return [{"Name": "tag:kubicorn-route-table-subnet-pair", "Values": [subnet]}]


def gateway_filter(cluster_name=CLUSTER_NAME):
    return [{"Name": "tag:kubicorn-internet-gateway-name", "Values": [cluster_name]}]


def stub_route_table_lookup(stubber, tables, subnet="pool-a"):
    stubber.add_response(
        "describe_route_tables",
        {"RouteTables": tables},
        {"Filters": route_table_filter(subnet)},
    )


def stub_create(stubber, route_table_id="rtb-1", gateway_id="igw-1", subnet_id="subnet-1", vpc_id="vpc-1", tags=None):
    """Script the full create sequence of a route table, in call order."""
    stubber.add_response(
        "create_route_table",
        {"RouteTable": {"RouteTableId": route_table_id, "VpcId": vpc_id}},
        {"VpcId": vpc_id},
    )
    stubber.add_response(
        "describe_internet_gateways",
        {"InternetGateways": [{"InternetGatewayId": gateway_id}]},
        {"Filters": gateway_filter()},
    )
    stubber.add_response(
        "create_route",
        {"Return": True},
        {
            "DestinationCidrBlock": "0.0.0.0/0",
            "GatewayId": gateway_id,
            "RouteTableId": route_table_id,
        },
    )
    stubber.add_response(
        "associate_route_table",
        {"AssociationId": "rtbassoc-1"},
        {"SubnetId": subnet_id, "RouteTableId": route_table_id},
    )
    stubber.add_response(
        "create_tags",
        {},
        {"Resources": [route_table_id], "Tags": tags or remote_tags()},
    )
