# file: models.py

import os

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, create_engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker
from sqlalchemy.sql import func

Base = declarative_base()


class ClusterRecord(Base):
    __tablename__ = "clusters"
    name = Column(String, primary_key=True)
    network_identifier = Column(String, nullable=False, default="")
    known_state = Column(JSON, nullable=True)  # identifiers realized by earlier passes
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    server_pools = relationship(
        "ServerPoolRecord",
        backref="cluster",
        cascade="all, delete-orphan",
        order_by="ServerPoolRecord.position",
    )


class ServerPoolRecord(Base):
    __tablename__ = "server_pools"
    id = Column(Integer, primary_key=True, autoincrement=True)
    cluster_name = Column(String, ForeignKey("clusters.name"), nullable=False)
    name = Column(String, nullable=False)
    identifier = Column(String, nullable=False, default="")
    position = Column(Integer, nullable=False, default=0)  # pools are ordered

    subnets = relationship(
        "SubnetRecord",
        backref="server_pool",
        cascade="all, delete-orphan",
        order_by="SubnetRecord.position",
    )


class SubnetRecord(Base):
    __tablename__ = "subnets"
    id = Column(Integer, primary_key=True, autoincrement=True)
    server_pool_id = Column(Integer, ForeignKey("server_pools.id"), nullable=False)
    name = Column(String, nullable=False)
    identifier = Column(String, nullable=False, default="")
    position = Column(Integer, nullable=False, default=0)


# ============================================================================
# Database Configuration (SQLite for Persistence)
# ============================================================================

DB_DIR = os.getenv("DB_DIR", "/tmp")
DB_PATH = os.getenv("DB_PATH", os.path.join(DB_DIR, "netplane.db"))

SQLALCHEMY_DATABASE_URL = f"sqlite:///{DB_PATH}"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False}  # FastAPI serves from a threadpool
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None):
    """Create the state store tables if they do not exist yet."""
    if bind is None:
        bind = engine
        if not DB_PATH.startswith(":memory:"):
            os.makedirs(os.path.dirname(DB_PATH) or ".", exist_ok=True)
    Base.metadata.create_all(bind=bind)
