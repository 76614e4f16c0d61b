"""
EC2 client construction.

The client is built once by whoever drives reconciliation and passed to
every resource operation. Credentials come from the usual boto3 chain:
environment variables, ~/.aws/credentials, or an instance profile.
"""

import os
from typing import Optional

import boto3
from botocore.config import Config

DEFAULT_REGION = "us-east-1"


def build_ec2_client(region: Optional[str] = None, session: Optional[boto3.Session] = None):
    """Create a boto3 EC2 client.

    Args:
        region: AWS region. Falls back to AWS_DEFAULT_REGION, then us-east-1.
        session: Session to build the client from. A new one by default.

    Returns:
        boto3 EC2 client.
    """
    region = region or os.getenv("AWS_DEFAULT_REGION", DEFAULT_REGION)
    session = session or boto3.Session()
    # Timeouts and throttling retries are left to botocore.
    return session.client("ec2", region_name=region, config=Config(retries={"mode": "standard"}))
