"""
Region resolution utilities for e2e tests.

The deployed stack lives in one region; every client the smoke test creates
must talk to that region. Resolution order is: explicit region from the CLI
or config file, then whatever boto3's default chain finds, then a fallback.
"""

import logging
from typing import Optional

import boto3

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"


def resolve_region(
    explicit_region: Optional[str] = None,
    session: Optional[boto3.Session] = None,
    default_region: str = DEFAULT_REGION,
) -> str:
    """
    Determine the region to use for boto3 clients.

    Args:
        explicit_region: Region given on the command line or in the config file
        session: Optional boto3 session whose configured region is used next
        default_region: Region to use when nothing else is configured

    Returns:
        The region name to use for boto3 clients
    """
    if explicit_region:
        return explicit_region

    if session is None:
        session = boto3.Session()

    if session.region_name:
        logger.info(f"Using region '{session.region_name}' from the AWS configuration")
        return session.region_name

    logger.info(f"No region configured, using default region '{default_region}'")
    return default_region


def create_boto3_clients(explicit_region: Optional[str] = None):
    """
    Create the CloudFormation and Lambda clients the smoke test needs.

    Returns:
        Tuple of (session, cloudformation_client, lambda_client, region)
    """
    # Create session using boto3's default credential resolution
    session = boto3.Session()
    region = resolve_region(explicit_region, session)

    cloudformation_client = session.client("cloudformation", region_name=region)
    lambda_client = session.client("lambda", region_name=region)

    return session, cloudformation_client, lambda_client, region
