from dataclasses import dataclass
from typing import Any

import boto3
from botocore.config import Config

from .config import Settings


@dataclass
class AwsClients:
    s3: Any
    polly: Any
    transcribe: Any
    bedrock: Any


def _client(service: str, region: str):
    # Transport-level retries only; nothing above the SDK retries
    return boto3.client(
        service,
        config=Config(region_name=region, retries={"max_attempts": 3, "mode": "standard"}),
    )


def build_clients(settings: Settings) -> AwsClients:
    """Create each SDK client once per process; callers pass them down."""
    # S3 presigned URLs need the regional endpoint and SigV4
    s3 = boto3.client(
        "s3",
        config=Config(region_name=settings.region, signature_version="s3v4",
                      retries={"max_attempts": 3, "mode": "standard"}),
    )
    return AwsClients(
        s3=s3,
        polly=_client("polly", settings.region),
        transcribe=_client("transcribe", settings.region),
        bedrock=_client("bedrock-runtime", settings.region),
    )
