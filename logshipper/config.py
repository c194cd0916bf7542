import os
from dataclasses import dataclass
from typing import Optional

import boto3
from botocore.config import Config


@dataclass(frozen=True)
class Settings:
    region: Optional[str]
    log_group: Optional[str]
    log_stream: Optional[str]
    queue_size: int = 1000
    drain_timeout: float = 5.0

    @classmethod
    def from_env(cls) -> "Settings":
        # group/stream/region are checked by CloudWatch itself, not here
        return cls(
            region=os.getenv("REGION") or os.getenv("AWS_REGION"),
            log_group=os.getenv("LOG_GROUP_NAME"),
            log_stream=os.getenv("LOG_STREAM_NAME"),
            queue_size=int(os.getenv("LOG_QUEUE_SIZE", "1000")),
            drain_timeout=float(os.getenv("LOG_DRAIN_TIMEOUT", "5")),
        )


def make_logs_client(settings: Settings):
    return boto3.client(
        "logs",
        region_name=settings.region,
        config=Config(retries={"max_attempts": 5}),
    )
