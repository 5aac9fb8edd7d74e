# app/core/lookup/connection.py
"""
CONNECTION MODULE - One DynamoDB client per process, rebuilt when the
connection settings change.
"""

import logging
import threading
from typing import Any, Callable, Optional

import boto3

from app.core.schemas import LookupOptions

logger = logging.getLogger(__name__)


def build_dynamodb_client(options: LookupOptions):
    # Empty credentials fall back to boto3's default provider chain
    return boto3.client(
        "dynamodb",
        region_name=options.region,
        endpoint_url=options.endpoint or None,
        aws_access_key_id=options.access_key_id or None,
        aws_secret_access_key=options.secret_access_key or None,
    )


class ConnectionManager:
    """
    Owns the shared client and the connection settings it was built from.

    The compare-and-swap runs under a lock because lookups may come from
    several threads (FastAPI runs sync work in a thread pool). Callers keep
    the handle they got for the whole batch, so swapping the client never
    pulls it out from under a batch that is already running.
    """

    def __init__(self, client_factory: Callable[[LookupOptions], Any] = build_dynamodb_client):
        self.client_factory = client_factory
        self._lock = threading.Lock()
        self._client: Optional[Any] = None
        self._connection_key: Optional[tuple] = None

    def ensure_client(self, options: LookupOptions):
        key = options.connection_key()
        with self._lock:
            if self._client is None or self._connection_key != key:
                logger.debug(
                    f"Creating new DynamoDB client (region={options.region}, endpoint={options.endpoint})"
                )
                self._client = self.client_factory(options)
                self._connection_key = key
            return self._client

    def reset(self) -> None:
        with self._lock:
            self._client = None
            self._connection_key = None


# Shared by every lookup in this process
connection_manager = ConnectionManager()
