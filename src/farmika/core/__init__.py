"""Core module - configuration and storage client."""

from farmika.core import client
from farmika.core.client import (
    AuthenticationError,
    RetryableError,
    StorageAPIError,
    rest_request,
    rest_request_with_retry,
    select_rows,
    update_rows,
)
from farmika.core.config import default_max_depth, settings

__all__ = [
    "client",
    "settings",
    "default_max_depth",
    "rest_request",
    "rest_request_with_retry",
    "select_rows",
    "update_rows",
    "StorageAPIError",
    "AuthenticationError",
    "RetryableError",
]
