"""HTTP clients for the Contentful management API."""

from .base import (
    APIError,
    AuthenticationError,
    BaseClient,
    NotFoundError,
    RateLimitError,
    VersionMismatchError,
)
from .management import ManagementClient, extract_version

__all__ = [
    "ManagementClient",
    "BaseClient",
    "APIError",
    "AuthenticationError",
    "NotFoundError",
    "RateLimitError",
    "VersionMismatchError",
    "extract_version",
]
