"""
Concrete managed services. Importing this package registers them.
"""

from ybactl.services.platform import PlatformService
from ybactl.services.postgres import (
    PostgresConnection,
    PostgresService,
    resolve_postgres_connection,
)
from ybactl.services.prometheus import PrometheusService

__all__ = [
    "PlatformService",
    "PostgresConnection",
    "PostgresService",
    "PrometheusService",
    "resolve_postgres_connection",
]
