"""Connection provider building vCenter sessions from a factory."""

import asyncio
from collections.abc import Awaitable, Callable

from csiguard.core.models import ClusterCheckResult
from csiguard.interfaces.connection_provider import ConnectionProvider, VSphereConnection
from csiguard.interfaces.exceptions import ConnectionProviderError
from csiguard.utils.logging import get_logger

logger = get_logger(__name__)

ConnectionFactory = Callable[[], Awaitable[VSphereConnection]]


class FactoryConnectionProvider(ConnectionProvider):
    """ConnectionProvider delegating session creation to an async factory.

    Production and tests differ only in the factory they pass. Any failure
    of the factory, including a timeout, is reported as a connection
    failure result; nothing is retried here.
    """

    def __init__(self, factory: ConnectionFactory, timeout_seconds: int | None = None):
        """Initialize connection provider.

        Args:
            factory: Coroutine function returning an established connection
            timeout_seconds: Maximum time for one connection attempt
        """
        self.factory = factory
        self.timeout_seconds = timeout_seconds

    async def get_connection(
        self,
    ) -> tuple[VSphereConnection | None, ClusterCheckResult, bool]:
        """Attempt to connect to vCenter once.

        Returns:
            Tuple of (connection or None, connection result, False)
        """
        try:
            if self.timeout_seconds:
                connection = await asyncio.wait_for(self.factory(), timeout=self.timeout_seconds)
            else:
                connection = await self.factory()
        except asyncio.TimeoutError:
            error = ConnectionProviderError(
                f"connection to vCenter timed out after {self.timeout_seconds} seconds"
            )
            logger.error("vsphere_connection_timeout", timeout=self.timeout_seconds)
            return None, ClusterCheckResult.make_connection_failed(error), False
        except Exception as e:
            logger.error("vsphere_connection_failed", error=str(e))
            return None, ClusterCheckResult.make_connection_failed(e), False

        logger.debug("vsphere_connection_established")
        return connection, ClusterCheckResult.make_pass(check_name="vsphere_connection"), False
