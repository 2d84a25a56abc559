"""vCenter connection check."""

from csiguard.core.exceptions import VSphereError
from csiguard.core.models import ClusterCheckResult
from csiguard.interfaces.check import Check, CheckContext
from csiguard.utils.logging import get_logger

logger = get_logger(__name__)


class ConnectionCheck(Check):
    """Check that a vCenter connection could be established.

    Every other platform check depends on the connection, so a failure here
    stops the check set.
    """

    @property
    def name(self) -> str:
        """Get check name."""
        return "vsphere_connection"

    @property
    def description(self) -> str:
        """Get check description."""
        return "Validates a connection to vCenter could be established"

    @property
    def requires_connection(self) -> bool:
        """Connection check runs without a connection."""
        return False

    @property
    def stops_evaluation(self) -> bool:
        """No later check is meaningful without a connection."""
        return True

    async def execute(self, context: CheckContext) -> ClusterCheckResult:
        """Execute connection check.

        Args:
            context: Check context with the connection attempt outcome

        Returns:
            The connection failure result, or a passing result
        """
        if context.connection is not None:
            return ClusterCheckResult.make_pass(check_name=self.name)

        if not context.connection_result.is_pass:
            return context.connection_result

        # Provider returned no connection but reported success.
        logger.warning("connection_missing_without_failure")
        return ClusterCheckResult.make_connection_failed(
            VSphereError("connection provider returned no connection")
        )
