"""Compatibility check interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from csiguard.core.config import ChecksConfig, DriverConfig
from csiguard.core.models import ClusterCheckResult
from csiguard.interfaces.cluster_state_provider import ClusterStateProvider
from csiguard.interfaces.connection_provider import VSphereConnection


@dataclass
class CheckContext:
    """Context passed to compatibility checks containing dependencies."""

    cluster_state: ClusterStateProvider
    connection: VSphereConnection | None
    connection_result: ClusterCheckResult
    checks_config: ChecksConfig = field(default_factory=ChecksConfig)
    driver_config: DriverConfig = field(default_factory=DriverConfig)


class Check(ABC):
    """Abstract interface for compatibility checks.

    Each check validates one requirement of the driver, reads the platform
    or the cluster through the context and never raises: faults are
    reported through the returned ClusterCheckResult.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the check name for logging/reporting."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Get a description of what this check validates."""

    @abstractmethod
    async def execute(self, context: CheckContext) -> ClusterCheckResult:
        """Execute the check.

        Args:
            context: Check context with provider dependencies

        Returns:
            ClusterCheckResult describing the outcome
        """

    @property
    def requires_connection(self) -> bool:
        """Whether the check needs a live vCenter connection.

        Returns:
            True if the check cannot run without a connection (default: True)
        """
        return True

    @property
    def stops_evaluation(self) -> bool:
        """Whether a failure of this check makes later checks meaningless.

        Returns:
            True if the check set must stop on failure (default: False)
        """
        return False

    @property
    def timeout_seconds(self) -> int | None:
        """Maximum execution time for this check.

        Returns:
            Timeout in seconds, None to use the configured default
        """
        return None
