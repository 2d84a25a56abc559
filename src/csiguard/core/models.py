"""Core data models for csiguard."""

from datetime import datetime, timezone
from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class CheckAction(IntEnum):
    """Action required by a check result, ordered by severity."""

    PASS = 0
    # Upgrades are withheld, an existing installation keeps running.
    BLOCK_UPGRADE = 1
    # A fresh installation must not proceed.
    BLOCK_INSTALL = 2


class CheckStatus(str, Enum):
    """Named failure classes, also used as metric label values."""

    PASS = "pass"
    VSPHERE_CONNECTION_FAILED = "vsphere_connection_failed"
    DEPRECATED_VCENTER = "check_deprecated_vcenter"
    DEPRECATED_ESXI_VERSION = "check_deprecated_esxi_version"
    EXISTING_DRIVER_FOUND = "existing_driver_found"
    NODE_HARDWARE_VERSION_TOO_OLD = "node_hardware_version_too_old"
    VSPHERE_API_ERROR = "vsphere_api_error"


class ConditionStatus(str, Enum):
    """Operator condition status values."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class ClusterCheckResult(BaseModel):
    """Outcome of a single compatibility check or of the whole check set."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    error: Exception | None = None
    action: CheckAction = CheckAction.PASS
    status: CheckStatus = CheckStatus.PASS
    reason: str = ""
    check_name: str | None = None
    timestamp: datetime = Field(default_factory=utcnow)

    @classmethod
    def make_pass(cls, check_name: str | None = None) -> "ClusterCheckResult":
        """Build a passing result."""
        return cls(check_name=check_name)

    @classmethod
    def make_connection_failed(cls, error: Exception) -> "ClusterCheckResult":
        """Build the result for a vCenter connection that could not be established.

        Args:
            error: Error raised while connecting

        Returns:
            Upgrade-blocking result with status vsphere_connection_failed
        """
        return cls(
            error=error,
            action=CheckAction.BLOCK_UPGRADE,
            status=CheckStatus.VSPHERE_CONNECTION_FAILED,
            reason=f"Failed to connect to vSphere: {error}",
            check_name="vsphere_connection",
        )

    @classmethod
    def make_api_error(
        cls, error: Exception, check_name: str | None = None
    ) -> "ClusterCheckResult":
        """Build the result for a check that failed to talk to vSphere.

        Args:
            error: Error raised by the check
            check_name: Name of the failing check

        Returns:
            Upgrade-blocking result with status vsphere_api_error
        """
        return cls(
            error=error,
            action=CheckAction.BLOCK_UPGRADE,
            status=CheckStatus.VSPHERE_API_ERROR,
            reason=f"Failed to query vSphere: {error}",
            check_name=check_name,
        )

    @property
    def is_pass(self) -> bool:
        """Whether the result places no restriction on the driver."""
        return self.action == CheckAction.PASS

    @property
    def blocks_upgrade(self) -> bool:
        """Whether upgrades of the driver must be withheld."""
        return self.action == CheckAction.BLOCK_UPGRADE

    @property
    def blocks_install(self) -> bool:
        """Whether a fresh driver installation must not proceed."""
        return self.action == CheckAction.BLOCK_INSTALL

    def same_outcome(self, other: "ClusterCheckResult | None") -> bool:
        """Compare two results by status and reason only."""
        if other is None:
            return False
        return self.status == other.status and self.reason == other.reason


def aggregate_results(results: list[ClusterCheckResult]) -> ClusterCheckResult:
    """Reduce individual check results to the most severe one.

    Ties keep the first result that reached the highest severity.

    Args:
        results: Individual check results in evaluation order

    Returns:
        The worst result, or a passing result when nothing failed
    """
    worst = ClusterCheckResult.make_pass()
    for result in results:
        if result.action > worst.action:
            worst = result
    return worst


class DriverPresence(BaseModel):
    """Facts about CSI driver objects already present in the cluster."""

    driver_exists: bool = False
    driver_owned: bool = False
    foreign_csi_nodes: list[str] = Field(default_factory=list)

    @property
    def installed_by_operator(self) -> bool:
        """Whether the operator itself installed the driver."""
        return self.driver_exists and self.driver_owned

    @property
    def foreign_driver_found(self) -> bool:
        """Whether a driver not managed by the operator is present."""
        if self.driver_exists:
            return not self.driver_owned
        return bool(self.foreign_csi_nodes)


class OperatorCondition(BaseModel):
    """Operator status condition."""

    type: str
    status: ConditionStatus
    reason: str = ""
    message: str = ""
    last_transition_time: datetime = Field(default_factory=utcnow)


class OperatorStatus(BaseModel):
    """Mutable operator status shared with the rest of the operator."""

    conditions: list[OperatorCondition] = Field(default_factory=list)
    # Version the status was read at; sent back as a write precondition.
    resource_version: str | None = None

    def get_condition(self, condition_type: str) -> OperatorCondition | None:
        """Get a condition by type.

        Args:
            condition_type: Condition type to look up

        Returns:
            Matching condition if found, None otherwise
        """
        return next((c for c in self.conditions if c.type == condition_type), None)
