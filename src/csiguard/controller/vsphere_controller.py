"""vSphere controller gating the CSI driver on platform compatibility."""

from enum import Enum

from csiguard.checks.environment_checker import EnvironmentChecker
from csiguard.checks.vsphere.existing_driver import read_driver_presence
from csiguard.controller.conditions import add_upgradeable_block_condition, set_available_condition
from csiguard.core.config import GuardConfig
from csiguard.core.exceptions import ClusterDegradedError
from csiguard.core.models import (
    CheckStatus,
    ClusterCheckResult,
    ConditionStatus,
    DriverPresence,
    OperatorStatus,
)
from csiguard.interfaces.check import CheckContext
from csiguard.interfaces.cluster_state_provider import ClusterStateProvider
from csiguard.interfaces.connection_provider import ConnectionProvider
from csiguard.interfaces.operand_controller import OperandController
from csiguard.interfaces.operator_client import OperatorClient
from csiguard.utils.logging import get_logger
from csiguard.utils.metrics import ErrorCondition, InstallErrorMetric

logger = get_logger(__name__)


class ClusterCheckStatus(str, Enum):
    """What a check result means for the cluster, given driver presence."""

    ALL_GOOD = "all_good"
    DEGRADE = "degrade"
    UPGRADE_UNKNOWN = "upgrade_unknown"
    UPGRADE_BLOCKED = "upgrade_blocked"
    INSTALL_BLOCKED = "install_blocked"


def classify_result(result: ClusterCheckResult, presence: DriverPresence) -> ClusterCheckStatus:
    """Map a check result onto a cluster status.

    A foreign driver only ever blocks installation. Every other failure
    degrades the cluster when the operator already installed the driver,
    and otherwise restricts upgrades.

    Args:
        result: Aggregate check result
        presence: Driver objects currently in the cluster

    Returns:
        Cluster check status
    """
    if result.is_pass:
        return ClusterCheckStatus.ALL_GOOD

    if result.blocks_install:
        return ClusterCheckStatus.INSTALL_BLOCKED

    if result.error is not None and presence.installed_by_operator:
        return ClusterCheckStatus.DEGRADE

    if result.status == CheckStatus.VSPHERE_CONNECTION_FAILED:
        return ClusterCheckStatus.UPGRADE_UNKNOWN

    return ClusterCheckStatus.UPGRADE_BLOCKED


# Upgradeable condition status and metric condition per restricting status.
_RESTRICTIONS = {
    ClusterCheckStatus.UPGRADE_UNKNOWN: (ConditionStatus.UNKNOWN, ErrorCondition.UPGRADE_UNKNOWN),
    ClusterCheckStatus.UPGRADE_BLOCKED: (ConditionStatus.FALSE, ErrorCondition.UPGRADE_BLOCKED),
    # A foreign driver blocks installation only, upgrades stay allowed.
    ClusterCheckStatus.INSTALL_BLOCKED: (ConditionStatus.TRUE, ErrorCondition.INSTALL_BLOCKED),
}


class VSphereController:
    """Reconciles vSphere compatibility into operator status and metrics.

    Each sync reads driver presence, obtains a vCenter connection, asks the
    environment checker for the (possibly cached) compatibility result and
    then either raises ClusterDegradedError or updates the Available and
    Upgradeable conditions, the error metric and the operand controller.
    The controller keeps no state of its own besides the checker's cache.
    Syncs must not run concurrently on one instance.
    """

    def __init__(
        self,
        config: GuardConfig,
        cluster_state: ClusterStateProvider,
        connection_provider: ConnectionProvider,
        operator_client: OperatorClient,
        operand: OperandController,
        checker: EnvironmentChecker,
        error_metric: InstallErrorMetric,
    ):
        """Initialize vSphere controller.

        Args:
            config: csiguard configuration
            cluster_state: Read-only cluster snapshot provider
            connection_provider: vCenter connection provider
            operator_client: Operator status client
            operand: Controller managing the driver workload
            checker: Environment checker (composite or skipping)
            error_metric: Error metric recorder
        """
        self.config = config
        self.name = config.controller.name
        self.cluster_state = cluster_state
        self.connection_provider = connection_provider
        self.operator_client = operator_client
        self.operand = operand
        self.checker = checker
        self.error_metric = error_metric
        logger.debug("vsphere_controller_initialized", controller=self.name)

    @property
    def operand_controller_started(self) -> bool:
        """Whether the operand controller is running."""
        return self.operand.running

    async def sync(self) -> None:
        """Run one reconciliation pass.

        Raises:
            ClusterDegradedError: If a check fails while an operator-owned
                driver is already installed
        """
        logger.info("sync_started", controller=self.name)

        presence = await read_driver_presence(self.cluster_state, self.config.driver)
        connection, connection_result, _ = await self.connection_provider.get_connection()

        try:
            context = CheckContext(
                cluster_state=self.cluster_state,
                connection=connection,
                connection_result=connection_result,
                checks_config=self.config.checks,
                driver_config=self.config.driver,
            )
            next_check_in, result, checked = await self.checker.check(context)
        finally:
            if connection is not None:
                await connection.close()

        cluster_status = classify_result(result, presence)
        logger.info(
            "sync_check_evaluated",
            controller=self.name,
            cluster_status=cluster_status.value,
            check_status=result.status.value,
            checked=checked,
            next_check_in_seconds=next_check_in.total_seconds(),
        )

        if cluster_status == ClusterCheckStatus.DEGRADE:
            await self._degrade(result)

        if not checked:
            logger.debug("sync_check_not_due", controller=self.name)
            return

        try:
            modified = await self._apply_result(result, cluster_status, presence)
        except Exception:
            # Recheck on the next sync so the fresh result is applied again.
            self.checker.invalidate()
            raise

        logger.info("sync_completed", controller=self.name, status_modified=modified)

    async def _apply_result(
        self,
        result: ClusterCheckResult,
        cluster_status: ClusterCheckStatus,
        presence: DriverPresence,
    ) -> bool:
        """Apply a fresh result to conditions, the error metric and the operand.

        Returns:
            Whether the operator status was modified
        """
        status = await self.operator_client.get_operator_status()
        modified = self._update_status(result, cluster_status, status)
        if modified:
            await self.operator_client.update_operator_status(status)

        if cluster_status == ClusterCheckStatus.ALL_GOOD:
            await self._start_operand()
        elif self.operand.running and not presence.installed_by_operator:
            logger.warning(
                "stopping_operand_controller",
                controller=self.name,
                cluster_status=cluster_status.value,
            )
            await self.operand.stop()

        return modified

    def _update_status(
        self,
        result: ClusterCheckResult,
        cluster_status: ClusterCheckStatus,
        status: OperatorStatus,
    ) -> bool:
        """Update conditions and the error metric for a fresh result.

        Returns:
            Whether the operator status was modified
        """
        _, available_modified = set_available_condition(self.name, status)

        if cluster_status == ClusterCheckStatus.ALL_GOOD:
            self.error_metric.reset()
            on_failure = ConditionStatus.TRUE
        else:
            on_failure, metric_condition = _RESTRICTIONS[cluster_status]
            self.error_metric.set_failure(metric_condition, result.status)

        _, upgradeable_modified = add_upgradeable_block_condition(
            result, self.name, status, on_failure
        )
        return available_modified or upgradeable_modified

    async def _degrade(self, result: ClusterCheckResult) -> None:
        """Keep the installed driver running and fail the sync.

        Raises:
            ClusterDegradedError: Always
        """
        status = await self.operator_client.get_operator_status()
        _, modified = set_available_condition(self.name, status)
        if modified:
            await self.operator_client.update_operator_status(status)

        await self._start_operand()

        logger.error(
            "cluster_degraded",
            controller=self.name,
            check_status=result.status.value,
            reason=result.reason,
        )
        raise ClusterDegradedError(result)

    async def _start_operand(self) -> None:
        """Start the operand controller unless it already runs."""
        if self.operand.running:
            return
        logger.info("starting_operand_controller", controller=self.name)
        await self.operand.start()
