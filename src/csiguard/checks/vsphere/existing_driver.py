"""Existing foreign CSI driver check."""

from csiguard.core.config import DriverConfig
from csiguard.core.models import CheckAction, CheckStatus, ClusterCheckResult, DriverPresence
from csiguard.interfaces.check import Check, CheckContext
from csiguard.interfaces.cluster_state_provider import ClusterStateProvider
from csiguard.utils.logging import get_logger

logger = get_logger(__name__)


async def read_driver_presence(
    cluster_state: ClusterStateProvider, driver: DriverConfig
) -> DriverPresence:
    """Read which vSphere CSI driver objects already exist in the cluster.

    CSINode registrations only count as foreign when there is no
    operator-owned CSIDriver object.

    Args:
        cluster_state: Cluster state provider
        driver: Driver identity configuration

    Returns:
        DriverPresence facts for the current cluster snapshot
    """
    csi_driver = await cluster_state.get_csi_driver(driver.name)
    driver_owned = bool(csi_driver and driver.ownership_annotation in csi_driver.annotations)

    foreign_nodes: list[str] = []
    if not driver_owned:
        csi_nodes = await cluster_state.list_csi_nodes()
        foreign_nodes = [n.name for n in csi_nodes if driver.name in n.drivers]

    return DriverPresence(
        driver_exists=csi_driver is not None,
        driver_owned=driver_owned,
        foreign_csi_nodes=foreign_nodes,
    )


class ExistingDriverCheck(Check):
    """Check that no vSphere CSI driver was installed outside the operator."""

    @property
    def name(self) -> str:
        """Get check name."""
        return "existing_driver"

    @property
    def description(self) -> str:
        """Get check description."""
        return "Validates no foreign vSphere CSI driver or CSINode registration exists"

    @property
    def requires_connection(self) -> bool:
        """Existing driver check only reads the cluster."""
        return False

    async def execute(self, context: CheckContext) -> ClusterCheckResult:
        """Execute existing driver check.

        Args:
            context: Check context with cluster state

        Returns:
            ClusterCheckResult blocking installation when a foreign driver exists
        """
        driver = context.driver_config

        try:
            presence = await read_driver_presence(context.cluster_state, driver)
        except Exception as e:
            logger.error("existing_driver_check_failed", error=str(e))
            return ClusterCheckResult.make_api_error(e, check_name=self.name)

        if not presence.foreign_driver_found:
            return ClusterCheckResult.make_pass(check_name=self.name)

        if presence.driver_exists:
            reason = f"found existing unsupported {driver.name} driver"
        else:
            reason = (
                f"found existing unsupported {driver.name} driver registered on nodes: "
                f"{', '.join(presence.foreign_csi_nodes)}"
            )

        logger.warning(
            "existing_driver_found",
            driver=driver.name,
            foreign_csi_nodes=presence.foreign_csi_nodes,
        )
        # Install blocks carry no error and never degrade the cluster.
        return ClusterCheckResult(
            action=CheckAction.BLOCK_INSTALL,
            status=CheckStatus.EXISTING_DRIVER_FOUND,
            reason=reason,
            check_name=self.name,
        )
