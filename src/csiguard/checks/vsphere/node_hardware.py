"""Node virtual hardware version check."""

from csiguard.core.models import CheckAction, CheckStatus, ClusterCheckResult
from csiguard.interfaces.check import Check, CheckContext
from csiguard.utils.logging import get_logger
from csiguard.utils.versions import parse_hardware_version

logger = get_logger(__name__)


class NodeHardwareVersionCheck(Check):
    """Check that every node VM runs a supported virtual hardware version."""

    @property
    def name(self) -> str:
        """Get check name."""
        return "node_hardware_version"

    @property
    def description(self) -> str:
        """Get check description."""
        return "Validates all node VMs meet the minimum virtual hardware version"

    async def execute(self, context: CheckContext) -> ClusterCheckResult:
        """Execute node hardware version check.

        Args:
            context: Check context with a live connection and cluster state

        Returns:
            ClusterCheckResult blocking upgrades when any node is too old
        """
        minimum = context.checks_config.min_hardware_version
        outdated = []

        try:
            nodes = await context.cluster_state.get_nodes()
            for node in nodes:
                hw_version = await context.connection.get_vm_hardware_version(node.name)
                if parse_hardware_version(hw_version) < minimum:
                    outdated.append(f"{node.name} ({hw_version})")
        except Exception as e:
            logger.error("node_hardware_version_check_failed", error=str(e))
            return ClusterCheckResult.make_api_error(e, check_name=self.name)

        if outdated:
            reason = (
                f"node VMs have hardware version older than vmx-{minimum}: {', '.join(outdated)}"
            )
            logger.warning("outdated_node_hardware_found", nodes=outdated, minimum=minimum)
            return ClusterCheckResult(
                error=ValueError(reason),
                action=CheckAction.BLOCK_UPGRADE,
                status=CheckStatus.NODE_HARDWARE_VERSION_TOO_OLD,
                reason=reason,
                check_name=self.name,
            )

        logger.debug("node_hardware_versions_supported", node_count=len(nodes))
        return ClusterCheckResult.make_pass(check_name=self.name)
