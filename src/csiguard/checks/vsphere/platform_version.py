"""vCenter and ESXi version checks."""

from csiguard.core.models import CheckAction, CheckStatus, ClusterCheckResult
from csiguard.interfaces.check import Check, CheckContext
from csiguard.utils.logging import get_logger
from csiguard.utils.versions import is_version_older

logger = get_logger(__name__)


class VCenterVersionCheck(Check):
    """Check that vCenter is at or above the driver's minimum version."""

    @property
    def name(self) -> str:
        """Get check name."""
        return "vcenter_version"

    @property
    def description(self) -> str:
        """Get check description."""
        return "Validates the vCenter version is supported by the CSI driver"

    async def execute(self, context: CheckContext) -> ClusterCheckResult:
        """Execute vCenter version check.

        Args:
            context: Check context with a live connection

        Returns:
            ClusterCheckResult blocking upgrades on a deprecated vCenter
        """
        minimum = context.checks_config.min_vcenter_version

        try:
            version = await context.connection.get_vcenter_version()
            too_old = is_version_older(version, minimum)
        except Exception as e:
            logger.error("vcenter_version_check_failed", error=str(e))
            return ClusterCheckResult.make_api_error(e, check_name=self.name)

        if too_old:
            reason = f"found older vcenter version {version}, minimum required version is {minimum}"
            logger.warning("deprecated_vcenter_found", version=version, minimum=minimum)
            return ClusterCheckResult(
                error=ValueError(reason),
                action=CheckAction.BLOCK_UPGRADE,
                status=CheckStatus.DEPRECATED_VCENTER,
                reason=reason,
                check_name=self.name,
            )

        logger.debug("vcenter_version_supported", version=version)
        return ClusterCheckResult.make_pass(check_name=self.name)


class EsxiHostVersionCheck(Check):
    """Check that every ESXi host is at or above the driver's minimum version."""

    @property
    def name(self) -> str:
        """Get check name."""
        return "esxi_host_version"

    @property
    def description(self) -> str:
        """Get check description."""
        return "Validates all ESXi host versions are supported by the CSI driver"

    async def execute(self, context: CheckContext) -> ClusterCheckResult:
        """Execute ESXi host version check.

        Args:
            context: Check context with a live connection

        Returns:
            ClusterCheckResult blocking upgrades when any host is deprecated
        """
        minimum = context.checks_config.min_esxi_version

        try:
            host_versions = await context.connection.get_host_versions()
            deprecated = sorted(
                f"{host} ({version})"
                for host, version in host_versions.items()
                if is_version_older(version, minimum)
            )
        except Exception as e:
            logger.error("esxi_version_check_failed", error=str(e))
            return ClusterCheckResult.make_api_error(e, check_name=self.name)

        if deprecated:
            reason = (
                f"found ESXi hosts older than minimum version {minimum}: {', '.join(deprecated)}"
            )
            logger.warning("deprecated_esxi_hosts_found", hosts=deprecated, minimum=minimum)
            return ClusterCheckResult(
                error=ValueError(reason),
                action=CheckAction.BLOCK_UPGRADE,
                status=CheckStatus.DEPRECATED_ESXI_VERSION,
                reason=reason,
                check_name=self.name,
            )

        return ClusterCheckResult.make_pass(check_name=self.name)
