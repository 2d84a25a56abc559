"""Registry holding the ordered compatibility check set."""

from csiguard.interfaces.check import Check
from csiguard.utils.logging import get_logger

logger = get_logger(__name__)


class CheckRegistry:
    """Registry for compatibility check management.

    Checks are evaluated in registration order, so the connection check
    must be registered before any check that needs a connection.
    """

    def __init__(self) -> None:
        """Initialize check registry."""
        self._checks: list[Check] = []
        self._names: set[str] = set()
        logger.debug("check_registry_initialized")

    def register(self, check: Check) -> None:
        """Register a compatibility check.

        Args:
            check: Check to register
        """
        if check.name in self._names:
            logger.warning("check_already_registered", check_name=check.name)
            return

        self._checks.append(check)
        self._names.add(check.name)

        logger.debug("check_registered", check_name=check.name)

    def get_all_checks(self) -> list[Check]:
        """Get all registered checks in evaluation order.

        Returns:
            List of all registered checks
        """
        return self._checks.copy()

    def __len__(self) -> int:
        """Get number of registered checks."""
        return len(self._checks)


def build_default_registry() -> CheckRegistry:
    """Build the registry with the standard vSphere check set.

    Returns:
        Registry with connection, vCenter, ESXi, existing driver and node
        hardware checks, in that order
    """
    from csiguard.checks.vsphere import (
        ConnectionCheck,
        EsxiHostVersionCheck,
        ExistingDriverCheck,
        NodeHardwareVersionCheck,
        VCenterVersionCheck,
    )

    registry = CheckRegistry()
    registry.register(ConnectionCheck())
    registry.register(VCenterVersionCheck())
    registry.register(EsxiHostVersionCheck())
    registry.register(ExistingDriverCheck())
    registry.register(NodeHardwareVersionCheck())
    return registry
