"""vSphere connection and connection provider interfaces."""

from abc import ABC, abstractmethod

from csiguard.core.models import ClusterCheckResult


class VSphereConnection(ABC):
    """Abstract interface for an established vCenter session.

    Only the reads needed by compatibility checks are exposed; how the
    session authenticates and talks to vCenter is the implementation's
    concern.
    """

    @abstractmethod
    async def get_vcenter_version(self) -> str:
        """Get the vCenter API version (e.g. "7.0.2").

        Raises:
            VSphereError: If the version cannot be read
        """

    @abstractmethod
    async def get_host_versions(self) -> dict[str, str]:
        """Get the ESXi version of every host, keyed by host name.

        Raises:
            VSphereError: If host versions cannot be read
        """

    @abstractmethod
    async def get_vm_hardware_version(self, node_name: str) -> str:
        """Get the virtual hardware version of a node's VM (e.g. "vmx-15").

        Args:
            node_name: Kubernetes node name

        Raises:
            VSphereError: If the VM cannot be found or read
        """

    async def close(self) -> None:
        """Release the session. Default implementation does nothing."""


class ConnectionProvider(ABC):
    """Abstract interface supplying a vCenter connection for one sync.

    Implementations never retry; recheck cadence belongs to the
    environment checker.
    """

    @abstractmethod
    async def get_connection(
        self,
    ) -> tuple[VSphereConnection | None, ClusterCheckResult, bool]:
        """Obtain a vCenter connection.

        Returns:
            Tuple of (connection or None, connection check result,
            whether the provider will retry on its own later)
        """
