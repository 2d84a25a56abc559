"""Cluster state provider interface for read-only Kubernetes facts."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class NodeInfo:
    """Normalized node information."""

    name: str
    provider_id: str | None = None
    labels: dict[str, str] = field(default_factory=dict)


@dataclass
class CSIDriverInfo:
    """Normalized CSIDriver object information."""

    name: str
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass
class CSINodeInfo:
    """Normalized CSINode object information."""

    name: str
    drivers: list[str] = field(default_factory=list)


class ClusterStateProvider(ABC):
    """Abstract interface for the cluster snapshot read by every sync.

    All methods return normalized data structures (dataclasses) rather than
    native Kubernetes API objects.
    """

    @abstractmethod
    async def get_nodes(self) -> list[NodeInfo]:
        """Get all nodes in the cluster.

        Returns:
            List of normalized node information

        Raises:
            ClusterStateProviderError: If nodes cannot be retrieved
        """

    @abstractmethod
    async def get_csi_driver(self, name: str) -> CSIDriverInfo | None:
        """Get a CSIDriver object by name.

        Args:
            name: CSI driver name (e.g. "csi.vsphere.vmware.com")

        Returns:
            CSIDriverInfo if the object exists, None otherwise

        Raises:
            ClusterStateProviderError: If the lookup fails
        """

    @abstractmethod
    async def list_csi_nodes(self) -> list[CSINodeInfo]:
        """List CSINode objects.

        Returns:
            List of normalized CSINode information

        Raises:
            ClusterStateProviderError: If CSINodes cannot be retrieved
        """
