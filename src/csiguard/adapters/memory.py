"""In-memory implementations of the csiguard collaborators.

Used by the CLI snapshot mode and by tests; production wires the Kubernetes
adapters and a real vCenter connection factory instead.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from csiguard.core.exceptions import ConfigurationError, VSphereError
from csiguard.core.models import OperatorStatus
from csiguard.interfaces.cluster_state_provider import (
    ClusterStateProvider,
    CSIDriverInfo,
    CSINodeInfo,
    NodeInfo,
)
from csiguard.interfaces.connection_provider import VSphereConnection
from csiguard.interfaces.operand_controller import OperandController
from csiguard.interfaces.operator_client import OperatorClient
from csiguard.utils.logging import get_logger

logger = get_logger(__name__)


class InMemoryClusterState(ClusterStateProvider):
    """Cluster snapshot held in memory; attributes may be changed between syncs."""

    def __init__(
        self,
        nodes: list[NodeInfo] | None = None,
        csi_driver: CSIDriverInfo | None = None,
        csi_nodes: list[CSINodeInfo] | None = None,
    ):
        self.nodes = nodes or []
        self.csi_driver = csi_driver
        self.csi_nodes = csi_nodes or []

    async def get_nodes(self) -> list[NodeInfo]:
        return list(self.nodes)

    async def get_csi_driver(self, name: str) -> CSIDriverInfo | None:
        if self.csi_driver is not None and self.csi_driver.name == name:
            return self.csi_driver
        return None

    async def list_csi_nodes(self) -> list[CSINodeInfo]:
        return list(self.csi_nodes)


class InMemoryOperatorClient(OperatorClient):
    """Operator status kept in memory, counting writes."""

    def __init__(self, status: OperatorStatus | None = None):
        self.status = status or OperatorStatus()
        self.update_count = 0

    async def get_operator_status(self) -> OperatorStatus:
        return self.status.model_copy(deep=True)

    async def update_operator_status(self, status: OperatorStatus) -> None:
        self.status = status.model_copy(deep=True)
        self.update_count += 1


class InMemoryOperandController(OperandController):
    """Operand controller that only records whether it runs."""

    def __init__(self) -> None:
        self._running = False
        self.start_count = 0

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        self._running = True
        self.start_count += 1

    async def stop(self) -> None:
        self._running = False


class StaticVSphereConnection(VSphereConnection):
    """vCenter connection answering from fixed values."""

    def __init__(
        self,
        vcenter_version: str = "7.0.2",
        host_versions: dict[str, str] | None = None,
        hardware_versions: dict[str, str] | None = None,
    ):
        """Initialize static connection.

        Args:
            vcenter_version: vCenter API version
            host_versions: ESXi version per host name
            hardware_versions: VM hardware version per node name
        """
        self.vcenter_version = vcenter_version
        self.host_versions = host_versions or {}
        self.hardware_versions = hardware_versions or {}
        self.closed = False

    async def get_vcenter_version(self) -> str:
        return self.vcenter_version

    async def get_host_versions(self) -> dict[str, str]:
        return dict(self.host_versions)

    async def get_vm_hardware_version(self, node_name: str) -> str:
        try:
            return self.hardware_versions[node_name]
        except KeyError:
            raise VSphereError(f"VM for node {node_name} not found") from None

    async def close(self) -> None:
        self.closed = True


class SnapshotNode(BaseModel):
    """Node entry of a cluster snapshot file."""

    name: str
    hardware_version: str = "vmx-15"


class SnapshotCSIDriver(BaseModel):
    """CSIDriver entry of a cluster snapshot file."""

    annotations: dict[str, str] = Field(default_factory=dict)


class SnapshotCSINode(BaseModel):
    """CSINode entry of a cluster snapshot file."""

    name: str
    drivers: list[str] = Field(default_factory=list)


class SnapshotVCenter(BaseModel):
    """vCenter section of a cluster snapshot file."""

    reachable: bool = True
    version: str = "7.0.2"
    hosts: dict[str, str] = Field(default_factory=dict)


class ClusterSnapshot(BaseModel):
    """Offline description of a cluster and its vSphere platform."""

    vcenter: SnapshotVCenter = Field(default_factory=SnapshotVCenter)
    nodes: list[SnapshotNode] = Field(default_factory=list)
    csi_driver: SnapshotCSIDriver | None = None
    csi_nodes: list[SnapshotCSINode] = Field(default_factory=list)
    operator_status: OperatorStatus = Field(default_factory=OperatorStatus)

    @classmethod
    def from_file(cls, path: str | Path) -> "ClusterSnapshot":
        """Load a snapshot from a YAML file.

        Raises:
            ConfigurationError: If the file cannot be loaded or parsed
        """
        snapshot_path = Path(path).expanduser()
        try:
            with snapshot_path.open() as f:
                data = yaml.safe_load(f)
            return cls(**(data or {}))
        except Exception as e:
            raise ConfigurationError(f"Invalid cluster snapshot {snapshot_path}: {e}") from e

    def cluster_state(self, driver_name: str) -> InMemoryClusterState:
        """Build the cluster state provider described by the snapshot."""
        csi_driver = None
        if self.csi_driver is not None:
            csi_driver = CSIDriverInfo(name=driver_name, annotations=self.csi_driver.annotations)
        return InMemoryClusterState(
            nodes=[NodeInfo(name=n.name) for n in self.nodes],
            csi_driver=csi_driver,
            csi_nodes=[CSINodeInfo(name=n.name, drivers=n.drivers) for n in self.csi_nodes],
        )

    async def connect(self) -> VSphereConnection:
        """Connection factory for FactoryConnectionProvider.

        Raises:
            VSphereError: If the snapshot marks vCenter unreachable
        """
        if not self.vcenter.reachable:
            raise VSphereError("vCenter is unreachable")
        return StaticVSphereConnection(
            vcenter_version=self.vcenter.version,
            host_versions=self.vcenter.hosts,
            hardware_versions={n.name: n.hardware_version for n in self.nodes},
        )
