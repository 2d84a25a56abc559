"""Kubernetes adapters implementing ClusterStateProvider and OperatorClient."""

from typing import Any

from csiguard.clients.kubernetes_client import KubernetesClient
from csiguard.core.models import ConditionStatus, OperatorCondition, OperatorStatus
from csiguard.interfaces.cluster_state_provider import (
    ClusterStateProvider,
    CSIDriverInfo,
    CSINodeInfo,
    NodeInfo,
)
from csiguard.interfaces.exceptions import ClusterStateProviderError, OperatorClientError
from csiguard.interfaces.operator_client import OperatorClient
from csiguard.utils.logging import get_logger

logger = get_logger(__name__)

_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class KubernetesAdapter(ClusterStateProvider):
    """Adapter wrapping KubernetesClient to implement ClusterStateProvider.

    This adapter normalizes Kubernetes API responses into clean dataclasses,
    hiding kubernetes Python client implementation details.
    """

    def __init__(self, kubeconfig_path: str | None = None, context: str | None = None):
        """Initialize Kubernetes adapter.

        Args:
            kubeconfig_path: Path to kubeconfig file (optional)
            context: Kubernetes context to use (optional)
        """
        try:
            self.client = KubernetesClient(kubeconfig_path=kubeconfig_path, context=context)
            logger.debug("k8s_adapter_initialized", context=context)
        except Exception as e:
            raise ClusterStateProviderError(f"Failed to initialize K8s adapter: {e}") from e

    async def get_nodes(self) -> list[NodeInfo]:
        """Get all nodes in the cluster.

        Returns:
            List of normalized node information

        Raises:
            ClusterStateProviderError: If nodes cannot be retrieved
        """
        try:
            nodes = self.client.get_nodes()
            return [
                NodeInfo(
                    name=node.metadata.name,
                    provider_id=node.spec.provider_id if node.spec else None,
                    labels=dict(node.metadata.labels or {}),
                )
                for node in nodes
            ]

        except Exception as e:
            logger.error("get_nodes_failed", error=str(e))
            raise ClusterStateProviderError(f"Failed to get nodes: {e}") from e

    async def get_csi_driver(self, name: str) -> CSIDriverInfo | None:
        """Get a CSIDriver object by name.

        Args:
            name: CSI driver name

        Returns:
            CSIDriverInfo if the object exists, None otherwise

        Raises:
            ClusterStateProviderError: If the lookup fails
        """
        try:
            driver = self.client.get_csi_driver(name)
            if driver is None:
                return None
            return CSIDriverInfo(
                name=driver.metadata.name,
                annotations=dict(driver.metadata.annotations or {}),
            )

        except Exception as e:
            logger.error("get_csi_driver_failed", name=name, error=str(e))
            raise ClusterStateProviderError(f"Failed to get CSIDriver {name}: {e}") from e

    async def list_csi_nodes(self) -> list[CSINodeInfo]:
        """List CSINode objects.

        Returns:
            List of normalized CSINode information

        Raises:
            ClusterStateProviderError: If CSINodes cannot be retrieved
        """
        try:
            csi_nodes = self.client.list_csi_nodes()
            return [
                CSINodeInfo(
                    name=csi_node.metadata.name,
                    drivers=[d.name for d in (csi_node.spec.drivers or [])],
                )
                for csi_node in csi_nodes
            ]

        except Exception as e:
            logger.error("list_csi_nodes_failed", error=str(e))
            raise ClusterStateProviderError(f"Failed to list CSINodes: {e}") from e


class ClusterCSIDriverAdapter(OperatorClient):
    """OperatorClient backed by the ClusterCSIDriver operator object."""

    def __init__(self, client: KubernetesClient, name: str):
        """Initialize ClusterCSIDriver adapter.

        Args:
            client: Kubernetes client
            name: ClusterCSIDriver object name
        """
        self.client = client
        self.name = name

    async def get_operator_status(self) -> OperatorStatus:
        """Read conditions from the ClusterCSIDriver status.

        Returns:
            Operator status

        Raises:
            OperatorClientError: If the status cannot be read
        """
        try:
            obj = self.client.get_cluster_csi_driver(self.name)
            raw_conditions = (obj.get("status") or {}).get("conditions") or []
            return OperatorStatus(
                conditions=[_condition_from_dict(c) for c in raw_conditions],
                resource_version=(obj.get("metadata") or {}).get("resourceVersion"),
            )

        except Exception as e:
            logger.error("get_operator_status_failed", name=self.name, error=str(e))
            raise OperatorClientError(f"Failed to read operator status: {e}") from e

    async def update_operator_status(self, status: OperatorStatus) -> None:
        """Write conditions to the ClusterCSIDriver status.

        The write is conditional on the resource version the status was read
        at, so a concurrent writer makes it fail instead of being overwritten.

        Args:
            status: Status to write

        Raises:
            OperatorClientError: If the status cannot be written
        """
        try:
            self.client.patch_cluster_csi_driver_status(
                self.name,
                {"conditions": [_condition_to_dict(c) for c in status.conditions]},
                resource_version=status.resource_version,
            )

        except Exception as e:
            logger.error("update_operator_status_failed", name=self.name, error=str(e))
            raise OperatorClientError(f"Failed to update operator status: {e}") from e


def _condition_from_dict(data: dict[str, Any]) -> OperatorCondition:
    fields: dict[str, Any] = {
        "type": data["type"],
        "status": ConditionStatus(data.get("status", "Unknown")),
        "reason": data.get("reason") or "",
        "message": data.get("message") or "",
    }
    if data.get("lastTransitionTime"):
        fields["last_transition_time"] = data["lastTransitionTime"]
    return OperatorCondition(**fields)


def _condition_to_dict(condition: OperatorCondition) -> dict[str, Any]:
    return {
        "type": condition.type,
        "status": condition.status.value,
        "reason": condition.reason,
        "message": condition.message,
        "lastTransitionTime": condition.last_transition_time.strftime(_TIME_FORMAT),
    }
