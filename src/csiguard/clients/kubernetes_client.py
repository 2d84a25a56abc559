"""Kubernetes client for the objects csiguard reads and writes."""

from typing import Any

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.client.models import V1CSIDriver, V1CSINode, V1Node

from csiguard.core.exceptions import KubernetesError
from csiguard.utils.logging import get_logger

logger = get_logger(__name__)

OPERATOR_GROUP = "operator.openshift.io"
OPERATOR_VERSION = "v1"
CLUSTER_CSI_DRIVER_PLURAL = "clustercsidrivers"


class KubernetesClient:
    """Kubernetes client wrapper."""

    def __init__(self, kubeconfig_path: str | None = None, context: str | None = None):
        """Initialize Kubernetes client.

        Args:
            kubeconfig_path: Path to kubeconfig file (optional)
            context: Kubernetes context to use (optional)
        """
        try:
            if kubeconfig_path:
                config.load_kube_config(config_file=kubeconfig_path, context=context)
            else:
                # Try to load from default location or in-cluster config
                try:
                    config.load_kube_config(context=context)
                except config.ConfigException:
                    config.load_incluster_config()

            self.core_v1 = client.CoreV1Api()
            self.storage_v1 = client.StorageV1Api()
            self.custom_objects = client.CustomObjectsApi()

            logger.debug("k8s_client_initialized", context=context)

        except Exception as e:
            logger.error("k8s_client_initialization_failed", error=str(e))
            raise KubernetesError("Failed to initialize Kubernetes client") from e

    def get_nodes(self) -> list[V1Node]:
        """Get all nodes in the cluster.

        Returns:
            List of V1Node objects

        Raises:
            KubernetesError: If nodes cannot be retrieved
        """
        try:
            logger.debug("getting_nodes")
            nodes = self.core_v1.list_node().items

            logger.info("nodes_retrieved", count=len(nodes))
            return nodes

        except ApiException as e:
            logger.error("get_nodes_failed", status=e.status, reason=e.reason)
            raise KubernetesError(f"Failed to get nodes: {e.reason}") from e

    def get_csi_driver(self, name: str) -> V1CSIDriver | None:
        """Get a CSIDriver object.

        Args:
            name: CSIDriver name

        Returns:
            V1CSIDriver object, or None if it does not exist

        Raises:
            KubernetesError: If the lookup fails
        """
        try:
            logger.debug("getting_csi_driver", name=name)
            return self.storage_v1.read_csi_driver(name=name)

        except ApiException as e:
            if e.status == 404:
                logger.debug("csi_driver_not_found", name=name)
                return None
            logger.error("get_csi_driver_failed", name=name, status=e.status, reason=e.reason)
            raise KubernetesError(f"Failed to get CSIDriver {name}: {e.reason}") from e

    def list_csi_nodes(self) -> list[V1CSINode]:
        """List CSINode objects.

        Returns:
            List of V1CSINode objects

        Raises:
            KubernetesError: If CSINodes cannot be retrieved
        """
        try:
            logger.debug("listing_csi_nodes")
            csi_nodes = self.storage_v1.list_csi_node().items

            logger.info("csi_nodes_retrieved", count=len(csi_nodes))
            return csi_nodes

        except ApiException as e:
            logger.error("list_csi_nodes_failed", status=e.status, reason=e.reason)
            raise KubernetesError(f"Failed to list CSINodes: {e.reason}") from e

    def get_cluster_csi_driver(self, name: str) -> dict[str, Any]:
        """Get a ClusterCSIDriver operator object.

        Args:
            name: ClusterCSIDriver name (same as the CSI driver name)

        Returns:
            ClusterCSIDriver object as a dictionary

        Raises:
            KubernetesError: If the object cannot be retrieved
        """
        try:
            logger.debug("getting_cluster_csi_driver", name=name)
            return self.custom_objects.get_cluster_custom_object(
                group=OPERATOR_GROUP,
                version=OPERATOR_VERSION,
                plural=CLUSTER_CSI_DRIVER_PLURAL,
                name=name,
            )

        except ApiException as e:
            logger.error(
                "get_cluster_csi_driver_failed", name=name, status=e.status, reason=e.reason
            )
            raise KubernetesError(f"Failed to get ClusterCSIDriver {name}: {e.reason}") from e

    def patch_cluster_csi_driver_status(
        self, name: str, status: dict[str, Any], resource_version: str | None = None
    ) -> None:
        """Patch the status of a ClusterCSIDriver operator object.

        When a resource version is given the patch only applies to that
        version of the object, and the API server rejects it with a
        conflict if another writer changed the object since it was read.

        Args:
            name: ClusterCSIDriver name
            status: Status fields to merge
            resource_version: Object version the status was read at

        Raises:
            KubernetesError: If the status cannot be patched
        """
        try:
            logger.debug(
                "patching_cluster_csi_driver_status",
                name=name,
                resource_version=resource_version,
            )
            body: dict[str, Any] = {"status": status}
            if resource_version is not None:
                body["metadata"] = {"resourceVersion": resource_version}
            self.custom_objects.patch_cluster_custom_object_status(
                group=OPERATOR_GROUP,
                version=OPERATOR_VERSION,
                plural=CLUSTER_CSI_DRIVER_PLURAL,
                name=name,
                body=body,
            )
            logger.info("cluster_csi_driver_status_patched", name=name)

        except ApiException as e:
            logger.error(
                "patch_cluster_csi_driver_status_failed",
                name=name,
                status=e.status,
                reason=e.reason,
            )
            raise KubernetesError(
                f"Failed to patch ClusterCSIDriver {name} status: {e.reason}"
            ) from e
