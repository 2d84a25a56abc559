"""Adapter implementations for external services."""

from csiguard.adapters.connection_provider import FactoryConnectionProvider
from csiguard.adapters.k8s_adapter import ClusterCSIDriverAdapter, KubernetesAdapter
from csiguard.adapters.memory import (
    ClusterSnapshot,
    InMemoryClusterState,
    InMemoryOperandController,
    InMemoryOperatorClient,
    StaticVSphereConnection,
)

__all__ = [
    "ClusterCSIDriverAdapter",
    "ClusterSnapshot",
    "FactoryConnectionProvider",
    "InMemoryClusterState",
    "InMemoryOperandController",
    "InMemoryOperatorClient",
    "KubernetesAdapter",
    "StaticVSphereConnection",
]
