"""Interface definitions for csiguard collaborators."""

from csiguard.interfaces.check import Check, CheckContext
from csiguard.interfaces.cluster_state_provider import (
    ClusterStateProvider,
    CSIDriverInfo,
    CSINodeInfo,
    NodeInfo,
)
from csiguard.interfaces.connection_provider import ConnectionProvider, VSphereConnection
from csiguard.interfaces.operand_controller import OperandController
from csiguard.interfaces.operator_client import OperatorClient

__all__ = [
    "Check",
    "CheckContext",
    "ClusterStateProvider",
    "CSIDriverInfo",
    "CSINodeInfo",
    "NodeInfo",
    "ConnectionProvider",
    "VSphereConnection",
    "OperandController",
    "OperatorClient",
]
