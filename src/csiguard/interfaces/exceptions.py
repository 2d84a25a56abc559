"""Exceptions for interface implementations."""


class InterfaceError(Exception):
    """Base exception for all interface-related errors."""


class ClusterStateProviderError(InterfaceError):
    """Exception for cluster state provider operations."""


class OperatorClientError(InterfaceError):
    """Exception for operator status read/write operations."""


class ConnectionProviderError(InterfaceError):
    """Exception for vSphere connection operations."""


class CheckExecutionError(InterfaceError):
    """Exception for compatibility check execution."""
