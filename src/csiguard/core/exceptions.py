"""Custom exceptions for csiguard."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from csiguard.core.models import ClusterCheckResult


class CsiGuardError(Exception):
    """Base exception for all csiguard errors."""


class ConfigurationError(CsiGuardError):
    """Configuration-related errors."""


class ClusterDegradedError(CsiGuardError):
    """A check failed while an operator-owned driver is already installed.

    The reconciliation framework maps this error into a Degraded condition
    and retries the sync with its own backoff.
    """

    def __init__(self, result: ClusterCheckResult):
        """Initialize degraded error.

        Args:
            result: Check result that caused the degradation
        """
        message = str(result.error) if result.error else result.reason
        super().__init__(message)
        self.result = result


class KubernetesError(CsiGuardError):
    """Kubernetes operation failed."""


class VSphereError(CsiGuardError):
    """vSphere operation failed."""
