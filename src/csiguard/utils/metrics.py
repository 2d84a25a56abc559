"""Prometheus metrics for csiguard."""

from enum import Enum

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from csiguard.core.models import CheckStatus
from csiguard.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_ERROR_METRIC_NAME = "vsphere_csi_driver_error"


class ErrorCondition(str, Enum):
    """Value of the ``condition`` label of the error metric."""

    INSTALL_BLOCKED = "install_blocked"
    UPGRADE_BLOCKED = "upgrade_blocked"
    UPGRADE_UNKNOWN = "upgrade_unknown"


class InstallErrorMetric:
    """Gauge exposing the reason the driver is blocked or restricted.

    At most one ``{condition, failure_reason}`` label set is 1 at a time.
    Each instance registers its gauge on its own CollectorRegistry unless
    one is injected, so tests never share state.
    """

    def __init__(
        self,
        registry: CollectorRegistry | None = None,
        name: str = DEFAULT_ERROR_METRIC_NAME,
    ):
        """Initialize the error metric.

        Args:
            registry: Prometheus registry to register on (new one if None)
            name: Metric name
        """
        self.registry = registry or CollectorRegistry()
        self.name = name
        self._gauge = Gauge(
            name,
            "vSphere driver installation error",
            ["condition", "failure_reason"],
            registry=self.registry,
        )

    def set_failure(self, condition: ErrorCondition, failure_reason: CheckStatus | str) -> None:
        """Record the current failure, clearing previously set label sets.

        Args:
            condition: Kind of restriction in effect
            failure_reason: Check status that caused it
        """
        reason = failure_reason.value if isinstance(failure_reason, CheckStatus) else failure_reason
        self._gauge.clear()
        self._gauge.labels(condition=condition.value, failure_reason=reason).set(1)
        logger.info("error_metric_set", condition=condition.value, failure_reason=reason)

    def reset(self) -> None:
        """Clear every label set."""
        self._gauge.clear()
        logger.debug("error_metric_reset")

    def value(self, condition: ErrorCondition | str, failure_reason: CheckStatus | str) -> float | None:
        """Get the current value of one label set.

        Args:
            condition: Condition label value
            failure_reason: Failure reason label value

        Returns:
            Gauge value, or None if the label set is not present
        """
        labels = {
            "condition": condition.value if isinstance(condition, ErrorCondition) else condition,
            "failure_reason": (
                failure_reason.value
                if isinstance(failure_reason, CheckStatus)
                else failure_reason
            ),
        }
        return self.registry.get_sample_value(self.name, labels)

    def expose(self) -> str:
        """Render the registry in the Prometheus text exposition format."""
        return generate_latest(self.registry).decode("utf-8")
