"""Configuration management for csiguard."""

from datetime import timedelta
from pathlib import Path
import yaml
from pydantic import BaseModel, Field, field_validator

from csiguard.core.exceptions import ConfigurationError


class ControllerConfig(BaseModel):
    """Controller configuration."""

    name: str = "VMwareVSphereController"


class DriverConfig(BaseModel):
    """CSI driver identity configuration."""

    name: str = "csi.vsphere.vmware.com"
    # Annotation the operator puts on the CSIDriver object it creates.
    ownership_annotation: str = "csi.openshift.io/managed"


class ChecksConfig(BaseModel):
    """Minimum platform requirements of the driver."""

    min_vcenter_version: str = "6.7.3"
    min_esxi_version: str = "6.7.3"
    min_hardware_version: int = 15
    check_timeout_seconds: int = 60

    @field_validator("min_vcenter_version", "min_esxi_version")
    @classmethod
    def validate_version(cls, value: str) -> str:
        """Validate that a version is dotted numeric (e.g. 6.7.3)."""
        parts = value.split(".")
        if not parts or not all(part.isdigit() for part in parts):
            raise ValueError(f"Invalid version: {value!r}")
        return value


class RecheckConfig(BaseModel):
    """Recheck interval configuration.

    A passing result is re-evaluated after ``interval_minutes``. Failures are
    re-evaluated sooner, starting at ``failure_initial_delay_seconds`` and
    growing by ``failure_backoff_factor`` up to the full interval.
    """

    interval_minutes: int = Field(default=60, gt=0)
    failure_initial_delay_seconds: int = Field(default=60, gt=0)
    failure_backoff_factor: float = Field(default=2.0, ge=1.0)

    @property
    def interval(self) -> timedelta:
        """Full recheck interval."""
        return timedelta(minutes=self.interval_minutes)

    @property
    def failure_initial_delay(self) -> timedelta:
        """First recheck delay after a failure."""
        return timedelta(seconds=self.failure_initial_delay_seconds)


class ConnectionConfig(BaseModel):
    """vCenter connection attempt configuration."""

    timeout_seconds: int | None = 30


class MetricsConfig(BaseModel):
    """Metrics configuration."""

    error_metric_name: str = "vsphere_csi_driver_error"


class KubernetesConfig(BaseModel):
    """Kubernetes access configuration."""

    kubeconfig_path: str | None = None
    context: str | None = None


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"
    output: str = "stdout"


class GuardConfig(BaseModel):
    """Main csiguard configuration."""

    controller: ControllerConfig = Field(default_factory=ControllerConfig)
    driver: DriverConfig = Field(default_factory=DriverConfig)
    checks: ChecksConfig = Field(default_factory=ChecksConfig)
    recheck: RecheckConfig = Field(default_factory=RecheckConfig)
    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
    kubernetes: KubernetesConfig = Field(default_factory=KubernetesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: str | Path) -> "GuardConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to configuration file

        Returns:
            GuardConfig instance

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        config_path = Path(path).expanduser()

        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with config_path.open() as f:
                data = yaml.safe_load(f)
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

        try:
            return cls(**(data or {}))
        except Exception as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
