"""Unit tests for configuration management."""

from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from csiguard.core.config import ChecksConfig, GuardConfig, RecheckConfig
from csiguard.core.exceptions import ConfigurationError


class TestGuardConfigDefaults:
    """Tests for default configuration values."""

    def test_defaults(self) -> None:
        """Test defaults describe the vSphere CSI driver requirements."""
        config = GuardConfig()

        assert config.controller.name == "VMwareVSphereController"
        assert config.driver.name == "csi.vsphere.vmware.com"
        assert config.driver.ownership_annotation == "csi.openshift.io/managed"
        assert config.checks.min_vcenter_version == "6.7.3"
        assert config.checks.min_esxi_version == "6.7.3"
        assert config.checks.min_hardware_version == 15
        assert config.recheck.interval == timedelta(minutes=60)
        assert config.metrics.error_metric_name == "vsphere_csi_driver_error"


class TestGuardConfigFromFile:
    """Tests for loading configuration from YAML."""

    def test_from_file(self, tmp_path: Path) -> None:
        """Test values from file override defaults."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            """
controller:
  name: TestController
checks:
  min_vcenter_version: "7.0.0"
recheck:
  interval_minutes: 10
"""
        )

        config = GuardConfig.from_file(config_file)

        assert config.controller.name == "TestController"
        assert config.checks.min_vcenter_version == "7.0.0"
        assert config.checks.min_esxi_version == "6.7.3"
        assert config.recheck.interval == timedelta(minutes=10)

    def test_from_empty_file(self, tmp_path: Path) -> None:
        """Test an empty file yields the defaults."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        assert GuardConfig.from_file(config_file) == GuardConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test missing file raises ConfigurationError."""
        with pytest.raises(ConfigurationError, match="not found"):
            GuardConfig.from_file(tmp_path / "missing.yaml")

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        """Test unparsable YAML raises ConfigurationError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("checks: [unclosed")

        with pytest.raises(ConfigurationError, match="Failed to load configuration"):
            GuardConfig.from_file(config_file)

    def test_invalid_values(self, tmp_path: Path) -> None:
        """Test invalid values raise ConfigurationError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("recheck:\n  interval_minutes: 0\n")

        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            GuardConfig.from_file(config_file)


class TestChecksConfig:
    """Tests for version validation."""

    @pytest.mark.parametrize("version", ["6.7.3", "7.0", "8"])
    def test_valid_versions(self, version: str) -> None:
        """Test dotted numeric versions are accepted."""
        assert ChecksConfig(min_vcenter_version=version).min_vcenter_version == version

    @pytest.mark.parametrize("version", ["", "7.x", "latest", "6..7"])
    def test_invalid_versions(self, version: str) -> None:
        """Test non-numeric versions are rejected."""
        with pytest.raises(ValidationError):
            ChecksConfig(min_esxi_version=version)


class TestRecheckConfig:
    """Tests for recheck interval settings."""

    def test_failure_initial_delay(self) -> None:
        """Test the failure delay is exposed as a timedelta."""
        recheck = RecheckConfig(failure_initial_delay_seconds=30)

        assert recheck.failure_initial_delay == timedelta(seconds=30)

    def test_backoff_factor_must_not_shrink(self) -> None:
        """Test a backoff factor below one is rejected."""
        with pytest.raises(ValidationError):
            RecheckConfig(failure_backoff_factor=0.5)
