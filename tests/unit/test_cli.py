"""Unit tests for csiguard CLI commands.

This module tests the check, status and validate commands. The check
command runs a real sync against snapshot files, the status command reads
a mocked Kubernetes client. Logging setup is patched so the global
structlog configuration is not bound to the runner's streams.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from csiguard import __version__
from csiguard.cli.main import cli
from csiguard.core.exceptions import KubernetesError


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep CLI invocations from reconfiguring structlog."""
    with patch("csiguard.utils.logging.setup_logging") as mock_setup:
        yield mock_setup


def write_snapshot(tmp_path: Path, content: str) -> Path:
    snapshot = tmp_path / "snapshot.yaml"
    snapshot.write_text(content)
    return snapshot


HEALTHY_SNAPSHOT = """
vcenter:
  version: "7.0.2"
  hosts:
    esxi-1: "7.0.2"
nodes:
  - name: node-1
    hardware_version: vmx-15
"""


class TestCliBasics:
    """Tests for top-level CLI options."""

    def test_version(self, cli_runner: CliRunner) -> None:
        """Test --version prints the package version."""
        result = cli_runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self, cli_runner: CliRunner) -> None:
        """Test --help lists the commands."""
        result = cli_runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "check" in result.output
        assert "status" in result.output
        assert "validate" in result.output


class TestCheckCommand:
    """Tests for the check command."""

    def test_healthy_cluster(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """Test a healthy snapshot starts the operand."""
        snapshot = write_snapshot(tmp_path, HEALTHY_SNAPSHOT)

        result = cli_runner.invoke(cli, ["check", "--snapshot", str(snapshot)])

        assert result.exit_code == 0, result.output
        assert "Operand controller started: True" in result.output
        assert "Sync completed" in result.output

    def test_unreachable_vcenter(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """Test an unreachable vCenter without a driver reports the metric."""
        snapshot = write_snapshot(tmp_path, "vcenter:\n  reachable: false\n")

        result = cli_runner.invoke(cli, ["check", "--snapshot", str(snapshot)])

        assert result.exit_code == 0, result.output
        assert "Operand controller started: False" in result.output
        assert 'failure_reason="vsphere_connection_failed"' in result.output

    def test_unreachable_vcenter_with_installed_driver(
        self, cli_runner: CliRunner, tmp_path: Path
    ) -> None:
        """Test an unreachable vCenter with an owned driver exits degraded."""
        snapshot = write_snapshot(
            tmp_path,
            """
vcenter:
  reachable: false
csi_driver:
  annotations:
    csi.openshift.io/managed: "true"
""",
        )

        result = cli_runner.invoke(cli, ["check", "--snapshot", str(snapshot)])

        assert result.exit_code == 1
        assert "Cluster degraded" in result.output
        assert "Operand controller started: True" in result.output

    def test_no_show_metrics(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """Test the metric exposition can be suppressed."""
        snapshot = write_snapshot(tmp_path, "vcenter:\n  version: \"6.5.0\"\n")

        result = cli_runner.invoke(
            cli, ["check", "--snapshot", str(snapshot), "--no-show-metrics"]
        )

        assert result.exit_code == 0, result.output
        assert "vsphere_csi_driver_error" not in result.output

    def test_invalid_snapshot(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """Test an invalid snapshot exits with a configuration error."""
        snapshot = write_snapshot(tmp_path, "nodes: not-a-list\n")

        result = cli_runner.invoke(cli, ["check", "--snapshot", str(snapshot)])

        assert result.exit_code == 2
        assert "Invalid cluster snapshot" in result.output

    def test_missing_snapshot_option(self, cli_runner: CliRunner) -> None:
        """Test --snapshot is required."""
        result = cli_runner.invoke(cli, ["check"])

        assert result.exit_code != 0
        assert "--snapshot" in result.output


@pytest.fixture
def mock_k8s_client():
    """Patch the Kubernetes client used by the status command."""
    with patch("csiguard.adapters.k8s_adapter.KubernetesClient") as mock_client_cls:
        client = mock_client_cls.return_value
        driver = MagicMock()
        driver.metadata.name = "csi.vsphere.vmware.com"
        driver.metadata.annotations = {"csi.openshift.io/managed": "true"}
        client.get_csi_driver.return_value = driver
        client.list_csi_nodes.return_value = []
        client.get_cluster_csi_driver.return_value = {
            "metadata": {"resourceVersion": "12"},
            "status": {
                "conditions": [
                    {
                        "type": "VMwareVSphereControllerAvailable",
                        "status": "True",
                        "reason": "AsExpected",
                    },
                    {
                        "type": "OtherControllerDegraded",
                        "status": "True",
                        "reason": "OtherReason",
                    },
                ]
            },
        }
        yield mock_client_cls


class TestStatusCommand:
    """Tests for the status command."""

    def test_status_reports_presence_and_conditions(
        self, cli_runner: CliRunner, mock_k8s_client: MagicMock
    ) -> None:
        """Test the live cluster driver presence and controller conditions are shown."""
        result = cli_runner.invoke(cli, ["status"])

        assert result.exit_code == 0, result.output
        assert "Installed by operator: True" in result.output
        assert "Foreign driver found: False" in result.output
        assert "AsExpected" in result.output
        assert "OtherReason" not in result.output
        mock_k8s_client.return_value.get_cluster_csi_driver.assert_called_once_with(
            "csi.vsphere.vmware.com"
        )

    def test_status_uses_kubernetes_config(
        self, cli_runner: CliRunner, mock_k8s_client: MagicMock, tmp_path: Path
    ) -> None:
        """Test the kubeconfig and context come from the configuration file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "kubernetes:\n  kubeconfig_path: /etc/csiguard/kubeconfig\n  context: admin\n"
        )

        result = cli_runner.invoke(cli, ["--config", str(config_file), "status"])

        assert result.exit_code == 0, result.output
        mock_k8s_client.assert_called_once_with(
            kubeconfig_path="/etc/csiguard/kubeconfig", context="admin"
        )

    def test_status_foreign_csi_nodes(
        self, cli_runner: CliRunner, mock_k8s_client: MagicMock
    ) -> None:
        """Test CSINode registrations without a CSIDriver are listed."""
        client = mock_k8s_client.return_value
        client.get_csi_driver.return_value = None
        csi_node = MagicMock()
        csi_node.metadata.name = "node-1"
        driver_entry = MagicMock()
        driver_entry.name = "csi.vsphere.vmware.com"
        csi_node.spec.drivers = [driver_entry]
        client.list_csi_nodes.return_value = [csi_node]

        result = cli_runner.invoke(cli, ["status"])

        assert result.exit_code == 0, result.output
        assert "Foreign driver found: True" in result.output
        assert "Foreign CSINode registrations: node-1" in result.output

    def test_status_cluster_unreachable(
        self, cli_runner: CliRunner, mock_k8s_client: MagicMock
    ) -> None:
        """Test a Kubernetes client failure exits with an error."""
        mock_k8s_client.side_effect = KubernetesError("Failed to initialize Kubernetes client")

        result = cli_runner.invoke(cli, ["status"])

        assert result.exit_code == 1
        assert "Failed to read cluster" in result.output

class TestValidateCommand:
    """Tests for the validate command."""

    def test_validate_defaults(self, cli_runner: CliRunner) -> None:
        """Test validating without a file reports the defaults."""
        result = cli_runner.invoke(cli, ["validate"])

        assert result.exit_code == 0
        assert "Configuration is valid" in result.output
        assert "Minimum vCenter version: 6.7.3" in result.output

    def test_validate_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """Test validating a configuration file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("checks:\n  min_hardware_version: 17\n")

        result = cli_runner.invoke(cli, ["--config", str(config_file), "validate"])

        assert result.exit_code == 0
        assert "Minimum hardware version: vmx-17" in result.output

    def test_validate_invalid_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """Test an invalid configuration file exits with an error."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("recheck:\n  interval_minutes: -1\n")

        result = cli_runner.invoke(cli, ["--config", str(config_file), "validate"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
