"""Pytest configuration and shared fixtures."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from csiguard.adapters.connection_provider import FactoryConnectionProvider
from csiguard.adapters.memory import (
    InMemoryClusterState,
    InMemoryOperandController,
    InMemoryOperatorClient,
    StaticVSphereConnection,
)
from csiguard.checks.environment_checker import (
    CompositeEnvironmentChecker,
    build_environment_checker,
)
from csiguard.controller.vsphere_controller import VSphereController
from csiguard.core.config import GuardConfig
from csiguard.core.models import ClusterCheckResult
from csiguard.interfaces.check import Check, CheckContext
from csiguard.interfaces.cluster_state_provider import CSIDriverInfo, NodeInfo
from csiguard.utils.metrics import InstallErrorMetric

TEST_CONTROLLER_NAME = "VMwareVSphereController"
DRIVER_NAME = "csi.vsphere.vmware.com"
OWNERSHIP_ANNOTATION = "csi.openshift.io/managed"


class FakeClock:
    """Manually advanced clock for recheck interval tests."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class FailingConnectionFactory:
    """Connection factory that always fails, counting attempts."""

    def __init__(self, message: str = "connection to vcenter failed"):
        self.message = message
        self.attempts = 0

    async def __call__(self) -> StaticVSphereConnection:
        self.attempts += 1
        raise ConnectionError(self.message)


class StubCheck(Check):
    """Check returning a fixed result, counting executions."""

    def __init__(
        self,
        check_name: str,
        result: ClusterCheckResult | None = None,
        requires_connection: bool = True,
        stops_evaluation: bool = False,
        timeout: int | None = None,
        delay: float = 0,
        error: Exception | None = None,
    ):
        self._name = check_name
        self.result = result or ClusterCheckResult.make_pass(check_name=check_name)
        self._requires_connection = requires_connection
        self._stops_evaluation = stops_evaluation
        self._timeout = timeout
        self.delay = delay
        self.error = error
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return f"Stub check {self._name}"

    @property
    def requires_connection(self) -> bool:
        return self._requires_connection

    @property
    def stops_evaluation(self) -> bool:
        return self._stops_evaluation

    @property
    def timeout_seconds(self) -> int | None:
        return self._timeout

    async def execute(self, context: CheckContext) -> ClusterCheckResult:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


def owned_csi_driver() -> CSIDriverInfo:
    """CSIDriver created by the operator."""
    return CSIDriverInfo(name=DRIVER_NAME, annotations={OWNERSHIP_ANNOTATION: "true"})


def foreign_csi_driver() -> CSIDriverInfo:
    """CSIDriver installed outside the operator."""
    return CSIDriverInfo(name=DRIVER_NAME, annotations={})


@pytest.fixture
def guard_config() -> GuardConfig:
    """Provide a default configuration."""
    return GuardConfig()


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a manually advanced clock."""
    return FakeClock()


@pytest.fixture
def cluster_state() -> InMemoryClusterState:
    """Provide a two-node cluster without any CSI driver objects."""
    return InMemoryClusterState(nodes=[NodeInfo(name="node-1"), NodeInfo(name="node-2")])


@pytest.fixture
def vsphere_connection() -> StaticVSphereConnection:
    """Provide a healthy vCenter connection for the two-node cluster."""
    return StaticVSphereConnection(
        vcenter_version="7.0.2",
        host_versions={"esxi-1": "7.0.2"},
        hardware_versions={"node-1": "vmx-15", "node-2": "vmx-15"},
    )


@pytest.fixture
def check_context(
    cluster_state: InMemoryClusterState,
    vsphere_connection: StaticVSphereConnection,
    guard_config: GuardConfig,
) -> CheckContext:
    """Provide a check context with a live connection."""
    return CheckContext(
        cluster_state=cluster_state,
        connection=vsphere_connection,
        connection_result=ClusterCheckResult.make_pass(),
        checks_config=guard_config.checks,
        driver_config=guard_config.driver,
    )


@pytest.fixture
def operator_client() -> InMemoryOperatorClient:
    """Provide an empty in-memory operator status."""
    return InMemoryOperatorClient()


@pytest.fixture
def operand() -> InMemoryOperandController:
    """Provide an operand controller that is not running."""
    return InMemoryOperandController()


@pytest.fixture
def error_metric() -> InstallErrorMetric:
    """Provide an error metric on an isolated registry."""
    return InstallErrorMetric()


@pytest.fixture
def make_controller(
    guard_config: GuardConfig,
    cluster_state: InMemoryClusterState,
    vsphere_connection: StaticVSphereConnection,
    operator_client: InMemoryOperatorClient,
    operand: InMemoryOperandController,
    error_metric: InstallErrorMetric,
    fake_clock: FakeClock,
):
    """Provide a factory building a controller around the shared fixtures."""

    def _make(
        connection_factory: Any = None,
        checker: Any = None,
    ) -> VSphereController:
        if connection_factory is None:

            async def connection_factory() -> StaticVSphereConnection:
                return vsphere_connection

        if checker is None:
            checker = build_environment_checker(guard_config, clock=fake_clock)

        return VSphereController(
            config=guard_config,
            cluster_state=cluster_state,
            connection_provider=FactoryConnectionProvider(connection_factory),
            operator_client=operator_client,
            operand=operand,
            checker=checker,
            error_metric=error_metric,
        )

    return _make


@pytest.fixture
def composite_checker(guard_config: GuardConfig, fake_clock: FakeClock) -> CompositeEnvironmentChecker:
    """Provide the standard composite checker driven by the fake clock."""
    return build_environment_checker(guard_config, clock=fake_clock)


def pytest_configure(config: Any) -> None:
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Tests requiring a real Kubernetes cluster")
