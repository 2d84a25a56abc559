"""vSphere CSI driver compatibility checks."""

from csiguard.checks.vsphere.connection import ConnectionCheck
from csiguard.checks.vsphere.existing_driver import ExistingDriverCheck, read_driver_presence
from csiguard.checks.vsphere.node_hardware import NodeHardwareVersionCheck
from csiguard.checks.vsphere.platform_version import EsxiHostVersionCheck, VCenterVersionCheck

__all__ = [
    "ConnectionCheck",
    "EsxiHostVersionCheck",
    "ExistingDriverCheck",
    "NodeHardwareVersionCheck",
    "VCenterVersionCheck",
    "read_driver_presence",
]
