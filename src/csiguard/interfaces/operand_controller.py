"""Operand controller interface."""

from abc import ABC, abstractmethod


class OperandController(ABC):
    """Abstract interface for the controller managing the driver workload.

    The sync controller only decides whether the operand controller should
    run; deploying the driver pods is the implementation's concern.
    """

    @property
    @abstractmethod
    def running(self) -> bool:
        """Whether the operand controller is currently running."""

    @abstractmethod
    async def start(self) -> None:
        """Start managing the driver workload."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop managing the driver workload."""
