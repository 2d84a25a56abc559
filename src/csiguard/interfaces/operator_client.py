"""Operator client interface for reading and writing operator status."""

from abc import ABC, abstractmethod

from csiguard.core.models import OperatorStatus


class OperatorClient(ABC):
    """Abstract interface for the operator status object.

    The status object is owned by the rest of the operator; csiguard only
    appends or updates its own condition types.
    """

    @abstractmethod
    async def get_operator_status(self) -> OperatorStatus:
        """Get the current operator status.

        Returns:
            Operator status

        Raises:
            OperatorClientError: If the status cannot be read
        """

    @abstractmethod
    async def update_operator_status(self, status: OperatorStatus) -> None:
        """Persist the operator status.

        Args:
            status: Status to write

        Raises:
            OperatorClientError: If the status cannot be written
        """
