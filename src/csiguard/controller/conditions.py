"""Idempotent reconciliation of the Available and Upgradeable conditions."""

from csiguard.core.models import (
    ClusterCheckResult,
    ConditionStatus,
    OperatorCondition,
    OperatorStatus,
    utcnow,
)

AVAILABLE = "Available"
UPGRADEABLE = "Upgradeable"


def apply_condition(status: OperatorStatus, condition: OperatorCondition) -> tuple[OperatorCondition, bool]:
    """Insert or update a condition, touching it only when it changed.

    A condition whose status and reason already match is left as it is.

    Args:
        status: Operator status to mutate
        condition: Desired condition

    Returns:
        Tuple of (stored condition, whether the status was modified)
    """
    existing = status.get_condition(condition.type)
    if existing is None:
        status.conditions.append(condition)
        return condition, True

    if existing.status == condition.status and existing.reason == condition.reason:
        return existing, False

    if existing.status != condition.status:
        existing.last_transition_time = utcnow()
    existing.status = condition.status
    existing.reason = condition.reason
    existing.message = condition.message
    return existing, True


def add_upgradeable_block_condition(
    result: ClusterCheckResult,
    controller_name: str,
    status: OperatorStatus,
    on_failure_status: ConditionStatus,
) -> tuple[OperatorCondition, bool]:
    """Reflect a check result in the controller's Upgradeable condition.

    Args:
        result: Aggregate check result
        controller_name: Prefix of the condition type
        status: Operator status to mutate
        on_failure_status: Condition status to use when upgrades are blocked

    Returns:
        Tuple of (stored condition, whether the status was modified)
    """
    condition = OperatorCondition(
        type=controller_name + UPGRADEABLE,
        status=on_failure_status if result.blocks_upgrade else ConditionStatus.TRUE,
        reason=result.status.value,
        message=result.reason,
    )
    return apply_condition(status, condition)


def set_available_condition(
    controller_name: str,
    status: OperatorStatus,
) -> tuple[OperatorCondition, bool]:
    """Mark the controller Available.

    Failures on an installed driver are reported through the sync error,
    never through this condition.
    """
    condition = OperatorCondition(
        type=controller_name + AVAILABLE,
        status=ConditionStatus.TRUE,
        reason="AsExpected",
    )
    return apply_condition(status, condition)
