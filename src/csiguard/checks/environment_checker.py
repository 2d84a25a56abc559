"""Environment checker running the compatibility check set at a bounded rate."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime, timedelta

from csiguard.checks.check_registry import CheckRegistry, build_default_registry
from csiguard.core.config import GuardConfig, RecheckConfig
from csiguard.core.models import ClusterCheckResult, aggregate_results, utcnow
from csiguard.interfaces.check import Check, CheckContext
from csiguard.interfaces.exceptions import CheckExecutionError
from csiguard.utils.logging import get_logger, log_check_result

logger = get_logger(__name__)


class EnvironmentChecker(ABC):
    """Evaluate vSphere compatibility, respecting an internal recheck interval."""

    @abstractmethod
    async def check(self, context: CheckContext) -> tuple[timedelta, ClusterCheckResult, bool]:
        """Evaluate the current compatibility of the environment.

        Args:
            context: Check context for this sync

        Returns:
            Tuple of (time until the next real check, current result,
            whether the checks actually ran in this call)
        """

    def invalidate(self) -> None:
        """Make the next call run the checks regardless of the interval."""


class SkippingEnvironmentChecker(EnvironmentChecker):
    """Checker that never evaluates the platform.

    Used to suppress checking altogether; it always reports a passing
    result without running any check.
    """

    async def check(self, context: CheckContext) -> tuple[timedelta, ClusterCheckResult, bool]:
        """Return a passing result without any external call."""
        return timedelta(0), ClusterCheckResult.make_pass(), False


class CompositeEnvironmentChecker(EnvironmentChecker):
    """Runs the registered check set at most once per recheck interval.

    The last aggregate result is cached together with the time of the next
    real check. Between checks the cached result is returned unchanged, so
    conditions and metrics derived from it stay as they are until the next
    check is due. Failing results are rechecked sooner, with an exponential
    backoff capped at the full interval.
    """

    def __init__(
        self,
        registry: CheckRegistry,
        recheck: RecheckConfig | None = None,
        default_timeout_seconds: int = 60,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize composite checker.

        Args:
            registry: Registry holding the ordered check set
            recheck: Recheck interval configuration
            default_timeout_seconds: Timeout for checks without their own
            clock: Source of the current time
        """
        self.registry = registry
        self.recheck = recheck or RecheckConfig()
        self.default_timeout_seconds = default_timeout_seconds
        self.clock = clock
        self.last_result: ClusterCheckResult | None = None
        self.next_check: datetime | None = None
        self._failure_delay: timedelta | None = None
        # Guards last_result/next_check between the due test and the update.
        self._lock = asyncio.Lock()
        logger.debug(
            "environment_checker_initialized",
            check_count=len(registry),
            interval_minutes=self.recheck.interval_minutes,
        )

    def invalidate(self) -> None:
        """Make the next call run the check set regardless of the interval."""
        self.next_check = None

    async def check(self, context: CheckContext) -> tuple[timedelta, ClusterCheckResult, bool]:
        """Return the cached result or run the check set when due.

        Args:
            context: Check context for this sync

        Returns:
            Tuple of (time until the next real check, current result,
            whether the checks actually ran in this call)
        """
        async with self._lock:
            now = self.clock()
            if self.last_result is not None and self.next_check is not None:
                if now < self.next_check:
                    remaining = self.next_check - now
                    logger.debug(
                        "environment_check_skipped",
                        next_check=self.next_check.isoformat(),
                        status=self.last_result.status.value,
                    )
                    return remaining, self.last_result, False

            results = await self._run_checks(context)
            result = aggregate_results(results)

            changed = not result.same_outcome(self.last_result)
            delay = self._next_delay(result)
            self.last_result = result
            self.next_check = now + delay

            log_check_result(
                logger,
                "environment_check_completed",
                result,
                changed=changed,
                checks_run=len(results),
                next_check_in_seconds=delay.total_seconds(),
            )
            return delay, result, True

    async def _run_checks(self, context: CheckContext) -> list[ClusterCheckResult]:
        """Run the registered checks in order.

        Args:
            context: Check context for this sync

        Returns:
            Results of the checks that ran
        """
        results = []

        for check in self.registry.get_all_checks():
            if check.requires_connection and context.connection is None:
                logger.debug("check_skipped_no_connection", check_name=check.name)
                continue

            result = await self._execute_check(check, context)
            results.append(result)

            if check.stops_evaluation and not result.is_pass:
                logger.warning(
                    "check_failed_stopping",
                    check_name=check.name,
                    status=result.status.value,
                )
                break

        return results

    async def _execute_check(self, check: Check, context: CheckContext) -> ClusterCheckResult:
        """Execute one check with a timeout, converting faults into results."""
        timeout = check.timeout_seconds or self.default_timeout_seconds
        logger.debug("executing_check", check_name=check.name)

        try:
            return await asyncio.wait_for(check.execute(context), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error("check_timeout", check_name=check.name, timeout=timeout)
            error = CheckExecutionError(f"Check {check.name} timed out after {timeout} seconds")
            return ClusterCheckResult.make_api_error(error, check_name=check.name)
        except Exception as e:
            logger.error("check_execution_failed", check_name=check.name, error=str(e))
            return ClusterCheckResult.make_api_error(e, check_name=check.name)

    def _next_delay(self, result: ClusterCheckResult) -> timedelta:
        """Compute the delay before the next real check."""
        interval = self.recheck.interval
        if result.is_pass:
            self._failure_delay = None
            return interval

        if self._failure_delay is None:
            delay = self.recheck.failure_initial_delay
        else:
            delay = self._failure_delay * self.recheck.failure_backoff_factor
        self._failure_delay = min(delay, interval)
        return self._failure_delay


def build_environment_checker(
    config: GuardConfig,
    registry: CheckRegistry | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> CompositeEnvironmentChecker:
    """Build the composite checker for a configuration.

    Args:
        config: csiguard configuration
        registry: Check set to run (standard vSphere checks if None)
        clock: Source of the current time

    Returns:
        Configured CompositeEnvironmentChecker
    """
    return CompositeEnvironmentChecker(
        registry=registry if registry is not None else build_default_registry(),
        recheck=config.recheck,
        default_timeout_seconds=config.checks.check_timeout_seconds,
        clock=clock,
    )
