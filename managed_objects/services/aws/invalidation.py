"""
CloudFront invalidation dispatch.

Every declared action issues one ``/*`` invalidation. Actions run
concurrently; a failing action does not cancel the others, but the step
fails if any of them failed.
"""
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Optional, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from ...errors import InvalidationError, InvalidationTimeoutError
from ...models.actions import CloudFrontInvalidation, InvalidationAction
from ...utils.logger import get_logger

log = get_logger(__name__)

COMPLETED = "Completed"


def caller_reference() -> str:
    """Unique CallerReference so immediate retries are not rejected."""
    return f"{time.time_ns()}-{uuid.uuid4().hex[:8]}"


class InvalidationDispatcher:
    """Creates invalidations and optionally waits for them.

    Args:
        cloudfront_client: boto3 CloudFront client
        poll_interval: Seconds between status polls
        max_wait: Polling budget per action in seconds, ``0`` for unbounded
        max_workers: Concurrent actions
        sleep: Sleep function (injected by tests)
        clock: Monotonic clock (injected by tests)
        reference_factory: CallerReference generator
    """

    def __init__(
        self,
        cloudfront_client,
        poll_interval: float = 1.0,
        max_wait: float = 600.0,
        max_workers: int = 8,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        reference_factory: Callable[[], str] = caller_reference,
    ):
        self.cloudfront_client = cloudfront_client
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self.max_workers = max_workers
        self.sleep = sleep
        self.clock = clock
        self.reference_factory = reference_factory

    def dispatch(self, actions: Sequence[InvalidationAction]) -> None:
        """Run all actions concurrently.

        Args:
            actions: Declared invalidation actions

        Raises:
            InvalidationError: If one or more actions failed
        """
        if not actions:
            return

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [(action, pool.submit(self._run, action)) for action in actions]
            errors = [(action, future.exception()) for action, future in futures]

        failures: Dict[str, str] = {}
        for index, (action, error) in enumerate(errors):
            if error is None:
                continue
            label = _label(action)
            if label in failures:
                label = f"{label}#{index}"
            log.error("Invalidation for %s failed: %s", label, error)
            failures[label] = str(error)

        if not failures:
            return
        if len(failures) == 1:
            message = next(iter(failures.values()))
        else:
            message = f"{len(failures)} of {len(actions)} invalidation(s) failed: " + "; ".join(
                f"{label}: {reason}" for label, reason in failures.items()
            )
        all_timeouts = all(
            isinstance(error, InvalidationTimeoutError) for _, error in errors if error is not None
        )
        error_cls = InvalidationTimeoutError if all_timeouts else InvalidationError
        raise error_cls(message, failures)

    def _run(self, action: InvalidationAction) -> None:
        if isinstance(action, CloudFrontInvalidation):
            self._invalidate_distribution(action)
        else:
            raise InvalidationError(f"Unsupported invalidation action: {action!r}")

    def _invalidate_distribution(self, action: CloudFrontInvalidation) -> None:
        distribution_id = action.distribution_id
        log.info("Creating cloudfront invalidation for distribution %s...", distribution_id)
        try:
            response = self.cloudfront_client.create_invalidation(
                DistributionId=distribution_id,
                InvalidationBatch={
                    'Paths': {'Quantity': 1, 'Items': ['/*']},
                    'CallerReference': self.reference_factory(),
                },
            )
        except (ClientError, BotoCoreError) as e:
            raise InvalidationError(
                f"Could not create invalidation for distribution {distribution_id}: {e}"
            ) from e

        invalidation = response['Invalidation']
        if action.wait_for_completion:
            self._wait(distribution_id, invalidation['Id'], invalidation.get('Status'))

    def _wait(self, distribution_id: str, invalidation_id: str, status: Optional[str]) -> None:
        log.info("Waiting for invalidation %s to complete...", invalidation_id)
        started = self.clock()
        while status != COMPLETED:
            if self.max_wait and self.clock() - started >= self.max_wait:
                raise InvalidationTimeoutError(
                    f"Invalidation {invalidation_id} for distribution {distribution_id} "
                    f"did not complete within {self.max_wait:g}s (last status: {status})"
                )
            self.sleep(self.poll_interval)
            try:
                response = self.cloudfront_client.get_invalidation(
                    DistributionId=distribution_id,
                    Id=invalidation_id,
                )
                status = response['Invalidation']['Status']
            except ClientError as e:
                # The record can briefly vanish right after creation
                if e.response.get('Error', {}).get('Code') == 'NoSuchInvalidation':
                    log.debug("Invalidation %s not found yet, polling again", invalidation_id)
                    status = None
                else:
                    raise InvalidationError(
                        f"Could not get invalidation {invalidation_id} for distribution {distribution_id}: {e}"
                    ) from e
            except BotoCoreError as e:
                raise InvalidationError(
                    f"Could not get invalidation {invalidation_id} for distribution {distribution_id}: {e}"
                ) from e
        log.info("Invalidation %s completed", invalidation_id)


def _label(action: InvalidationAction) -> str:
    if isinstance(action, CloudFrontInvalidation):
        return action.distribution_id
    return repr(action)
