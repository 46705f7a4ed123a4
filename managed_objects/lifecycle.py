"""
Lifecycle controller for one custom resource invocation.

State machine::

    Received -> Staging -> Assembling -> Validating -> Mirroring
             -> Invalidating -> Reporting -> Done
    (any non-terminal state) -> Failed

Delete requests skip Assembling and Validating: the final tree stays
empty, so mirroring empties the bucket.
"""
import json
import time
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .errors import ReportError
from .models.request import ReconciliationRequest, redact_event
from .services.assembler import ObjectAssembler
from .services.aws.invalidation import InvalidationDispatcher
from .services.aws.mirror import BucketMirror, MirrorResult
from .services.callback import FAILED, SUCCESS, CallbackReporter
from .services.duplicates import check_duplicates
from .services.staging import ArchiveStager, StagingArea
from .utils.aws.aws_utils import AwsClients
from .utils.config_loader import Settings
from .utils.logger import get_logger

log = get_logger(__name__)


class ReconciliationState(str, Enum):
    RECEIVED = "Received"
    STAGING = "Staging"
    ASSEMBLING = "Assembling"
    VALIDATING = "Validating"
    MIRRORING = "Mirroring"
    INVALIDATING = "Invalidating"
    REPORTING = "Reporting"
    DONE = "Done"
    FAILED = "Failed"


TERMINAL_STATES = (ReconciliationState.DONE, ReconciliationState.FAILED)


class LifecycleController:
    """Runs one invocation to completion and reports exactly once.

    Args:
        clients: S3 and CloudFront clients
        settings: Runtime settings
        reporter: Callback reporter
        sleep: Sleep function for invalidation polling
        clock: Monotonic clock for the polling budget
    """

    def __init__(
        self,
        clients: AwsClients,
        settings: Settings,
        reporter: CallbackReporter,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.clients = clients
        self.settings = settings
        self.reporter = reporter
        self.sleep = sleep
        self.clock = clock
        self.state = ReconciliationState.RECEIVED
        self.history: List[ReconciliationState] = [self.state]

    def _enter(self, state: ReconciliationState) -> None:
        log.debug("%s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def handle(self, event: Dict[str, Any]) -> None:
        """
        Reconcile (unless skipped) and send the terminal status.

        On failure a FAILED status carrying the error message is sent; if
        that report itself fails it is logged and the original error is
        re-raised.

        Args:
            event: Raw custom resource event
        """
        log.info(json.dumps(redact_event(event), default=str))
        try:
            if self.settings.skip:
                log.warning("Skipping reconciliation due to environment variable SKIP.")
            else:
                self.reconcile(ReconciliationRequest.from_event(event))
            self._enter(ReconciliationState.REPORTING)
            self.reporter.send(SUCCESS, None, event)
            self._enter(ReconciliationState.DONE)
        except Exception as error:
            failed_in = self.state
            self._enter(ReconciliationState.FAILED)
            log.error("Reconciliation failed while %s: %s", failed_in.value, error)
            try:
                self.reporter.send(FAILED, str(error), event)
            except ReportError as report_error:
                log.error("Failed to send FAILED response: %s", report_error)
            raise

    def reconcile(self, request: ReconciliationRequest) -> Optional[MirrorResult]:
        """
        Make the target bucket match the request and run invalidations.

        Args:
            request: Parsed request

        Returns:
            MirrorResult of the bucket sync
        """
        settings = self.settings
        props = request.props
        staging_area = StagingArea(settings.work_root, request.request_id)

        self._enter(ReconciliationState.STAGING)
        staging_area.reset()

        if not request.is_delete:
            self._enter(ReconciliationState.ASSEMBLING)
            assembler = ObjectAssembler(
                ArchiveStager(self.clients.s3), staging_area, max_workers=settings.max_workers
            )
            contributions = assembler.assemble(props.assets, props.objects)

            self._enter(ReconciliationState.VALIDATING)
            check_duplicates(contributions)

        self._enter(ReconciliationState.MIRRORING)
        mirror = BucketMirror(self.clients.s3, props.bucket_url, max_workers=settings.max_workers)
        result = mirror.sync(staging_area.final_dir)
        staging_area.cleanup()

        self._enter(ReconciliationState.INVALIDATING)
        InvalidationDispatcher(
            self.clients.cloudfront,
            poll_interval=settings.poll_interval,
            max_wait=settings.max_wait,
            max_workers=settings.max_workers,
            sleep=self.sleep,
            clock=self.clock,
        ).dispatch(props.invalidation_actions)
        return result
