"""
Lambda entry point for the ``Custom::ManagedBucketObjects`` resource.

Configured as ``managed_objects.handler.handler``.
"""
from .errors import ConfigError, ReportError
from .lifecycle import LifecycleController
from .services.callback import FAILED, CallbackReporter
from .utils.aws.aws_utils import create_aws_clients
from .utils.config_loader import ConfigLoader
from .utils.logger import get_logger, setup_logging

log = get_logger(__name__)

_clients = None


def _get_clients(region):
    # Reused across warm invocations
    global _clients  # noqa: PLW0603
    if _clients is None:
        _clients = create_aws_clients(region)
    return _clients


def handler(event, context=None):
    """Reconcile the bucket and report to CloudFormation.

    Args:
        event: Custom resource request
        context: Lambda context (unused)
    """
    try:
        settings = ConfigLoader.load_settings()
    except ConfigError as error:
        log.error("Invalid configuration: %s", error)
        try:
            CallbackReporter().send(FAILED, str(error), event)
        except ReportError as report_error:
            log.error("Failed to send FAILED response: %s", report_error)
        raise

    setup_logging(
        verbose=settings.log_level == "DEBUG",
        quiet=settings.log_level == "WARNING",
        colour=settings.log_colour,
    )
    controller = LifecycleController(
        _get_clients(settings.region),
        settings,
        CallbackReporter(timeout=settings.callback_timeout),
    )
    controller.handle(event)
