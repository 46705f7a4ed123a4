"""
Command line entry point: run the handler locally against an event file.

Useful for replaying a captured custom resource event against a real
bucket, e.g. to unblock a stuck deployment by hand.
"""
import argparse
import dataclasses
import json
import sys

from .errors import ReconciliationError
from .lifecycle import LifecycleController
from .services.callback import CallbackReporter, build_response
from .utils.aws.aws_utils import create_aws_clients
from .utils.config_loader import ConfigLoader
from .utils.logger import get_logger, setup_logging

log = get_logger(__name__)


class LogOnlyReporter(CallbackReporter):
    """Reporter that logs the response document instead of sending it."""

    def send(self, status, reason, event):
        log.info("Would send %s: %s", status, json.dumps(build_response(status, reason, event)))


# ── Argument Parser ────────────────────────────────────────────────────────

def create_argument_parser():
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog='managed-objects',
        description='Reconcile an S3 bucket from a custom resource event file',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('event', help="Path to the event JSON file, or '-' for stdin")
    parser.add_argument('--skip', action='store_true', help='Report success without reconciling')
    parser.add_argument('--work-root', help='Ephemeral directory for staging (default: $WORK_ROOT or /tmp)')
    parser.add_argument('--region', help='AWS region')
    parser.add_argument('--no-callback', action='store_true',
                        help='Log the status document instead of PUTting it to ResponseURL')
    parser.add_argument('--no-colour', action='store_true', help='Disable coloured log tags')
    parser.add_argument('--verbose', action='store_true', help='Enable verbose output')
    parser.add_argument('--quiet', action='store_true', help='Only show warnings and errors')
    return parser


def load_event(path):
    """Read an event document from a file path or stdin."""
    if path == '-':
        return json.load(sys.stdin)
    with open(path, 'r') as f:
        return json.load(f)


def main(argv=None):
    """Main CLI entry point."""
    args = create_argument_parser().parse_args(argv)
    setup_logging(verbose=args.verbose, quiet=args.quiet, colour=not args.no_colour)

    try:
        event = load_event(args.event)
        settings = ConfigLoader.load_settings()
    except (OSError, ValueError, ReconciliationError) as e:
        log.error("%s", e)
        return 1

    overrides = {}
    if args.skip:
        overrides['skip'] = True
    if args.work_root:
        overrides['work_root'] = args.work_root
    if args.region:
        overrides['region'] = args.region
    settings = dataclasses.replace(settings, **overrides)

    if args.no_callback:
        reporter = LogOnlyReporter()
    else:
        reporter = CallbackReporter(timeout=settings.callback_timeout)

    controller = LifecycleController(create_aws_clients(settings.region), settings, reporter)
    try:
        controller.handle(event)
    except Exception as e:
        log.error("Invocation failed: %s", e)
        return 1
    return 0
