"""
CloudFormation custom resource status callback
"""
import json
from typing import Any, Dict, Optional

import requests

from ..errors import ReportError
from ..utils.logger import get_logger

log = get_logger(__name__)

SUCCESS = "SUCCESS"
FAILED = "FAILED"


def build_response(status: str, reason: Optional[str], event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build the response document CloudFormation expects.

    The physical resource id is the logical id, so the resource is never
    replaced on update.

    Args:
        status: ``SUCCESS`` or ``FAILED``
        reason: Human-readable reason (omitted when None)
        event: The raw invocation event

    Returns:
        Response body dictionary
    """
    body = {
        "Status": status,
        "PhysicalResourceId": event.get("LogicalResourceId"),
        "StackId": event.get("StackId"),
        "RequestId": event.get("RequestId"),
        "ResourceType": event.get("ResourceType"),
        "LogicalResourceId": event.get("LogicalResourceId"),
    }
    if reason is not None:
        body["Reason"] = reason
    return body


class CallbackReporter:
    """
    Sends the terminal status to the presigned ``ResponseURL``.

    Args:
        session: requests session (or module) used for the PUT
        timeout: HTTP timeout in seconds
    """

    def __init__(self, session=None, timeout: float = 30.0):
        self.session = session or requests.Session()
        self.timeout = timeout

    def send(self, status: str, reason: Optional[str], event: Dict[str, Any]) -> None:
        """
        PUT the status document.

        Args:
            status: ``SUCCESS`` or ``FAILED``
            reason: Failure reason, if any
            event: The raw invocation event

        Raises:
            ReportError: If the request fails or returns HTTP >= 400
        """
        log.info("Sending %s...", status)
        response_url = event.get("ResponseURL")
        if not response_url:
            raise ReportError("Event has no ResponseURL to report to")

        payload = json.dumps(build_response(status, reason, event)).encode("utf-8")
        try:
            response = self.session.put(
                response_url,
                data=payload,
                # Presigned S3 URLs are signed without a content type
                headers={"Content-Type": ""},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ReportError(f"Could not send {status} response: {e}") from e

        log.debug("Callback response status: %d", response.status_code)
        if response.status_code >= 400:
            raise ReportError(f"Received {response.status_code} {response.reason}")
