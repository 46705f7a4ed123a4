"""
Request model for the custom resource event
"""
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple

from ..errors import RequestError
from .actions import InvalidationAction, parse_invalidation_action


class RequestType(str, Enum):
    """CloudFormation custom resource request types."""

    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


@dataclass(frozen=True)
class ArchiveSource:
    """A zip asset to fetch from S3 and extract into the bucket.

    Attributes:
        content_hash: Asset hash, used as the staging subdirectory name
        bucket: Bucket holding the archive
        key: Object key of the archive
    """

    content_hash: str
    bucket: str
    key: str

    @classmethod
    def from_dict(cls, data):
        """Deserialize from an ``assets`` entry"""
        try:
            return cls(
                content_hash=str(data["hash"]),
                bucket=str(data["s3BucketName"]),
                key=str(data["s3ObjectKey"]),
            )
        except (KeyError, TypeError) as exc:
            raise RequestError(f"Malformed asset declaration: {data!r}") from exc


@dataclass(frozen=True)
class InlineObject:
    """An object whose content is declared inline.

    Attributes:
        key: Relative object key inside the bucket
        body: Raw object content
    """

    key: str
    body: str

    @classmethod
    def from_dict(cls, data):
        """Deserialize from an ``objects`` entry.

        Accepts ``content`` as an alias of ``body``.
        """
        if not isinstance(data, dict) or not data.get("key"):
            raise RequestError(f"Malformed object declaration: {data!r}")
        body = data.get("body", data.get("content"))
        if body is None:
            raise RequestError(f"Object {data['key']} has no body")
        return cls(key=str(data["key"]), body=body if isinstance(body, str) else json.dumps(body))


@dataclass(frozen=True)
class DeclaredProps:
    """Desired bucket state declared by the provisioning construct."""

    bucket_url: str
    assets: Tuple[ArchiveSource, ...] = ()
    objects: Tuple[InlineObject, ...] = ()
    invalidation_actions: Tuple[InvalidationAction, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DeclaredProps':
        """Deserialize from ``ResourceProperties.props``.

        Raises:
            RequestError: If the bucket URL is missing or an entry is malformed
        """
        if not isinstance(data, dict):
            raise RequestError("ResourceProperties.props must be an object")
        bucket_url = data.get("bucketUrl")
        if not bucket_url or not str(bucket_url).startswith("s3://"):
            raise RequestError(f"Invalid bucketUrl: {bucket_url!r}")

        return cls(
            bucket_url=str(bucket_url),
            assets=tuple(ArchiveSource.from_dict(a) for a in data.get("assets") or []),
            objects=tuple(InlineObject.from_dict(o) for o in data.get("objects") or []),
            invalidation_actions=tuple(
                parse_invalidation_action(a) for a in data.get("invalidationActions") or []
            ),
        )


@dataclass(frozen=True)
class ReconciliationRequest:
    """One custom resource invocation.

    The raw event is retained because the callback echoes several of its
    fields back to CloudFormation.
    """

    request_type: RequestType
    request_id: str
    response_url: str
    props: DeclaredProps
    stack_id: str = ""
    resource_type: str = ""
    logical_resource_id: str = ""
    raw_event: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_delete(self) -> bool:
        return self.request_type is RequestType.DELETE

    @classmethod
    def from_event(cls, event: Dict[str, Any]) -> 'ReconciliationRequest':
        """Parse a CloudFormation custom resource event.

        Args:
            event: Lambda event dictionary

        Returns:
            ReconciliationRequest instance

        Raises:
            RequestError: If required fields are missing or invalid
        """
        try:
            request_type = RequestType(event.get("RequestType"))
        except ValueError as exc:
            raise RequestError(f"Unknown RequestType: {event.get('RequestType')!r}") from exc

        request_id = event.get("RequestId")
        if not request_id:
            raise RequestError("Event is missing RequestId")
        response_url = event.get("ResponseURL")
        if not response_url:
            raise RequestError("Event is missing ResponseURL")

        properties = event.get("ResourceProperties") or {}
        return cls(
            request_type=request_type,
            request_id=str(request_id),
            response_url=str(response_url),
            props=DeclaredProps.from_dict(properties.get("props")),
            stack_id=event.get("StackId", ""),
            resource_type=event.get("ResourceType", ""),
            logical_resource_id=event.get("LogicalResourceId", ""),
            raw_event=event,
        )


def redact_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of *event* safe to log (presigned URL removed)."""
    return {**event, "ResponseURL": "REDACTED"}
