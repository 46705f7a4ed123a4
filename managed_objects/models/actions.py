"""
Invalidation actions run after the bucket has been mirrored.

Each action kind is its own frozen dataclass; :data:`InvalidationAction`
is the union of all kinds. Consumers branch on the concrete type and
must reject anything they do not recognise.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Union

from ..errors import RequestError


@dataclass(frozen=True)
class CloudFrontInvalidation:
    """Full ``/*`` invalidation of one CloudFront distribution."""

    distribution_id: str
    wait_for_completion: bool = False

    kind = "cloudFrontDistribution"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CloudFrontInvalidation':
        """Deserialize from the event's ``invalidationActions`` entry."""
        distribution_id = data.get("distributionId")
        if not distribution_id:
            raise RequestError("Invalidation action is missing distributionId")
        return cls(
            distribution_id=str(distribution_id),
            wait_for_completion=bool(data.get("waitForCompletion", False)),
        )


InvalidationAction = Union[CloudFrontInvalidation]

_PARSERS: Dict[str, Callable[[Dict[str, Any]], InvalidationAction]] = {
    CloudFrontInvalidation.kind: CloudFrontInvalidation.from_dict,
}


def parse_invalidation_action(data: Dict[str, Any]) -> InvalidationAction:
    """Build the action variant named by ``kind``.

    Entries without a ``kind`` are CloudFront distribution invalidations,
    which is the only shape the provisioning construct emits today.

    Args:
        data: One entry of ``props.invalidationActions``

    Returns:
        The concrete action

    Raises:
        RequestError: If the entry is not an object or the kind is unknown
    """
    if not isinstance(data, dict):
        raise RequestError(f"Invalidation action must be an object, got {type(data).__name__}")
    kind = data.get("kind", CloudFrontInvalidation.kind)
    parser = _PARSERS.get(kind)
    if parser is None:
        raise RequestError(f"Unknown invalidation action kind: {kind}")
    return parser(data)
