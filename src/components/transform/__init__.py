"""Transform component - proposal payload to published record mapping."""

from src.components.transform.component import (
    DEFAULTS,
    REFERENT_TRACKS,
    TransformDefaults,
    map_event_type,
    map_job_type,
    map_referent_track,
    read_time_minutes,
    transform,
    transform_proposal,
)
from src.components.transform.payloads import (
    CANONICAL_FIELDS,
    PAYLOAD_MODELS,
    ProposalPayload,
    parse_payload,
)

__all__ = [
    # Entry points
    "transform",
    "transform_proposal",
    "parse_payload",
    # Config
    "TransformDefaults",
    "DEFAULTS",
    # Remapping
    "map_event_type",
    "map_referent_track",
    "map_job_type",
    "read_time_minutes",
    "REFERENT_TRACKS",
    # Payloads
    "ProposalPayload",
    "PAYLOAD_MODELS",
    "CANONICAL_FIELDS",
]
