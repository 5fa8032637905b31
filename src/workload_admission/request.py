"""AdmissionRequest — the read-only envelope handed to the coordinator."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class AdmissionRequest:
    """Transport-created, request-scoped view of one admission call.

    Attributes:
        uid:       Opaque identifier, echoed back verbatim in the response.
        object:    The serialized workload.  Raw JSON bytes, or the already
                   decoded mapping when the transport parsed the review.
        kind:      Declared workload kind (``"Deployment"``, ``"Pod"`` ...).
        username:  Caller identity as reported by the API server.
        namespace: Target namespace; may be empty before extraction.
        operation: ``CREATE``, ``UPDATE`` ... (informational only).
    """

    uid: str
    object: bytes | str | Mapping[str, Any]
    kind: str
    username: str = ""
    namespace: str = ""
    operation: str = ""
