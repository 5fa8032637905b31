"""Review builder — pure construction of the two admission response shapes."""

from __future__ import annotations

import base64
import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from workload_admission.outcome import PatchOperation

API_VERSION = "admission.k8s.io/v1"
REVIEW_KIND = "AdmissionReview"
PATCH_TYPE = "JSONPatch"


@dataclass(frozen=True)
class AdmissionResponse:
    """Either a verdict or a patch, correlated with the request ``uid``.

    Attributes:
        uid:        Identifier echoed from the request.
        allowed:    Whether the object may be persisted.
        code:       HTTP-style status for audit (verdicts only).
        message:    Human-readable reason (verdicts only).
        reason:     Machine-readable status reason (verdicts only).
        patch_type: ``"JSONPatch"`` for patches, ``None`` for verdicts.
        operations: Ordered patch operations (patches only).
    """

    uid: str
    allowed: bool
    code: int | None = None
    message: str | None = None
    reason: str | None = None
    patch_type: str | None = None
    operations: tuple[PatchOperation, ...] = field(default_factory=tuple)

    @property
    def is_patch(self) -> bool:
        return self.patch_type is not None

    def patch_json(self) -> bytes:
        """The JSON-patch document as UTF-8 bytes (``b"[]"`` when empty)."""
        return json.dumps([op.to_dict() for op in self.operations]).encode()

    def to_review(self) -> dict[str, Any]:
        """Render the outbound ``AdmissionReview`` document."""
        response: dict[str, Any] = {"uid": self.uid, "allowed": self.allowed}
        if self.is_patch:
            response["patchType"] = self.patch_type
            response["patch"] = base64.b64encode(self.patch_json()).decode("ascii")
        else:
            result: dict[str, Any] = {"code": self.code, "message": self.message}
            if self.reason:
                result["reason"] = self.reason
            response["result"] = result
        return {"apiVersion": API_VERSION, "kind": REVIEW_KIND, "response": response}


def build_verdict(
    uid: str,
    allowed: bool,
    code: int,
    message: str,
    *,
    reason: str | None = None,
) -> AdmissionResponse:
    """Build an allow/deny verdict.  ``code`` is carried for audit only."""
    return AdmissionResponse(uid=uid, allowed=allowed, code=code, message=message, reason=reason)


def build_patch(uid: str, operations: Sequence[PatchOperation]) -> AdmissionResponse:
    """Build a patch response.  An empty sequence is a well-formed no-op."""
    return AdmissionResponse(
        uid=uid,
        allowed=True,
        patch_type=PATCH_TYPE,
        operations=tuple(operations),
    )
