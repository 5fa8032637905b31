"""Workload extraction — reduce every supported kind to one ``PodTemplate``.

Each :class:`WorkloadKind` declares the path from the object root to its
embedded pod spec.  A single walker follows that path, so supporting a new
controller kind is one enum member and one path tuple.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from workload_admission.exceptions import DecodeError
from workload_admission.quantity import parse_quantity, to_millis

logger = logging.getLogger(__name__)

Quantity = str | int | float


class WorkloadKind(str, Enum):
    POD = "Pod"
    REPLICA_SET = "ReplicaSet"
    DEPLOYMENT = "Deployment"
    DAEMON_SET = "DaemonSet"
    JOB = "Job"
    CRON_JOB = "CronJob"
    STATEFUL_SET = "StatefulSet"

    @property
    def template_path(self) -> tuple[str, ...]:
        """Keys leading from the object root to the pod spec."""
        return _TEMPLATE_PATHS[self]

    @classmethod
    def parse(cls, tag: str) -> WorkloadKind | None:
        """Return the member for *tag*, or ``None`` for unregulated kinds."""
        try:
            return cls(tag)
        except ValueError:
            return None


_CONTROLLER_PATH = ("spec", "template", "spec")

_TEMPLATE_PATHS: dict[WorkloadKind, tuple[str, ...]] = {
    WorkloadKind.POD: ("spec",),
    WorkloadKind.REPLICA_SET: _CONTROLLER_PATH,
    WorkloadKind.DEPLOYMENT: _CONTROLLER_PATH,
    WorkloadKind.DAEMON_SET: _CONTROLLER_PATH,
    WorkloadKind.JOB: _CONTROLLER_PATH,
    WorkloadKind.STATEFUL_SET: _CONTROLLER_PATH,
    WorkloadKind.CRON_JOB: ("spec", "jobTemplate", "spec", "template", "spec"),
}


# ── Pod template models ──────────────────────────────────────


class ResourceRequirements(BaseModel):
    """``resources`` block of a container; quantities are kept as written."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    requests: dict[str, Quantity] = Field(default_factory=dict)
    limits: dict[str, Quantity] = Field(default_factory=dict)

    @field_validator("requests", "limits", mode="before")
    @classmethod
    def _null_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("requests", "limits")
    @classmethod
    def _check_quantities(cls, value: dict[str, Quantity]) -> dict[str, Quantity]:
        for resource, quantity in value.items():
            try:
                parse_quantity(quantity)
            except ValueError as exc:
                raise ValueError(f"{resource}: {exc}") from exc
        return value


class Container(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str = ""
    resources: ResourceRequirements = Field(default_factory=ResourceRequirements)

    @field_validator("resources", mode="before")
    @classmethod
    def _null_resources(cls, value: Any) -> Any:
        return {} if value is None else value

    def request_millis(self, resource: str) -> int | None:
        """Requested amount of *resource* in thousandths, ``None`` if unset."""
        quantity = self.resources.requests.get(resource)
        if quantity is None:
            return None
        return to_millis(quantity)


class PodTemplate(BaseModel):
    """The normalized shape every workload kind reduces to.

    Container names are not required to be unique.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    containers: list[Container] = Field(default_factory=list)
    init_containers: list[Container] = Field(default_factory=list, alias="initContainers")
    namespace: str = ""

    @field_validator("containers", "init_containers", mode="before")
    @classmethod
    def _null_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value


# ── Extraction ───────────────────────────────────────────────


def extract(kind: str | WorkloadKind, raw: bytes | str | Mapping[str, Any]) -> tuple[PodTemplate, str]:
    """Decode *raw* as *kind* and return its pod template and namespace.

    Unknown kinds are not regulated: they yield an empty template and an
    empty namespace instead of an error.

    Raises:
        DecodeError: If *raw* is not valid JSON, a level of the kind's
            template path is missing or null, or the pod spec is malformed.
    """
    workload_kind = kind if isinstance(kind, WorkloadKind) else WorkloadKind.parse(kind)
    if workload_kind is None:
        logger.debug("Kind %r is not regulated, returning empty pod template", kind)
        return PodTemplate(), ""

    document = _load(workload_kind.value, raw)
    namespace = _namespace_of(workload_kind.value, document)
    spec = _walk(workload_kind.value, document, workload_kind.template_path)

    try:
        template = PodTemplate.model_validate(spec)
    except ValidationError as exc:
        raise DecodeError(workload_kind.value, _describe(exc)) from exc

    return template.model_copy(update={"namespace": namespace}), namespace


def decode_pod(raw: bytes | str | Mapping[str, Any]) -> dict[str, Any]:
    """Decode *raw* as a Pod and return the original JSON document.

    The pod spec is validated like :func:`extract` does, but the returned
    mapping keeps every field so patches can be computed against it.
    """
    kind = WorkloadKind.POD.value
    document = _load(kind, raw)
    _namespace_of(kind, document)
    spec = _walk(kind, document, WorkloadKind.POD.template_path)
    try:
        PodTemplate.model_validate(spec)
    except ValidationError as exc:
        raise DecodeError(kind, _describe(exc)) from exc
    return document


def _load(kind: str, raw: bytes | str | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(raw, Mapping):
        return dict(raw)
    try:
        document = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as exc:
        raise DecodeError(kind, f"invalid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise DecodeError(kind, "top-level value is not an object")
    return document


def _namespace_of(kind: str, document: Mapping[str, Any]) -> str:
    metadata = document.get("metadata")
    if metadata is None:
        return ""
    if not isinstance(metadata, Mapping):
        raise DecodeError(kind, "'metadata' is not an object")
    namespace = metadata.get("namespace") or ""
    if not isinstance(namespace, str):
        raise DecodeError(kind, "'metadata.namespace' is not a string")
    return namespace


def _walk(kind: str, document: Mapping[str, Any], path: tuple[str, ...]) -> Mapping[str, Any]:
    current: Mapping[str, Any] = document
    for depth, key in enumerate(path, start=1):
        location = ".".join(path[:depth])
        value = current.get(key)
        if value is None:
            raise DecodeError(kind, f"'{location}' is missing or null")
        if not isinstance(value, Mapping):
            raise DecodeError(kind, f"'{location}' is not an object")
        current = value
    return current


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors()[:3]:
        location = ".".join(str(p) for p in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)
