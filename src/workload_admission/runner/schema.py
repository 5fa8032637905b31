# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Data transfer objects for runner input/output.

These Pydantic models define the wire contract of the runner: the
``AdmissionReview`` documents exchanged with the API server, plus the
rule and store configuration that selects what to enforce.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from workload_admission.request import AdmissionRequest
from workload_admission.review import AdmissionResponse


class GroupVersionKindSchema(BaseModel):
    """Kind of the admitted object.

    Attributes:
        group: API group ("" for the core group)
        version: API version
        kind: Kind name (e.g., "Deployment")
    """

    group: str = ""
    version: str = ""
    kind: str


class UserInfoSchema(BaseModel):
    """Authenticated caller as reported by the API server."""

    username: str = ""
    groups: list[str] = Field(default_factory=list)


class AdmissionRequestSchema(BaseModel):
    """``request`` section of an inbound AdmissionReview.

    Attributes:
        uid: Identifier to echo in the response
        kind: Kind of the admitted object
        namespace: Namespace of the request
        operation: CREATE, UPDATE, DELETE or CONNECT
        object: The admitted object, as JSON
        user_info: Caller identity
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    uid: str
    kind: GroupVersionKindSchema
    namespace: str = ""
    operation: str = ""
    object: dict[str, Any] | None = None
    user_info: UserInfoSchema = Field(default_factory=UserInfoSchema, alias="userInfo")

    def to_request(self) -> AdmissionRequest:
        return AdmissionRequest(
            uid=self.uid,
            object=self.object if self.object is not None else b"null",
            kind=self.kind.kind,
            username=self.user_info.username,
            namespace=self.namespace,
            operation=self.operation,
        )


class AdmissionReviewInput(BaseModel):
    """Inbound AdmissionReview."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    api_version: str = Field(default="admission.k8s.io/v1", alias="apiVersion")
    kind: str = "AdmissionReview"
    request: AdmissionRequestSchema


class RuleConfigSchema(BaseModel):
    """Single rule configuration.

    Attributes:
        name: Unique identifier for this rule instance
        type: Rule type (e.g., "resource_ceiling", "metadata_injection")
        config: Type-specific configuration parameters
    """

    name: str
    type: str
    config: dict[str, Any] = Field(default_factory=dict)


class StoreConfigSchema(BaseModel):
    """Policy store configuration.

    Attributes:
        type: Store type ("memory", "sqlite" or "configmap")
        path: Path to SQLite database file (for sqlite type)
        data: Initial key -> namespace mapping (for memory type)
        namespace: Namespace holding the ConfigMaps (for configmap type)
        api_server: API server URL; in-cluster settings are used when empty
        token_path: Service-account token file (for configmap type)
        ca_path: CA bundle for the API server (for configmap type)
        cache_ttl_seconds: Wrap the store in a TTL cache when set
        cache_max_entries: Cache size bound
    """

    type: Literal["memory", "sqlite", "configmap"] = "memory"
    path: str = ""
    data: dict[str, dict[str, str]] = Field(default_factory=dict)
    namespace: str = "default"
    api_server: str = ""
    token_path: str = ""
    ca_path: str = ""
    cache_ttl_seconds: float | None = None
    cache_max_entries: int = 64


class RunnerInput(BaseModel):
    """Complete runner input, read as one JSON document from stdin.

    Attributes:
        operation: "validate" or "mutate"
        review: The inbound AdmissionReview
        validation_rules: Validation rules, in chain order
        mutation_rules: Mutation rules, in chain order
        store: Policy store configuration
        timeout_seconds: Deadline for the whole evaluation
    """

    operation: Literal["validate", "mutate"]
    review: AdmissionReviewInput
    validation_rules: list[RuleConfigSchema] = Field(default_factory=list)
    mutation_rules: list[RuleConfigSchema] = Field(default_factory=list)
    store: StoreConfigSchema = Field(default_factory=StoreConfigSchema)
    timeout_seconds: float | None = None


class StatusSchema(BaseModel):
    """``result`` of a verdict."""

    code: int | None = None
    message: str | None = None
    reason: str | None = None


class AdmissionResponseSchema(BaseModel):
    """``response`` section of an outbound AdmissionReview."""

    model_config = ConfigDict(populate_by_name=True)

    uid: str
    allowed: bool
    result: StatusSchema | None = None
    patch_type: str | None = Field(default=None, alias="patchType")
    patch: str | None = None


class AdmissionReviewOutput(BaseModel):
    """Outbound AdmissionReview."""

    model_config = ConfigDict(populate_by_name=True)

    api_version: str = Field(default="admission.k8s.io/v1", alias="apiVersion")
    kind: str = "AdmissionReview"
    response: AdmissionResponseSchema

    @classmethod
    def from_response(cls, response: AdmissionResponse) -> AdmissionReviewOutput:
        return cls.model_validate(response.to_review())


class RunnerOutput(BaseModel):
    """Complete runner output, written to stdout.

    The runner always outputs valid JSON matching this schema, even on
    errors.

    Attributes:
        success: Whether the engine reached a policy decision
        review: AdmissionReview to return to the API server
        error: Error message (on failure)
        error_type: Error class name (on failure)
    """

    success: bool
    review: AdmissionReviewOutput | None = None
    error: str = ""
    error_type: str = ""
