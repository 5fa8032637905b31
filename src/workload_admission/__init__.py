"""workload_admission — admission policy engine for Kubernetes workloads.

Every workload kind reduces to one pod template.  Validation rules run in
registration order and the first rejection stops the chain; mutation
rules all run and their JSON-patch operations are concatenated.
"""

from workload_admission.chains import MutationChain, ValidationChain
from workload_admission.coordinator import AdmissionCoordinator
from workload_admission.exceptions import (
    AdmissionError,
    DecodeError,
    RuleConfigError,
    RuleError,
    StoreLookupError,
)
from workload_admission.outcome import MutationOutcome, PatchOperation, RuleOutcome
from workload_admission.request import AdmissionRequest
from workload_admission.review import AdmissionResponse, build_patch, build_verdict
from workload_admission.workload import PodTemplate, WorkloadKind, extract

__all__ = [
    "AdmissionCoordinator",
    "AdmissionError",
    "AdmissionRequest",
    "AdmissionResponse",
    "DecodeError",
    "MutationChain",
    "MutationOutcome",
    "PatchOperation",
    "PodTemplate",
    "RuleConfigError",
    "RuleError",
    "RuleOutcome",
    "StoreLookupError",
    "ValidationChain",
    "WorkloadKind",
    "build_patch",
    "build_verdict",
    "extract",
]
