"""Built-in rule implementations."""

from workload_admission.outcome import MutationOutcome, PatchOperation, RuleOutcome
from workload_admission.rules.base import MutationRule, Rule, ValidationRule
from workload_admission.rules.custom import CustomMutationRule, CustomValidationRule
from workload_admission.rules.metadata import MetadataInjectionRule
from workload_admission.rules.resource_ceiling import ResourceCeilingRule

__all__ = [
    "CustomMutationRule",
    "CustomValidationRule",
    "MetadataInjectionRule",
    "MutationOutcome",
    "MutationRule",
    "PatchOperation",
    "ResourceCeilingRule",
    "Rule",
    "RuleOutcome",
    "ValidationRule",
]
