"""Custom exceptions for the workload_admission package."""

from __future__ import annotations


class AdmissionError(Exception):
    """Base exception for all admission-related errors."""


class DecodeError(AdmissionError):
    """Raised when an admitted object does not match the schema of its kind."""

    def __init__(self, kind: str, detail: str) -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"could not decode {kind or 'object'}: {detail}")


class StoreLookupError(AdmissionError):
    """Raised when the policy store cannot answer a lookup.

    The message is safe to surface to API clients; transport-level details
    are kept on ``detail`` for logging only.
    """

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"Policy store lookup failed during '{operation}'")


class RuleError(AdmissionError):
    """Raised when a rule cannot evaluate the object it was given."""

    def __init__(self, rule_name: str, detail: str) -> None:
        self.rule_name = rule_name
        super().__init__(f"Rule '{rule_name}' failed: {detail}")


class RuleConfigError(AdmissionError):
    """Raised when a rule is misconfigured."""

    def __init__(self, rule_name: str, message: str) -> None:
        self.rule_name = rule_name
        super().__init__(f"Rule '{rule_name}' misconfigured: {message}")
