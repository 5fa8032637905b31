"""RuleOutcome and MutationOutcome — the results of a single rule evaluation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

PatchOp = Literal["add", "replace", "remove"]

_ALLOWED_OPS = frozenset({"add", "replace", "remove"})


@dataclass(frozen=True)
class RuleOutcome:
    """Immutable result returned by a validation rule.

    Attributes:
        valid:     ``True`` if the rule accepts the pod template.
        rule_name: Name of the rule that produced this outcome.
        reason:    Human-readable explanation (mainly useful on rejection).
        metadata:  Extra data the rule wants to surface for audit
                   (observed value, applicable ceiling, etc.).
    """

    valid: bool
    rule_name: str = ""
    reason: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    # ── Factory helpers ──────────────────────────────────────

    @staticmethod
    def accept(rule_name: str = "", reason: str = "valid") -> RuleOutcome:
        return RuleOutcome(valid=True, rule_name=rule_name, reason=reason)

    @staticmethod
    def reject(rule_name: str, reason: str, **meta: Any) -> RuleOutcome:
        return RuleOutcome(
            valid=False,
            rule_name=rule_name,
            reason=reason,
            metadata=meta,
        )


@dataclass(frozen=True)
class PatchOperation:
    """One JSON-patch operation, relative to the original object."""

    op: PatchOp
    path: str
    value: Any = None

    def __post_init__(self) -> None:
        if self.op not in _ALLOWED_OPS:
            raise ValueError(f"Unsupported patch operation: '{self.op}'")
        if not self.path.startswith("/"):
            raise ValueError(f"Patch path must be a JSON pointer: '{self.path}'")

    def to_dict(self) -> dict[str, Any]:
        if self.op == "remove":
            return {"op": self.op, "path": self.path}
        return {"op": self.op, "path": self.path, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PatchOperation:
        return cls(op=data["op"], path=data["path"], value=data.get("value"))


@dataclass(frozen=True)
class MutationOutcome:
    """Ordered patch operations produced by a mutation rule.

    An empty ``operations`` tuple is a legal no-op.
    """

    rule_name: str = ""
    operations: tuple[PatchOperation, ...] = ()

    @staticmethod
    def noop(rule_name: str = "") -> MutationOutcome:
        return MutationOutcome(rule_name=rule_name)

    @staticmethod
    def of(rule_name: str, operations: list[PatchOperation]) -> MutationOutcome:
        return MutationOutcome(rule_name=rule_name, operations=tuple(operations))
