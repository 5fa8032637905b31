"""Validation and mutation chains — ordered rule execution."""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from workload_admission.outcome import RuleOutcome

if TYPE_CHECKING:
    from workload_admission.outcome import PatchOperation
    from workload_admission.rules.base import MutationRule, Rule, ValidationRule
    from workload_admission.stores.base import PolicyStore
    from workload_admission.workload import PodTemplate

logger = logging.getLogger(__name__)

RuleT = TypeVar("RuleT", bound="Rule")


class _Chain(Generic[RuleT]):
    """Ordered list of rules sharing one policy store."""

    def __init__(self, store: PolicyStore | None = None) -> None:
        self._store = store
        self._rules: list[RuleT] = []

    # ── registration ─────────────────────────────────────────

    async def add_rule(self, rule: RuleT) -> None:
        """Append *rule* to the chain and inject the shared store."""
        await rule.setup(self._store)
        self._rules.append(rule)

    # ── introspection ────────────────────────────────────────

    def get_rule(self, name: str) -> RuleT | None:
        """Look up a registered rule by its ``name``."""
        for rule in self._rules:
            if rule.name == name:
                return rule
        return None

    def list_rules(self) -> list[str]:
        """Return the names of all registered rules in chain order."""
        return [r.name for r in self._rules]

    def export(self) -> dict[str, Any]:
        """Return a JSON-serializable snapshot of all registered rules."""
        rules = [r.export() for r in self._rules]
        return {"rules": rules, "rule_count": len(rules)}

    @property
    def store(self) -> PolicyStore | None:
        return self._store


class ValidationChain(_Chain["ValidationRule"]):
    """Runs validation rules in registration order.

    * The first invalid outcome stops the chain; later rules never run.
    * Errors raised by a rule (e.g. ``StoreLookupError``) propagate untouched,
      so "policy says no" and "policy engine failed" stay distinct.
    """

    async def validate_all(
        self,
        template: PodTemplate,
        namespace: str,
        username: str,
    ) -> RuleOutcome:
        for rule in self._rules:
            outcome = await rule.validate(template, namespace, username)
            if not outcome.valid:
                logger.debug("Rule %s rejected pod template: %s", rule.name, outcome.reason)
                return outcome
        return RuleOutcome.accept(reason="valid")


class MutationChain(_Chain["MutationRule"]):
    """Runs every mutation rule in registration order and concatenates patches.

    Each rule receives its own copy of the original pod, so every operation
    is relative to the object as submitted.
    """

    async def mutate_all(self, pod: dict[str, Any]) -> list[PatchOperation]:
        operations: list[PatchOperation] = []
        for rule in self._rules:
            outcome = await rule.mutate(copy.deepcopy(pod))
            operations.extend(outcome.operations)
        return operations
