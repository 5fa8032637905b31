"""Custom rules — wrap any callable as a rule without subclassing."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from workload_admission.exceptions import RuleError
from workload_admission.outcome import MutationOutcome, PatchOperation, RuleOutcome
from workload_admission.rules.base import MutationRule, ValidationRule

if TYPE_CHECKING:
    from workload_admission.workload import PodTemplate

# Both callables can be sync or async.
# A check receives (template, namespace, username) and returns bool (True = valid).
CheckFn = Callable[["PodTemplate", str, str], Any]
# A patch function receives the pod and returns patch operations (or dicts).
PatchFn = Callable[[dict[str, Any]], Any]


async def _call(fn: Callable[..., Any], *args: Any) -> Any:
    result = fn(*args)
    if asyncio.iscoroutine(result):
        result = await result
    return result


class CustomValidationRule(ValidationRule):
    """Wraps a plain predicate as a validation rule.

    Parameters:
        name:        Unique rule name.
        check:       Callable ``(template, namespace, username) -> bool``.
                     ``True`` = valid.  May be sync or async.
        deny_reason: Reason returned when the check returns ``False``.
    """

    _rule_type = "custom_validation"
    _rule_description = "Custom callable-based validation rule"

    def __init__(
        self,
        *,
        name: str,
        check: CheckFn,
        deny_reason: str = "Custom rule check failed",
    ) -> None:
        super().__init__()
        self._name = name
        self._check = check
        self._deny_reason = deny_reason

    @property
    def name(self) -> str:
        return self._name

    def export(self) -> dict[str, Any]:
        data = super().export()
        data["config"] = {"deny_reason": self._deny_reason}
        return data

    async def validate(
        self,
        template: PodTemplate,
        namespace: str,
        username: str,
    ) -> RuleOutcome:
        if await _call(self._check, template, namespace, username):
            return RuleOutcome.accept(self.name)
        return RuleOutcome.reject(self.name, self._deny_reason)


class CustomMutationRule(MutationRule):
    """Wraps a plain function returning patch operations as a mutation rule.

    Parameters:
        name:  Unique rule name.
        patch: Callable ``(pod) -> list`` of :class:`PatchOperation` or
               ``{"op", "path", "value"}`` dicts.  May be sync or async.
    """

    _rule_type = "custom_mutation"
    _rule_description = "Custom callable-based mutation rule"

    def __init__(self, *, name: str, patch: PatchFn) -> None:
        super().__init__()
        self._name = name
        self._patch = patch

    @property
    def name(self) -> str:
        return self._name

    async def mutate(self, pod: dict[str, Any]) -> MutationOutcome:
        produced = await _call(self._patch, pod) or []
        operations: list[PatchOperation] = []
        for item in produced:
            if isinstance(item, PatchOperation):
                operations.append(item)
                continue
            try:
                operations.append(PatchOperation.from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                raise RuleError(self.name, f"invalid patch operation {item!r}: {exc}") from exc
        return MutationOutcome.of(self.name, operations)
