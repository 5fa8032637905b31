"""Rule ABCs — the two capability sets every admission rule implements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from workload_admission.outcome import MutationOutcome, RuleOutcome
    from workload_admission.stores.base import PolicyStore
    from workload_admission.workload import PodTemplate


class Rule(ABC):
    """Base class for every rule.

    Subclasses **must** define a ``name`` property (or class attribute).
    Rules hold configuration only; everything request-specific arrives as
    arguments, so one instance can serve concurrent requests.

    Class Variables:
        _rule_type: Type identifier for configuration (e.g., "resource_ceiling").
        _rule_description: Human-readable description of the rule.
    """

    _rule_type: ClassVar[str] = "base"
    _rule_description: ClassVar[str] = ""

    store: PolicyStore | None

    def __init__(self) -> None:
        self.store = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable identifier used in logs and outcomes."""
        ...

    async def setup(self, store: PolicyStore | None) -> None:
        """Called once when the rule is registered with a chain.

        The default implementation just keeps the store reference.
        """
        self.store = store

    def export(self) -> dict[str, Any]:
        """Return a JSON-serializable snapshot of this rule.

        Subclasses should call ``super().export()`` and populate the
        ``"config"`` key in the returned dict.
        """
        return {
            "name": self.name,
            "type": self._rule_type,
            "description": self._rule_description,
            "config": {},
        }


class ValidationRule(Rule):
    """Inspects a pod template and returns a verdict."""

    @abstractmethod
    async def validate(
        self,
        template: PodTemplate,
        namespace: str,
        username: str,
    ) -> RuleOutcome:
        """Return ``RuleOutcome.accept`` or ``RuleOutcome.reject``.

        Raises:
            StoreLookupError: If the policy store could not be consulted.
        """
        ...


class MutationRule(Rule):
    """Inspects a pod and returns the patch operations to apply to it."""

    @abstractmethod
    async def mutate(self, pod: dict[str, Any]) -> MutationOutcome:
        """Return operations relative to *pod*; may be empty.

        *pod* is a private copy; rules may modify it freely.
        """
        ...
