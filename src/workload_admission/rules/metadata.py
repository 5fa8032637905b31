"""MetadataInjectionRule — add labels or annotations to admitted pods."""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any, Literal

import jsonpatch

from workload_admission.exceptions import RuleConfigError, RuleError
from workload_admission.outcome import MutationOutcome, PatchOperation
from workload_admission.rules.base import MutationRule

logger = logging.getLogger(__name__)

MetadataField = Literal["labels", "annotations"]


class MetadataInjectionRule(MutationRule):
    """Injects fixed labels or annotations into ``metadata``.

    The pod is rewritten on a copy and the patch is the JSON diff between
    the original and the rewritten document, so keys are escaped and
    missing maps are created exactly as a JSON-patch consumer expects.

    Parameters:
        name:      Unique rule name.
        field:     ``"labels"`` or ``"annotations"``.
        values:    Keys and values to inject.
        overwrite: Replace keys the pod already sets.  When ``False`` the
                   existing value wins.
    """

    _rule_type = "metadata_injection"
    _rule_description = "Injects labels or annotations into pod metadata"

    def __init__(
        self,
        *,
        name: str = "metadata_injection",
        field: MetadataField = "labels",
        values: Mapping[str, str],
        overwrite: bool = False,
    ) -> None:
        if field not in ("labels", "annotations"):
            raise RuleConfigError(name, f"field must be 'labels' or 'annotations', got '{field}'")
        if not values:
            raise RuleConfigError(name, "values must not be empty")
        super().__init__()
        self._name = name
        self.field = field
        self.values = dict(values)
        self.overwrite = overwrite

    @property
    def name(self) -> str:
        return self._name

    def export(self) -> dict[str, Any]:
        data = super().export()
        data["config"] = {
            "field": self.field,
            "values": self.values,
            "overwrite": self.overwrite,
        }
        return data

    async def mutate(self, pod: dict[str, Any]) -> MutationOutcome:
        rewritten = copy.deepcopy(pod)
        metadata = rewritten.get("metadata")
        if not isinstance(metadata, dict):
            metadata = rewritten["metadata"] = {}
        current = metadata.get(self.field)
        target = dict(current) if isinstance(current, dict) else {}

        for key, value in self.values.items():
            if self.overwrite or key not in target:
                target[key] = value
        metadata[self.field] = target

        operations: list[PatchOperation] = []
        for op in jsonpatch.make_patch(pod, rewritten):
            try:
                operations.append(PatchOperation.from_dict(op))
            except ValueError as exc:
                raise RuleError(self.name, str(exc)) from exc

        logger.debug("%s produced %d operation(s)", self.name, len(operations))
        return MutationOutcome.of(self.name, operations)
