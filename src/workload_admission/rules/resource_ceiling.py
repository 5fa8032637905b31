"""ResourceCeilingRule — cap container CPU requests in regulated namespaces."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from workload_admission.exceptions import RuleConfigError, StoreLookupError
from workload_admission.outcome import RuleOutcome
from workload_admission.rules.base import ValidationRule

if TYPE_CHECKING:
    from workload_admission.workload import Container, PodTemplate

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_KEY = "validator-config"
DEFAULT_CEILING_MILLIS = 2000
PRIVILEGED_CEILING_MILLIS = 3000
PRIVILEGED_USERS = ("kubernetes-admin",)


class ResourceCeilingRule(ValidationRule):
    """Rejects pods whose containers request more of a resource than allowed.

    The rule only applies to namespaces listed in the policy store under
    ``config_key``; the store is read once per evaluation.  Containers are
    checked first, then init containers, each in declaration order, and the
    first offender is reported.  Containers without a request are exempt.

    A failed lookup raises :class:`StoreLookupError`: the rule never falls
    back to "valid" when it cannot see the policy.

    Parameters:
        name:               Unique rule name.
        config_key:         Store key holding the namespace -> limit data map.
        default_ceiling:    Ceiling in thousandths (millicores for ``cpu``).
        privileged_ceiling: Ceiling for ``privileged_users``; must be higher.
        privileged_users:   Caller identities granted the privileged ceiling.
        resource:           Resource name to inspect in ``requests``.
        lookup_timeout:     Seconds allowed for the store lookup.
    """

    _rule_type = "resource_ceiling"
    _rule_description = "Caps per-container resource requests in regulated namespaces"

    def __init__(
        self,
        *,
        name: str = "cpu_request_ceiling",
        config_key: str = DEFAULT_CONFIG_KEY,
        default_ceiling: int = DEFAULT_CEILING_MILLIS,
        privileged_ceiling: int = PRIVILEGED_CEILING_MILLIS,
        privileged_users: Iterable[str] = PRIVILEGED_USERS,
        resource: str = "cpu",
        lookup_timeout: float | None = 5.0,
    ) -> None:
        if default_ceiling < 0:
            raise RuleConfigError(name, "default_ceiling must not be negative")
        if privileged_ceiling <= default_ceiling:
            raise RuleConfigError(
                name,
                f"privileged_ceiling ({privileged_ceiling}) must exceed "
                f"default_ceiling ({default_ceiling})",
            )
        super().__init__()
        self._name = name
        self.config_key = config_key
        self.default_ceiling = default_ceiling
        self.privileged_ceiling = privileged_ceiling
        self.privileged_users = frozenset(privileged_users)
        self.resource = resource
        self.lookup_timeout = lookup_timeout

    @property
    def name(self) -> str:
        return self._name

    def export(self) -> dict[str, Any]:
        data = super().export()
        data["config"] = {
            "config_key": self.config_key,
            "default_ceiling": self.default_ceiling,
            "privileged_ceiling": self.privileged_ceiling,
            "privileged_users": sorted(self.privileged_users),
            "resource": self.resource,
            "lookup_timeout": self.lookup_timeout,
        }
        return data

    def ceiling_for(self, username: str) -> int:
        if username in self.privileged_users:
            return self.privileged_ceiling
        return self.default_ceiling

    async def validate(
        self,
        template: PodTemplate,
        namespace: str,
        username: str,
    ) -> RuleOutcome:
        if self.store is None:
            raise StoreLookupError("get", f"rule '{self.name}' has no policy store")

        namespaces = await self.store.get(self.config_key, timeout=self.lookup_timeout)
        if namespace not in namespaces:
            logger.debug("Namespace %r is not regulated by %s", namespace, self.name)
            return RuleOutcome.accept(self.name, f"valid {self.resource} request")

        ceiling = self.ceiling_for(username)
        checks = [("Container", c) for c in template.containers]
        checks += [("Init container", c) for c in template.init_containers]

        for container_type, container in checks:
            outcome = self._check(container, container_type, ceiling, namespace, namespaces)
            if not outcome.valid:
                return outcome

        return RuleOutcome.accept(self.name, f"valid {self.resource} request")

    def _check(
        self,
        container: Container,
        container_type: str,
        ceiling: int,
        namespace: str,
        namespaces: dict[str, str],
    ) -> RuleOutcome:
        requested = container.request_millis(self.resource)
        if requested is None or requested <= ceiling:
            return RuleOutcome.accept(self.name)

        snapshot = ", ".join(f"{ns}={data}" for ns, data in sorted(namespaces.items()))
        return RuleOutcome.reject(
            self.name,
            f"{container_type} {container.name} has {self.resource} request "
            f"{requested}m > {ceiling}m in {namespace} namespace. "
            f"Validated namespaces: {{{snapshot}}}",
            container=container.name,
            container_type=container_type,
            requested=requested,
            ceiling=ceiling,
            namespace=namespace,
        )
