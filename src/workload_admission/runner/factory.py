# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Rule factory for creating rule instances from configuration.

Uses the Registry pattern to map type strings to rule classes,
allowing extensibility without modifying factory code.
"""

from __future__ import annotations

from typing import ClassVar, TypeVar

from workload_admission.rules import (
    MetadataInjectionRule,
    MutationRule,
    ResourceCeilingRule,
    Rule,
    ValidationRule,
)

from .schema import RuleConfigSchema

RuleT = TypeVar("RuleT", bound=Rule)


class RuleFactoryError(Exception):
    """Raised when rule creation fails."""

    pass


class RuleFactory:
    """Creates rule instances from configuration.

    Built-in rule types are available to every factory.  Extra types are
    registered per instance with `register`, so one factory never sees
    another's registrations.  Each chain only accepts rules with the
    matching capability: a mutation rule listed under validation rules is
    a configuration error.

    Example:
        factory = RuleFactory()
        configs = [
            RuleConfigSchema(
                name="cpu",
                type="resource_ceiling",
                config={"default_ceiling": 1500},
            ),
        ]
        rules = factory.create_validation_rules(configs)
    """

    _builtin: ClassVar[dict[str, type[Rule]]] = {
        "resource_ceiling": ResourceCeilingRule,
        "metadata_injection": MetadataInjectionRule,
    }

    def __init__(self) -> None:
        self._registry: dict[str, type[Rule]] = dict(self._builtin)

    def register(self, type_name: str, rule_class: type[Rule]) -> None:
        """Register a custom rule type.

        Args:
            type_name: Type string to use in configuration
            rule_class: Rule class to instantiate

        Raises:
            ValueError: If rule_class._rule_type doesn't match type_name
        """
        declared_type = rule_class._rule_type
        if declared_type != "base" and declared_type != type_name:
            raise ValueError(
                f"Rule {rule_class.__name__} has _rule_type='{declared_type}' "
                f"but is being registered as '{type_name}'"
            )
        self._registry[type_name] = rule_class

    def registered_types(self) -> list[str]:
        """Return list of registered rule type names."""
        return list(self._registry.keys())

    def create_validation_rules(self, configs: list[RuleConfigSchema]) -> list[ValidationRule]:
        """Create validation rules in configuration order.

        Raises:
            RuleFactoryError: If a type is unknown, not a validation rule,
                a name is repeated, or construction fails
        """
        return self._create_all(configs, ValidationRule)

    def create_mutation_rules(self, configs: list[RuleConfigSchema]) -> list[MutationRule]:
        """Create mutation rules in configuration order.

        Raises:
            RuleFactoryError: If a type is unknown, not a mutation rule,
                a name is repeated, or construction fails
        """
        return self._create_all(configs, MutationRule)

    def _create_all(self, configs: list[RuleConfigSchema], capability: type[RuleT]) -> list[RuleT]:
        rules: list[RuleT] = []
        seen: set[str] = set()

        for config in configs:
            if config.name in seen:
                raise RuleFactoryError(f"Duplicate rule name: '{config.name}'")
            seen.add(config.name)

            try:
                rule = self._create_one(config)
            except RuleFactoryError:
                raise
            except Exception as e:
                raise RuleFactoryError(
                    f"Failed to create rule '{config.name}' of type '{config.type}': {e}"
                ) from e

            if not isinstance(rule, capability):
                raise RuleFactoryError(
                    f"Rule '{config.name}' of type '{config.type}' is not a {capability.__name__}"
                )
            rules.append(rule)

        return rules

    def _create_one(self, config: RuleConfigSchema) -> Rule:
        rule_class = self._registry.get(config.type)
        if not rule_class:
            available = ", ".join(sorted(self.registered_types()))
            raise RuleFactoryError(
                f"Unknown rule type: '{config.type}'. Available types: {available}"
            )

        # All concrete rules accept a name kwarg, but base Rule doesn't declare it
        return rule_class(name=config.name, **config.config)  # type: ignore[call-arg]
