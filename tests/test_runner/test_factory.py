"""Tests for the rule factory."""

import pytest

from workload_admission.rules import MutationOutcome, MutationRule, ResourceCeilingRule
from workload_admission.runner.factory import RuleFactory, RuleFactoryError
from workload_admission.runner.schema import RuleConfigSchema


class TestRuleFactory:
    """Tests for RuleFactory."""

    def test_registered_types(self):
        types = RuleFactory().registered_types()

        assert "resource_ceiling" in types
        assert "metadata_injection" in types

    def test_create_resource_ceiling_rule(self):
        factory = RuleFactory()
        configs = [
            RuleConfigSchema(
                name="cpu",
                type="resource_ceiling",
                config={"default_ceiling": 1500, "privileged_ceiling": 2500},
            )
        ]

        rules = factory.create_validation_rules(configs)

        assert len(rules) == 1
        assert isinstance(rules[0], ResourceCeilingRule)
        assert rules[0].name == "cpu"
        assert rules[0].export()["config"]["default_ceiling"] == 1500

    def test_create_metadata_injection_rule(self):
        factory = RuleFactory()
        configs = [
            RuleConfigSchema(
                name="owner",
                type="metadata_injection",
                config={"field": "labels", "values": {"owner": "platform"}},
            )
        ]

        rules = factory.create_mutation_rules(configs)

        assert rules[0].export()["type"] == "metadata_injection"

    def test_preserves_order(self):
        factory = RuleFactory()
        configs = [
            RuleConfigSchema(name="second", type="resource_ceiling"),
            RuleConfigSchema(name="first", type="resource_ceiling", config={"resource": "memory"}),
        ]

        rules = factory.create_validation_rules(configs)

        assert [r.name for r in rules] == ["second", "first"]

    def test_unknown_type_raises_error(self):
        factory = RuleFactory()
        configs = [RuleConfigSchema(name="x", type="nonexistent")]

        with pytest.raises(RuleFactoryError, match="Unknown rule type"):
            factory.create_validation_rules(configs)

    def test_invalid_config_raises_error(self):
        factory = RuleFactory()
        configs = [
            RuleConfigSchema(
                name="cpu",
                type="resource_ceiling",
                config={"default_ceiling": 3000, "privileged_ceiling": 1000},
            )
        ]

        with pytest.raises(RuleFactoryError, match="Failed to create rule 'cpu'"):
            factory.create_validation_rules(configs)

    def test_unexpected_argument_raises_error(self):
        factory = RuleFactory()
        configs = [RuleConfigSchema(name="cpu", type="resource_ceiling", config={"bogus": 1})]

        with pytest.raises(RuleFactoryError):
            factory.create_validation_rules(configs)

    def test_duplicate_names_rejected(self):
        factory = RuleFactory()
        configs = [
            RuleConfigSchema(name="cpu", type="resource_ceiling"),
            RuleConfigSchema(name="cpu", type="resource_ceiling"),
        ]

        with pytest.raises(RuleFactoryError, match="Duplicate rule name"):
            factory.create_validation_rules(configs)

    def test_wrong_capability_rejected(self):
        factory = RuleFactory()

        with pytest.raises(RuleFactoryError, match="is not a ValidationRule"):
            factory.create_validation_rules(
                [RuleConfigSchema(name="m", type="metadata_injection", config={"values": {"a": "b"}})]
            )
        with pytest.raises(RuleFactoryError, match="is not a MutationRule"):
            factory.create_mutation_rules([RuleConfigSchema(name="cpu", type="resource_ceiling")])


class StampRule(MutationRule):
    _rule_type = "stamp"

    def __init__(self, *, name="stamp"):
        self._name = name

    @property
    def name(self):
        return self._name

    async def mutate(self, pod):
        return MutationOutcome.noop(self._name)


class TestRegistration:
    """Tests for registering custom rule types."""

    def test_register_custom_type(self):
        factory = RuleFactory()
        factory.register("stamp", StampRule)

        rules = factory.create_mutation_rules([RuleConfigSchema(name="s", type="stamp")])

        assert rules[0].name == "s"

    def test_registration_is_per_factory(self):
        RuleFactory().register("stamp", StampRule)

        assert "stamp" not in RuleFactory().registered_types()
        with pytest.raises(RuleFactoryError, match="Unknown rule type"):
            RuleFactory().create_mutation_rules([RuleConfigSchema(name="s", type="stamp")])

    def test_register_mismatched_type(self):
        with pytest.raises(ValueError):
            RuleFactory().register("other", ResourceCeilingRule)
