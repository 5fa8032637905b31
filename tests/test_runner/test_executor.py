"""Tests for the runner executor."""

import base64
import json

import pytest

from workload_admission.rules import CustomValidationRule
from workload_admission.runner.executor import ExecutionError, Executor
from workload_admission.runner.factory import RuleFactory
from workload_admission.runner.schema import RunnerInput, StoreConfigSchema
from workload_admission.stores import CachedStore, ConfigMapStore, InMemoryStore, SQLiteStore

REGULATED = {"team-a": "cpu<=2000m"}


def _input(obj, operation="validate", kind="Deployment", username="alice", **extra):
    payload = {
        "operation": operation,
        "review": {
            "apiVersion": "admission.k8s.io/v1",
            "kind": "AdmissionReview",
            "request": {
                "uid": "uid-1",
                "kind": {"group": "apps", "version": "v1", "kind": kind},
                "namespace": "team-a",
                "operation": "CREATE",
                "userInfo": {"username": username},
                "object": obj,
            },
        },
        "validation_rules": [{"name": "cpu", "type": "resource_ceiling"}],
        "store": {"type": "memory", "data": {"validator-config": REGULATED}},
    }
    payload.update(extra)
    return RunnerInput.model_validate(payload)


class TestValidate:
    """Validation reviews through the executor."""

    @pytest.fixture
    def executor(self):
        return Executor()

    async def test_denied(self, executor, workload):
        output = await executor.execute(_input(workload("Deployment", [("web", "2500m")])))

        assert output.success
        response = output.review.response
        assert response.uid == "uid-1"
        assert not response.allowed
        assert response.result.code == 403
        assert response.result.message.startswith("Container web has cpu request 2500m > 2000m")

    async def test_allowed_for_admin(self, executor, workload):
        obj = workload("Deployment", [("web", "2500m")])
        output = await executor.execute(_input(obj, username="kubernetes-admin"))

        assert output.success
        assert output.review.response.allowed
        assert output.review.response.result.code == 202
        assert output.review.response.result.message == "valid"

    async def test_unregulated_namespace(self, executor, workload):
        obj = workload("Deployment", [("web", "64")], namespace="sandbox")
        output = await executor.execute(_input(obj))
        assert output.review.response.allowed

    async def test_decode_error(self, executor):
        obj = {"kind": "Deployment", "spec": {"template": {"spec": {"containers": "web"}}}}
        output = await executor.execute(_input(obj))

        assert output.success
        assert output.review.response.result.code == 400

    async def test_missing_config_is_internal_error(self, executor, workload):
        obj = workload("Deployment", [("web", "1")])
        output = await executor.execute(_input(obj, store={"type": "memory", "data": {}}))

        assert not output.success
        assert output.error_type == "InternalError"
        assert output.review.response.result.code == 500
        assert output.review.response.result.reason == "InternalError"

    async def test_injected_store(self, workload):
        store = InMemoryStore({"validator-config": {"sandbox": "x"}})
        executor = Executor(store=store)

        output = await executor.execute(_input(workload("Deployment", [("web", "2500m")])))

        # team-a is not regulated by the injected store
        assert output.review.response.allowed


class TestMutate:
    """Mutation reviews through the executor."""

    async def test_patch_response(self, workload):
        pod = workload("Pod", [("web", "1")])
        input_data = _input(
            pod,
            operation="mutate",
            kind="Pod",
            mutation_rules=[
                {
                    "name": "owner",
                    "type": "metadata_injection",
                    "config": {"values": {"owner": "platform"}},
                }
            ],
        )

        output = await Executor().execute(input_data)

        assert output.success
        response = output.review.response
        assert response.allowed
        assert response.patch_type == "JSONPatch"
        operations = json.loads(base64.b64decode(response.patch))
        assert operations == [{"op": "add", "path": "/metadata/labels", "value": {"owner": "platform"}}]

    async def test_empty_patch(self, workload):
        obj = workload("Pod", [])
        output = await Executor().execute(_input(obj, operation="mutate", kind="Pod"))

        assert output.success
        assert base64.b64decode(output.review.response.patch) == b"[]"


class TestErrors:
    """Configuration failures never raise out of execute()."""

    async def test_unknown_rule_type(self, workload):
        obj = workload("Deployment", [("web", "1")])
        output = await Executor().execute(_input(obj, validation_rules=[{"name": "x", "type": "nope"}]))

        assert not output.success
        assert output.error_type == "RuleFactoryError"
        assert output.review is None

    async def test_sqlite_without_path(self, workload):
        obj = workload("Deployment", [("web", "1")])
        output = await Executor().execute(_input(obj, store={"type": "sqlite"}))

        assert not output.success
        assert output.error_type == "ExecutionError"


class TestCreateStore:
    """Tests for Executor._create_store()."""

    @pytest.fixture
    def executor(self):
        return Executor()

    def test_memory(self, executor):
        store = executor._create_store(StoreConfigSchema(data={"k": {"ns": "v"}}))
        assert isinstance(store, InMemoryStore)

    def test_sqlite(self, executor, tmp_path):
        store = executor._create_store(StoreConfigSchema(type="sqlite", path=str(tmp_path / "p.db")))
        assert isinstance(store, SQLiteStore)

    def test_sqlite_requires_path(self, executor):
        with pytest.raises(ExecutionError):
            executor._create_store(StoreConfigSchema(type="sqlite"))

    def test_configmap_with_api_server(self, executor):
        store = executor._create_store(StoreConfigSchema(type="configmap", api_server="https://10.0.0.1"))
        assert isinstance(store, ConfigMapStore)

    def test_cache_wrapper(self, executor):
        store = executor._create_store(StoreConfigSchema(cache_ttl_seconds=10))
        assert isinstance(store, CachedStore)


class TestInjectedFactory:
    """Custom rule types reach the chains through an injected factory."""

    async def test_registered_type_is_used(self, workload):
        factory = RuleFactory()
        factory.register("custom_validation", CustomValidationRule)
        executor = Executor(factory=factory)
        input_data = _input(
            workload("Deployment", [("web", "1")]),
            validation_rules=[
                {
                    "name": "never",
                    "type": "custom_validation",
                    "config": {"check": lambda t, ns, u: False, "deny_reason": "closed"},
                }
            ],
        )

        output = await executor.execute(input_data)

        assert output.success
        assert output.review.response.result.code == 403
        assert output.review.response.result.message == "closed"
