"""Shared test fixtures."""

from typing import Any

import pytest

from workload_admission import AdmissionCoordinator, MutationChain, ValidationChain
from workload_admission.stores import InMemoryStore

REGULATED = {"team-a": "cpu<=2000m", "payments": "cpu<=2000m"}


def _container(name: str, cpu: Any = None) -> dict[str, Any]:
    container: dict[str, Any] = {"name": name, "image": "nginx:1.27"}
    if cpu is not None:
        container["resources"] = {"requests": {"cpu": cpu}, "limits": {"cpu": "4"}}
    return container


def build_workload(
    kind: str,
    containers: list[tuple[str, Any]],
    init_containers: list[tuple[str, Any]] | None = None,
    namespace: str = "team-a",
) -> dict[str, Any]:
    spec: dict[str, Any] = {"containers": [_container(n, cpu) for n, cpu in containers]}
    if init_containers:
        spec["initContainers"] = [_container(n, cpu) for n, cpu in init_containers]

    metadata = {"name": "sample", "namespace": namespace}
    template = {"metadata": {"labels": {"app": "sample"}}, "spec": spec}

    if kind == "Pod":
        return {"apiVersion": "v1", "kind": kind, "metadata": metadata, "spec": spec}
    if kind == "CronJob":
        return {
            "apiVersion": "batch/v1",
            "kind": kind,
            "metadata": metadata,
            "spec": {"schedule": "*/5 * * * *", "jobTemplate": {"spec": {"template": template}}},
        }
    return {"apiVersion": "apps/v1", "kind": kind, "metadata": metadata, "spec": {"template": template}}


@pytest.fixture
def workload():
    return build_workload


@pytest.fixture
def store():
    return InMemoryStore({"validator-config": REGULATED})


@pytest.fixture
def validation_chain(store):
    return ValidationChain(store)


@pytest.fixture
def mutation_chain(store):
    return MutationChain(store)


@pytest.fixture
def coordinator(validation_chain, mutation_chain):
    return AdmissionCoordinator(validation_chain, mutation_chain)
