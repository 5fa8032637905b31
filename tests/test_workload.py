"""Tests for workload extraction."""

import json

import pytest

from workload_admission import DecodeError, PodTemplate, WorkloadKind, extract
from workload_admission.workload import decode_pod

ALL_KINDS = [k.value for k in WorkloadKind]


# ── supported kinds ──────────────────────────────────────────


@pytest.mark.parametrize("kind", ALL_KINDS)
@pytest.mark.parametrize("count", [0, 1, 3])
def test_extract_keeps_containers_in_order(workload, kind, count):
    names = [f"c{i}" for i in range(count)]
    obj = workload(kind, [(n, "100m") for n in names])

    template, namespace = extract(kind, json.dumps(obj).encode())

    assert [c.name for c in template.containers] == names
    assert namespace == "team-a"
    assert template.namespace == "team-a"


@pytest.mark.parametrize("kind", ALL_KINDS)
def test_extract_init_containers(workload, kind):
    obj = workload(kind, [("app", "1")], init_containers=[("setup", "500m"), ("migrate", None)])

    template, _ = extract(kind, obj)

    assert [c.name for c in template.init_containers] == ["setup", "migrate"]
    assert template.init_containers[0].request_millis("cpu") == 500
    assert template.init_containers[1].request_millis("cpu") is None


def test_extract_accepts_enum_member(workload):
    template, _ = extract(WorkloadKind.CRON_JOB, workload("CronJob", [("job", "250m")]))
    assert template.containers[0].request_millis("cpu") == 250


def test_duplicate_container_names_are_kept(workload):
    template, _ = extract("Pod", workload("Pod", [("web", "1"), ("web", "2")]))
    assert [c.request_millis("cpu") for c in template.containers] == [1000, 2000]


def test_missing_namespace_is_empty():
    obj = {"kind": "Pod", "spec": {"containers": [{"name": "a"}]}}
    _, namespace = extract("Pod", obj)
    assert namespace == ""


def test_null_resources_are_tolerated():
    obj = {"spec": {"containers": [{"name": "a", "resources": None}], "initContainers": None}}
    template, _ = extract("Pod", obj)
    assert template.containers[0].request_millis("cpu") is None
    assert template.init_containers == []


def test_unknown_fields_are_ignored():
    obj = {"spec": {"containers": [{"name": "a", "ports": [{"containerPort": 80}]}], "hostNetwork": True}}
    template, _ = extract("Pod", obj)
    assert template.containers[0].name == "a"


def test_template_path_descriptors():
    assert WorkloadKind.POD.template_path == ("spec",)
    assert WorkloadKind.DEPLOYMENT.template_path == ("spec", "template", "spec")
    assert WorkloadKind.CRON_JOB.template_path == ("spec", "jobTemplate", "spec", "template", "spec")


# ── unsupported kinds ────────────────────────────────────────


@pytest.mark.parametrize("kind", ["Service", "ConfigMap", "", "deployment", "Widget"])
def test_unknown_kind_yields_empty_template(kind):
    template, namespace = extract(kind, b"this is not even json")
    assert template == PodTemplate()
    assert template.containers == []
    assert namespace == ""


def test_parse_unknown_kind():
    assert WorkloadKind.parse("Deployment") is WorkloadKind.DEPLOYMENT
    assert WorkloadKind.parse("Service") is None


# ── decode errors ────────────────────────────────────────────


def test_malformed_json():
    with pytest.raises(DecodeError) as exc_info:
        extract("Deployment", b"{not json")
    assert exc_info.value.kind == "Deployment"
    assert "invalid JSON" in str(exc_info.value)


def test_top_level_not_object():
    with pytest.raises(DecodeError):
        extract("Pod", b"[1, 2]")


@pytest.mark.parametrize(
    ("obj", "location"),
    [
        ({"spec": None}, "spec"),
        ({"spec": {"jobTemplate": None}}, "spec.jobTemplate"),
        ({"spec": {"jobTemplate": {"spec": {"template": None}}}}, "spec.jobTemplate.spec.template"),
        ({"spec": {"jobTemplate": {"spec": {"template": {"spec": None}}}}}, "spec.jobTemplate.spec.template.spec"),
    ],
)
def test_cronjob_null_at_any_level(obj, location):
    with pytest.raises(DecodeError) as exc_info:
        extract("CronJob", obj)
    assert f"'{location}'" in str(exc_info.value)


def test_missing_template_for_controller():
    with pytest.raises(DecodeError):
        extract("StatefulSet", {"metadata": {"namespace": "a"}, "spec": {"replicas": 2}})


def test_intermediate_level_not_object():
    with pytest.raises(DecodeError) as exc_info:
        extract("Job", {"spec": {"template": "oops"}})
    assert "not an object" in str(exc_info.value)


def test_containers_wrong_type():
    with pytest.raises(DecodeError) as exc_info:
        extract("Pod", {"spec": {"containers": {"name": "a"}}})
    assert "containers" in str(exc_info.value)


@pytest.mark.parametrize("cpu", ['"lots"', "NaN", "Infinity", "-Infinity", '"1e99999999"'])
def test_invalid_quantity_is_decode_error(cpu):
    raw = '{"spec": {"containers": [{"name": "a", "resources": {"requests": {"cpu": ' + cpu + "}}}]}}"
    with pytest.raises(DecodeError) as exc_info:
        extract("Pod", raw)
    assert "cpu" in str(exc_info.value)


def test_metadata_not_object():
    with pytest.raises(DecodeError):
        extract("Pod", {"metadata": "x", "spec": {"containers": []}})


# ── decode_pod ───────────────────────────────────────────────


def test_decode_pod_keeps_original_document(workload):
    obj = workload("Pod", [("web", "1")])
    obj["spec"]["nodeSelector"] = {"disk": "ssd"}
    assert decode_pod(json.dumps(obj)) == obj


def test_decode_pod_rejects_missing_spec():
    with pytest.raises(DecodeError):
        decode_pod(b'{"metadata": {"name": "x"}}')
