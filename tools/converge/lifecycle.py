from __future__ import annotations

import copy
from typing import Any, Mapping

from .config import HarnessConfig
from .kube import Resource, ResourceClient

OWNER_ANNOTATION = "es-operator.zalando.org/operator"
GROUP_ENV = "node.attr.group"
DELETE_GRACE_PERIOD_SECONDS = 10


def apply_env_overlay(pod_spec: dict[str, Any], values: Mapping[str, str]) -> None:
    """Set the value of every container env var named in ``values``, in place."""
    for container in pod_spec.get("containers", []):
        for env in container.get("env", []) or []:
            if env.get("name") in values:
                env["value"] = values[env["name"]]


def create_eds(client: ResourceClient, name: str, spec: Mapping[str, Any], config: HarnessConfig) -> Resource:
    eds_spec = copy.deepcopy(dict(spec))
    pod_spec = eds_spec.get("template", {}).get("spec", {})
    apply_env_overlay(pod_spec, {GROUP_ENV: name})

    eds = {
        "apiVersion": "zalando.org/v1",
        "kind": "ElasticsearchDataSet",
        "metadata": {
            "name": name,
            "namespace": config.namespace,
            "annotations": {OWNER_ANNOTATION: config.operator_id},
        },
        "spec": eds_spec,
    }
    return client.create(eds)


def update_eds(client: ResourceClient, eds: Resource) -> Resource:
    return client.replace(eds)


def delete_eds(client: ResourceClient, name: str, grace_period_seconds: int = DELETE_GRACE_PERIOD_SECONDS) -> None:
    client.delete(name, grace_period_seconds=grace_period_seconds)
