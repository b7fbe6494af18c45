from __future__ import annotations

from typing import Any

ES_IMAGE = "docker.elastic.co/elasticsearch/elasticsearch"
STRESS_IMAGE = "alexeiled/stress-ng"


def _resources(memory: str, cpu: str) -> dict[str, Any]:
    quantities = {"memory": memory, "cpu": cpu}
    return {"limits": dict(quantities), "requests": dict(quantities)}


def eds_pod_spec(node_group: str, version: str, config_map: str) -> dict[str, Any]:
    return {
        "securityContext": {"runAsUser": 1000, "runAsGroup": 0, "fsGroup": 0},
        "containers": [
            {
                "name": "elasticsearch",
                "image": f"{ES_IMAGE}:{version}",
                "ports": [{"containerPort": 9200}, {"containerPort": 9300}],
                "env": [
                    {"name": "ES_JAVA_OPTS", "value": "-Xms356m -Xmx356m"},
                    {"name": "node.roles", "value": "data"},
                    {"name": "node.attr.group", "value": node_group},
                ],
                "resources": _resources("1Gi", "100m"),
                "readinessProbe": {
                    "initialDelaySeconds": 15,
                    "httpGet": {"path": "/_cluster/health?local=true", "port": 9200, "scheme": "HTTP"},
                },
                "volumeMounts": [
                    {"name": "data", "mountPath": "/usr/share/elasticsearch/data"},
                    {
                        "name": "config",
                        "mountPath": "/usr/share/elasticsearch/config/elasticsearch.yml",
                        "subPath": "elasticsearch.yml",
                    },
                ],
            }
        ],
        "terminationGracePeriodSeconds": 5,
        "volumes": [
            {"name": "data", "emptyDir": {"medium": "Memory"}},
            {
                "name": "config",
                "configMap": {
                    "name": config_map,
                    "items": [{"key": "elasticsearch.yml", "path": "elasticsearch.yml"}],
                },
            },
        ],
    }


def eds_pod_spec_with_cpu_load(node_group: str, version: str, config_map: str) -> dict[str, Any]:
    """ES pod with a stress-ng sidecar keeping one core busy, for CPU based scaling tests."""
    pod_spec = eds_pod_spec(node_group, version, config_map)
    pod_spec["containers"].append(
        {
            "name": "stress-ng",
            "image": STRESS_IMAGE,
            "args": ["--cpu=1", "--cpu-load=10"],
            "resources": _resources("50Mi", "100m"),
        }
    )
    return pod_spec


def eds_spec(replicas: int, pod_spec: dict[str, Any]) -> dict[str, Any]:
    return {
        "replicas": replicas,
        "template": {
            "metadata": {"labels": {"application": "elasticsearch"}},
            "spec": pod_spec,
        },
    }
