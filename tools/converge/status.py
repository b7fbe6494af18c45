from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .kube import Resource


class ConditionNotMet(Exception):
    """A fetched resource has not converged to the expected state yet."""


class StatusMismatch(ConditionNotMet):
    def __init__(self, name: str, field: str, actual: Any, expected: Any) -> None:
        self.name = name
        self.field = field
        self.actual = actual
        self.expected = expected
        super().__init__(f"{name}: {field} {actual} != expected {expected}")


def _name(resource: Resource) -> str:
    return resource.get("metadata", {}).get("name", "<unknown>")


@dataclass(frozen=True)
class ExpectedStatus:
    """Replica counts a StatefulSet or ElasticsearchDataSet should report.

    Fields left as ``None`` are not checked. The status is only trusted once
    the controller has observed the current generation.
    """

    replicas: Optional[int] = None
    ready_replicas: Optional[int] = None
    updated_replicas: Optional[int] = None

    def matches(self, resource: Resource) -> None:
        name = _name(resource)
        generation = resource.get("metadata", {}).get("generation", 0) or 0
        status = resource.get("status", {}) or {}

        observed = status.get("observedGeneration", 0) or 0
        if observed != generation:
            raise StatusMismatch(name, "observedGeneration", observed, generation)

        checks = (
            ("replicas", self.replicas),
            ("updatedReplicas", self.updated_replicas),
            ("readyReplicas", self.ready_replicas),
        )
        for field, expected in checks:
            if expected is None:
                continue
            actual = status.get(field, 0) or 0
            if actual != expected:
                raise StatusMismatch(name, field, actual, expected)

    __call__ = matches
