from __future__ import annotations

from typing import Callable, Iterable, Protocol

from .kube import Cluster, CommandError, Resource, ResourceNotFound
from .wait import Awaiter, LogFn, Outcome, Probe, WaitSpec

Condition = Callable[[Resource], None]


class Fetcher(Protocol):
    kind: str

    def get(self, name: str) -> Resource: ...


def resource_exists(fetcher: Fetcher, name: str) -> Probe:
    """Probe that is done once ``name`` can be fetched.

    Only ``NotFound`` is worth waiting on; any other API error (forbidden,
    unreachable server) will not go away by polling and fails the wait.
    """

    def probe() -> Outcome:
        try:
            fetcher.get(name)
        except ResourceNotFound as e:
            return Outcome.retry(e)
        except CommandError as e:
            return Outcome.fatal(e)
        return Outcome.done()

    return probe


def evaluate(resource: Resource, conditions: Iterable[Condition]) -> Outcome:
    for condition in conditions:
        try:
            condition(resource)
        except Exception as e:
            return Outcome.retry(e)
    return Outcome.done()


def conditions_met(fetcher: Fetcher, name: str, conditions: Iterable[Condition]) -> Probe:
    conditions = list(conditions)

    def probe() -> Outcome:
        try:
            resource = fetcher.get(name)
        except CommandError as e:
            return Outcome.fatal(e)
        return evaluate(resource, conditions)

    return probe


def resource_created(fetcher: Fetcher, name: str, spec: WaitSpec | None = None, log: LogFn = print) -> Awaiter:
    return Awaiter(f"creation of {fetcher.kind} {name}", spec=spec, log=log).with_probe(
        resource_exists(fetcher, name)
    )


def wait_for_resource(fetcher: Fetcher, name: str, spec: WaitSpec | None = None, log: LogFn = print) -> Resource:
    resource_created(fetcher, name, spec=spec, log=log).wait()
    return fetcher.get(name)


def wait_for_condition(
    fetcher: Fetcher,
    name: str,
    *conditions: Condition,
    spec: WaitSpec | None = None,
    log: LogFn = print,
) -> None:
    awaiter = Awaiter(f"{fetcher.kind} {name} to reach desired condition", spec=spec, log=log)
    awaiter.with_probe(conditions_met(fetcher, name, conditions)).wait()


def wait_for_eds(cluster: Cluster, name: str, spec: WaitSpec | None = None, log: LogFn = print) -> Resource:
    return wait_for_resource(cluster.eds, name, spec=spec, log=log)


def wait_for_statefulset(cluster: Cluster, name: str, spec: WaitSpec | None = None, log: LogFn = print) -> Resource:
    return wait_for_resource(cluster.statefulsets, name, spec=spec, log=log)


def wait_for_service(cluster: Cluster, name: str, spec: WaitSpec | None = None, log: LogFn = print) -> Resource:
    return wait_for_resource(cluster.services, name, spec=spec, log=log)


def wait_for_eds_condition(
    cluster: Cluster,
    name: str,
    *conditions: Condition,
    spec: WaitSpec | None = None,
    log: LogFn = print,
) -> None:
    wait_for_condition(cluster.eds, name, *conditions, spec=spec, log=log)


def wait_for_sts_condition(
    cluster: Cluster,
    name: str,
    *conditions: Condition,
    spec: WaitSpec | None = None,
    log: LogFn = print,
) -> None:
    wait_for_condition(cluster.statefulsets, name, *conditions, spec=spec, log=log)
