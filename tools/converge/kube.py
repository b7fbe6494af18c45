from __future__ import annotations

import json
import re
import subprocess
from dataclasses import dataclass
from typing import Any, Callable, Sequence

Resource = dict[str, Any]

EDS_KIND = "elasticsearchdatasets.zalando.org"
STATEFULSET_KIND = "statefulsets"
SERVICE_KIND = "services"

_SERVER_REASON = re.compile(r"Error from server \((\w+)\)")


def _reason(stderr: str) -> str | None:
    match = _SERVER_REASON.search(stderr)
    return match.group(1) if match else None


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str
    stderr: str


class CommandError(RuntimeError):
    def __init__(self, command: Sequence[str], result: CommandResult) -> None:
        self.command = list(command)
        self.result = result
        super().__init__(self._build_message())

    @property
    def reason(self) -> str | None:
        """Status reason reported by the API server, e.g. ``NotFound``."""
        return _reason(self.result.stderr)

    def _build_message(self) -> str:
        cmd = " ".join(self.command)
        details = self.result.stderr.strip() or self.result.stdout.strip() or "unknown error"
        return f"Command failed: {cmd}\n{details}"


class ResourceNotFound(CommandError):
    pass


class ResourceAlreadyExists(CommandError):
    pass


class ResourceConflict(CommandError):
    pass


_ERRORS_BY_REASON: dict[str, type[CommandError]] = {
    "NotFound": ResourceNotFound,
    "AlreadyExists": ResourceAlreadyExists,
    "Conflict": ResourceConflict,
}


def run_command(command: Sequence[str], input: str | None = None) -> CommandResult:
    proc = subprocess.run(
        list(command),
        check=False,
        text=True,
        capture_output=True,
        input=input,
    )
    return CommandResult(
        returncode=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
    )


def run_or_raise(command: Sequence[str], input: str | None = None) -> CommandResult:
    result = run_command(command, input=input)
    if result.returncode != 0:
        error_cls = _ERRORS_BY_REASON.get(_reason(result.stderr) or "", CommandError)
        raise error_cls(command, result)
    return result


Runner = Callable[..., CommandResult]


@dataclass(frozen=True)
class ResourceClient:
    """kubectl-backed access to one namespaced resource kind."""

    kind: str
    namespace: str
    run: Runner = run_or_raise

    def _kubectl(self, *args: str) -> list[str]:
        return ["kubectl", "-n", self.namespace, *args]

    def get(self, name: str) -> Resource:
        result = self.run(self._kubectl("get", self.kind, name, "-o", "json"))
        return json.loads(result.stdout)

    def create(self, obj: Resource) -> Resource:
        result = self.run(self._kubectl("create", "-f", "-", "-o", "json"), input=json.dumps(obj))
        return json.loads(result.stdout)

    def replace(self, obj: Resource) -> Resource:
        result = self.run(self._kubectl("replace", "-f", "-", "-o", "json"), input=json.dumps(obj))
        return json.loads(result.stdout)

    def delete(self, name: str, grace_period_seconds: int | None = None) -> None:
        args = ["delete", self.kind, name, "--wait=false"]
        if grace_period_seconds is not None:
            args.append(f"--grace-period={grace_period_seconds}")
        self.run(self._kubectl(*args))


@dataclass(frozen=True)
class Cluster:
    namespace: str
    run: Runner = run_or_raise

    def client(self, kind: str) -> ResourceClient:
        return ResourceClient(kind=kind, namespace=self.namespace, run=self.run)

    @property
    def eds(self) -> ResourceClient:
        return self.client(EDS_KIND)

    @property
    def statefulsets(self) -> ResourceClient:
        return self.client(STATEFULSET_KIND)

    @property
    def services(self) -> ResourceClient:
        return self.client(SERVICE_KIND)
