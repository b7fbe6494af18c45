from __future__ import annotations

import shutil
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .kube import EDS_KIND, CommandError, run_command, run_or_raise


class Status(str, Enum):
    OK = "OK"
    WARN = "WRN"
    ERR = "ERR"


@dataclass(frozen=True)
class CheckResult:
    name: str
    status: Status
    message: str


def _first_line(text: str) -> str:
    for line in text.splitlines():
        line = line.strip()
        if line:
            return line
    return ""


def _check_kubectl() -> CheckResult:
    path = shutil.which("kubectl")
    if not path:
        return CheckResult(name="kubectl", status=Status.ERR, message="not found")

    proc = run_command(["kubectl", "version", "--client"])
    ver = _first_line(proc.stdout) or "version output not available"
    return CheckResult(name="kubectl", status=Status.OK, message=f"{path} | {ver}")


def _check_api(name: str, command: list[str], ok_message: str) -> CheckResult:
    try:
        run_or_raise(command)
    except CommandError as e:
        msg = _first_line(e.result.stderr) or _first_line(e.result.stdout) or "unknown error"
        return CheckResult(name=name, status=Status.ERR, message=msg)
    return CheckResult(name=name, status=Status.OK, message=ok_message)


def run_doctor(namespace: str | None = None) -> list[CheckResult]:
    kubectl = _check_kubectl()
    if kubectl.status == Status.ERR:
        return [kubectl]

    checks: list[CheckResult] = [
        kubectl,
        _check_api("cluster", ["kubectl", "cluster-info"], "reachable"),
        _check_api("eds crd", ["kubectl", "get", "crd", EDS_KIND], "installed"),
    ]
    if namespace:
        checks.append(_check_api(f"namespace {namespace}", ["kubectl", "get", "namespace", namespace], "exists"))
    else:
        checks.append(CheckResult(name="namespace", status=Status.WARN, message="E2E_NAMESPACE not set"))
    return checks


def exit_code(results: Iterable[CheckResult]) -> int:
    for r in results:
        if r.status == Status.ERR:
            return 1
    return 0
