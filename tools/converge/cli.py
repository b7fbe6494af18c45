from __future__ import annotations

import os
import shutil
from datetime import timedelta
from typing import Optional

import typer

from tools.converge.config import ConfigError, HarnessConfig, harness_config
from tools.converge.doctor import exit_code, run_doctor
from tools.converge.kube import EDS_KIND, SERVICE_KIND, STATEFULSET_KIND, Cluster, CommandError, ResourceClient
from tools.converge.probes import wait_for_condition, wait_for_resource
from tools.converge.status import ConditionNotMet, ExpectedStatus
from tools.converge.wait import WaitSpec

app = typer.Typer(no_args_is_help=True)

KINDS = {
    "eds": EDS_KIND,
    "sts": STATEFULSET_KIND,
    "service": SERVICE_KIND,
}


def _cluster(cfg: HarnessConfig) -> Cluster:
    if not shutil.which("kubectl"):
        typer.echo("ERROR: kubectl not found on PATH")
        raise typer.Exit(code=1)
    return Cluster(namespace=cfg.namespace)


def _config() -> HarnessConfig:
    try:
        return harness_config()
    except ConfigError as e:
        typer.echo(f"ERROR: {e}")
        raise typer.Exit(code=1)


def _client(kind: str, cfg: HarnessConfig) -> ResourceClient:
    if kind not in KINDS:
        typer.echo(f"ERROR: unknown kind {kind!r}, expected one of {', '.join(KINDS)}")
        raise typer.Exit(code=2)
    return _cluster(cfg).client(KINDS[kind])


def _wait_spec(cfg: HarnessConfig, timeout: Optional[float]) -> WaitSpec:
    if timeout is None:
        return cfg.wait
    return WaitSpec(timeout=timedelta(seconds=timeout), poll_interval=cfg.wait.poll_interval)


@app.command()
def doctor() -> None:
    results = run_doctor(os.environ.get("E2E_NAMESPACE") or None)
    for r in results:
        typer.echo(f"{r.status.value} {r.name}: {r.message}")
    raise typer.Exit(code=exit_code(results))


@app.command()
def wait(
    kind: str,
    name: str,
    timeout: Optional[float] = typer.Option(None, help="Seconds to wait before giving up."),
) -> None:
    """Wait until a resource exists."""
    cfg = _config()
    client = _client(kind, cfg)
    try:
        resource = wait_for_resource(client, name, spec=_wait_spec(cfg, timeout))
    except CommandError as e:
        typer.echo(f"ERROR: {e}")
        raise typer.Exit(code=1)
    typer.echo(resource["metadata"]["name"])


@app.command()
def status(
    kind: str,
    name: str,
    replicas: Optional[int] = typer.Option(None),
    ready_replicas: Optional[int] = typer.Option(None),
    updated_replicas: Optional[int] = typer.Option(None),
    timeout: Optional[float] = typer.Option(None, help="Seconds to wait before giving up."),
) -> None:
    """Wait until a resource reports the expected replica counts."""
    cfg = _config()
    client = _client(kind, cfg)
    expected = ExpectedStatus(
        replicas=replicas,
        ready_replicas=ready_replicas,
        updated_replicas=updated_replicas,
    )
    try:
        wait_for_condition(client, name, expected, spec=_wait_spec(cfg, timeout))
    except (CommandError, ConditionNotMet) as e:
        typer.echo(f"ERROR: {e}")
        raise typer.Exit(code=1)


@app.command()
def delete(
    kind: str,
    name: str,
    grace_period: int = typer.Option(10, help="Grace period in seconds."),
) -> None:
    cfg = _config()
    client = _client(kind, cfg)
    try:
        client.delete(name, grace_period_seconds=grace_period)
    except CommandError as e:
        typer.echo(f"ERROR: {e}")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
