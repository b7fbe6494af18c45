from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Mapping

import yaml

from .wait import WaitSpec


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class HarnessConfig:
    operator_id: str
    namespace: str
    wait: WaitSpec = field(default_factory=WaitSpec)


def repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _seconds(value: Any, key: str) -> timedelta:
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be a number of seconds, got {value!r}") from None
    if seconds <= 0:
        raise ConfigError(f"{key} must be positive, got {value!r}")
    return timedelta(seconds=seconds)


def _wait_spec(timeout: Any, poll_interval: Any, timeout_key: str, poll_key: str) -> WaitSpec:
    spec = WaitSpec()
    if timeout is not None:
        spec = WaitSpec(timeout=_seconds(timeout, timeout_key), poll_interval=spec.poll_interval)
    if poll_interval is not None:
        spec = WaitSpec(timeout=spec.timeout, poll_interval=_seconds(poll_interval, poll_key))
    return spec


def harness_config(environ: Mapping[str, str] | None = None) -> HarnessConfig:
    env = os.environ if environ is None else environ

    namespace = env.get("E2E_NAMESPACE", "")
    if not namespace:
        raise ConfigError("E2E_NAMESPACE must be set")
    operator_id = env.get("OPERATOR_ID", "")
    if not operator_id:
        raise ConfigError("OPERATOR_ID must be set")

    return HarnessConfig(
        operator_id=operator_id,
        namespace=namespace,
        wait=_wait_spec(
            env.get("E2E_WAIT_TIMEOUT_SECONDS"),
            env.get("E2E_POLL_INTERVAL_SECONDS"),
            "E2E_WAIT_TIMEOUT_SECONDS",
            "E2E_POLL_INTERVAL_SECONDS",
        ),
    )


def load_config(path: Path) -> HarnessConfig:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")
    if not data.get("namespace"):
        raise ConfigError(f"{path}: namespace is required")
    if not data.get("operatorId"):
        raise ConfigError(f"{path}: operatorId is required")

    return HarnessConfig(
        operator_id=str(data["operatorId"]),
        namespace=str(data["namespace"]),
        wait=_wait_spec(
            data.get("timeoutSeconds"),
            data.get("pollIntervalSeconds"),
            "timeoutSeconds",
            "pollIntervalSeconds",
        ),
    )
