from __future__ import annotations

import pytest

from tests.fakes import make_resource
from tools.converge.status import ConditionNotMet, ExpectedStatus, StatusMismatch


def test_reports_first_mismatching_field() -> None:
    sts = make_resource("es-data-1", generation=5, observed_generation=5, replicas=3, readyReplicas=2, updatedReplicas=3)

    with pytest.raises(StatusMismatch) as exc_info:
        ExpectedStatus(replicas=3, ready_replicas=3).matches(sts)

    err = exc_info.value
    assert str(err) == "es-data-1: readyReplicas 2 != expected 3"
    assert (err.field, err.actual, err.expected) == ("readyReplicas", 2, 3)
    assert "replicas 3" not in str(err)


def test_generation_mismatch_is_checked_first() -> None:
    sts = make_resource("es-data-1", generation=5, observed_generation=4, replicas=1, readyReplicas=1)

    with pytest.raises(StatusMismatch) as exc_info:
        ExpectedStatus(replicas=3, ready_replicas=3).matches(sts)

    assert exc_info.value.field == "observedGeneration"
    assert str(exc_info.value) == "es-data-1: observedGeneration 4 != expected 5"


def test_matching_status_passes() -> None:
    sts = make_resource("es", generation=2, observed_generation=2, replicas=3, readyReplicas=3, updatedReplicas=3)
    ExpectedStatus(replicas=3, ready_replicas=3, updated_replicas=3).matches(sts)


def test_unset_fields_are_not_checked() -> None:
    sts = make_resource("es", replicas=7, readyReplicas=0)
    ExpectedStatus().matches(sts)
    ExpectedStatus(replicas=7).matches(sts)


def test_updated_replicas_checked_before_ready_replicas() -> None:
    sts = make_resource("es", replicas=3, readyReplicas=1, updatedReplicas=2)

    with pytest.raises(StatusMismatch) as exc_info:
        ExpectedStatus(replicas=3, ready_replicas=3, updated_replicas=3).matches(sts)

    assert exc_info.value.field == "updatedReplicas"


def test_missing_status_counts_as_unobserved() -> None:
    sts = {"metadata": {"name": "es", "generation": 1}}

    with pytest.raises(StatusMismatch, match="observedGeneration 0 != expected 1"):
        ExpectedStatus(replicas=1).matches(sts)


def test_missing_counter_reads_as_zero() -> None:
    sts = make_resource("es", replicas=2)

    with pytest.raises(StatusMismatch, match="readyReplicas 0 != expected 2"):
        ExpectedStatus(ready_replicas=2).matches(sts)


def test_usable_as_condition() -> None:
    condition = ExpectedStatus(replicas=1)
    with pytest.raises(ConditionNotMet):
        condition(make_resource("es", replicas=0))
