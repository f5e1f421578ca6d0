import pytest

from benchtally.histogram import LatencyHistogram
from benchtally.models import FailureGroup, ScriptResult, WorkerResult


def histogram(*samples: int) -> LatencyHistogram:
    h = LatencyHistogram()
    for s in samples:
        h.record(s)
    return h


def worker(scripts=None, errors=None, window_seconds=None) -> WorkerResult:
    """scripts: name -> (rate, succeeded, failed, samples)"""
    return WorkerResult(
        scripts={
            name: ScriptResult(name, rate, succeeded, failed, histogram(*samples))
            for name, (rate, succeeded, failed, samples) in (scripts or {}).items()
        },
        failed_by_error_group={
            name: FailureGroup(count, example) for name, (count, example) in (errors or {}).items()
        },
        window_seconds=window_seconds,
    )


@pytest.fixture
def make_histogram():
    return histogram


@pytest.fixture
def make_worker():
    return worker
