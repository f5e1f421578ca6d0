import json
import logging
from dataclasses import dataclass, field

from .errors import ConfigurationError
from .histogram import LatencyHistogram
from .models import FailureGroup, ScriptResult, WorkerResult

logger = logging.getLogger(__name__)

RUN_MODES = ("latency", "throughput")


@dataclass
class Recording:
    """A finished run saved as worker contributions, ready to be replayed."""

    database: str = ""
    url: str = ""
    scenario: str = ""
    mode: str = "latency"
    workers: list[WorkerResult] = field(default_factory=list)


def worker_result_to_dict(res: WorkerResult) -> dict:
    return {
        "scripts": {
            name: {
                "rate": s.rate,
                "succeeded": s.succeeded,
                "failed": s.failed,
                "latencies": s.latencies.to_dict(),
            }
            for name, s in res.scripts.items()
        },
        "failed_by_error_group": {
            name: {"count": g.count, "first_failure": g.first_failure}
            for name, g in res.failed_by_error_group.items()
        },
        "window_seconds": res.window_seconds,
    }


def worker_result_from_dict(data: dict) -> WorkerResult:
    scripts = {
        name: ScriptResult(
            script_name=name,
            rate=float(s.get("rate", 0.0)),
            succeeded=int(s.get("succeeded", 0)),
            failed=int(s.get("failed", 0)),
            latencies=LatencyHistogram.from_dict(s.get("latencies", {})),
        )
        for name, s in data.get("scripts", {}).items()
    }
    groups = {
        name: FailureGroup(count=int(g["count"]), first_failure=str(g["first_failure"]))
        for name, g in data.get("failed_by_error_group", {}).items()
    }
    window = data.get("window_seconds")
    return WorkerResult(
        scripts=scripts,
        failed_by_error_group=groups,
        window_seconds=float(window) if window is not None else None,
    )


def load_recording(path: str) -> Recording:
    try:
        with open(path, "r", encoding="utf-8") as f:
            state = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"cannot read recording {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"recording {path} is not valid JSON: {e}") from e

    mode = state.get("mode", "latency")
    if mode not in RUN_MODES:
        raise ConfigurationError(
            f"unknown run mode in {path}: {mode}, expected one of {', '.join(RUN_MODES)}"
        )
    try:
        workers = [worker_result_from_dict(w) for w in state.get("workers", [])]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ConfigurationError(f"malformed worker result in {path}: {e}") from e

    logger.info(f"Loaded recording {path} with {len(workers)} worker results")
    return Recording(
        database=state.get("database", ""),
        url=state.get("url", ""),
        scenario=state.get("scenario", ""),
        mode=mode,
        workers=workers,
    )


def save_recording(recording: Recording, path: str) -> None:
    state = {
        "database": recording.database,
        "url": recording.url,
        "scenario": recording.scenario,
        "mode": recording.mode,
        "workers": [worker_result_to_dict(w) for w in recording.workers],
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(state, f, indent=2)
    logger.info(f"Recording saved to {path}")
