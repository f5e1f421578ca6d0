import logging
from dataclasses import dataclass, field

from .histogram import LatencyHistogram

logger = logging.getLogger(__name__)

# Contributions whose measurement windows differ by more than this share
# cannot have their rates summed meaningfully.
WINDOW_TOLERANCE = 0.10


@dataclass
class ProgressReport:
    section: str
    step: str
    completeness: float


@dataclass(frozen=True)
class FailureGroup:
    count: int
    first_failure: str


@dataclass
class ScriptResult:
    """
    Result for one script. A workload is normally a single script, but may be
    a weighted mix of several; latencies of different scripts mean different
    things, so they are reported per script.
    """

    script_name: str
    # Scripts executed per second, succeeded and failed alike
    rate: float = 0.0
    succeeded: int = 0
    failed: int = 0
    latencies: LatencyHistogram = field(default_factory=LatencyHistogram)

    def copy(self) -> "ScriptResult":
        return ScriptResult(
            script_name=self.script_name,
            rate=self.rate,
            succeeded=self.succeeded,
            failed=self.failed,
            latencies=self.latencies.copy(),
        )


@dataclass
class WorkerResult:
    """One worker's contribution for a single measurement window."""

    scripts: dict[str, ScriptResult] = field(default_factory=dict)
    failed_by_error_group: dict[str, FailureGroup] = field(default_factory=dict)
    window_seconds: float | None = None


@dataclass
class Result:
    database_name: str = ""
    scenario: str = ""
    failed_by_error_group: dict[str, FailureGroup] = field(default_factory=dict)
    scripts: dict[str, ScriptResult] = field(default_factory=dict)
    window_seconds: float | None = None
    rate_windows_consistent: bool = True

    def total_succeeded(self) -> int:
        return sum(s.succeeded for s in self.scripts.values())

    def total_failed(self) -> int:
        return sum(s.failed for s in self.scripts.values())

    def total_rate(self) -> float:
        return sum(s.rate for s in self.scripts.values())

    def add(self, res: WorkerResult) -> None:
        """Merge one worker contribution into the running total."""
        self._check_window(res.window_seconds)

        for name, worker_script in res.scripts.items():
            combined = self.scripts.get(name)
            if combined is None:
                # Copy, so the worker may keep reusing its own histogram
                self.scripts[name] = ScriptResult(
                    script_name=name,
                    rate=worker_script.rate,
                    succeeded=worker_script.succeeded,
                    failed=worker_script.failed,
                    latencies=worker_script.latencies.copy(),
                )
            else:
                combined.rate += worker_script.rate
                combined.succeeded += worker_script.succeeded
                combined.failed += worker_script.failed
                combined.latencies.merge(worker_script.latencies)

        for name, group in res.failed_by_error_group.items():
            existing = self.failed_by_error_group.get(name)
            if existing is None:
                self.failed_by_error_group[name] = group
            else:
                self.failed_by_error_group[name] = FailureGroup(
                    count=existing.count + group.count,
                    first_failure=existing.first_failure,
                )

        logger.debug(
            f"Merged worker result: {len(res.scripts)} scripts, "
            f"{len(res.failed_by_error_group)} error groups"
        )

    def _check_window(self, window: float | None) -> None:
        if window is None:
            return
        if self.window_seconds is None:
            self.window_seconds = window
            return
        reference = self.window_seconds
        if abs(window - reference) > WINDOW_TOLERANCE * max(reference, window):
            if self.rate_windows_consistent:
                logger.warning(
                    f"Worker measured over {window:.3f}s but earlier workers used "
                    f"{reference:.3f}s; summed rates will be skewed"
                )
            self.rate_windows_consistent = False

    def copy(self) -> "Result":
        return Result(
            database_name=self.database_name,
            scenario=self.scenario,
            failed_by_error_group=dict(self.failed_by_error_group),
            scripts={name: s.copy() for name, s in self.scripts.items()},
            window_seconds=self.window_seconds,
            rate_windows_consistent=self.rate_windows_consistent,
        )
