import logging
from abc import ABC, abstractmethod
from typing import TextIO

from .errors import OutputWriteError
from .models import ProgressReport, Result

logger = logging.getLogger(__name__)


class OutputPort(ABC):
    """Sink for the lifecycle events of one benchmark run."""

    @abstractmethod
    def benchmark_start(self, database_name: str, url: str, scenario: str) -> None:
        """``scenario`` describes the flags needed to rerun an equivalent load."""

    @abstractmethod
    def report_init_progress(self, report: ProgressReport) -> None:
        """Dataset population progress for the built-in workloads."""

    @abstractmethod
    def report_workload_progress(self, completeness: float, checkpoint: Result) -> None:
        """Periodic cumulative checkpoint during the timed run."""

    @abstractmethod
    def report_throughput(self, result: Result) -> None:
        """Final result of a throughput run."""

    @abstractmethod
    def report_latency(self, result: Result) -> None:
        """Final result of a latency run."""

    @abstractmethod
    def errorf(self, fmt: str, *args) -> None:
        """Reports a failure of the workload or its setup."""


def write(stream: TextIO, text: str) -> None:
    try:
        stream.write(text)
        stream.flush()
    except OSError as e:
        raise OutputWriteError(f"failed writing output: {e}") from e


def format_message(fmt: str, args: tuple) -> str:
    return fmt % args if args else fmt


class Fanout(OutputPort):
    """Forwards every event, in order, to each delegate."""

    def __init__(self, delegates: list[OutputPort]) -> None:
        self.delegates = list(delegates)
        logger.debug(f"Fanout over {[type(d).__name__ for d in self.delegates]}")

    def benchmark_start(self, database_name: str, url: str, scenario: str) -> None:
        for d in self.delegates:
            d.benchmark_start(database_name, url, scenario)

    def report_init_progress(self, report: ProgressReport) -> None:
        for d in self.delegates:
            d.report_init_progress(report)

    def report_workload_progress(self, completeness: float, checkpoint: Result) -> None:
        for d in self.delegates:
            d.report_workload_progress(completeness, checkpoint)

    def report_throughput(self, result: Result) -> None:
        for d in self.delegates:
            d.report_throughput(result)

    def report_latency(self, result: Result) -> None:
        for d in self.delegates:
            d.report_latency(result)

    def errorf(self, fmt: str, *args) -> None:
        for d in self.delegates:
            d.errorf(fmt, *args)
