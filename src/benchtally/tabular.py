import sys
import logging
from collections.abc import Callable
from typing import TextIO

from .console import error_report, init_progress_line, start_banner
from .formatting import fmt_count, fmt_float, fmt_percent, quote, to_ms
from .models import ProgressReport, Result, ScriptResult
from .output import OutputPort, format_message, write
from .throttling import ProgressThrottle

logger = logging.getLogger(__name__)

ColumnValue = Callable[[Result, ScriptResult], str]


def _quantile(q: float) -> ColumnValue:
    return lambda r, s: fmt_float(to_ms(s.latencies.value_at_quantile(q)))


# Consumers depend on this order; append new columns at the end only.
CSV_COLUMNS: list[tuple[str, ColumnValue]] = [
    ("db", lambda r, s: quote(r.database_name)),
    ("script", lambda r, s: quote(s.script_name)),
    ("rate", lambda r, s: fmt_float(s.rate)),
    # Samples in the histogram, which need not equal ScriptResult.succeeded
    ("succeeded", lambda r, s: fmt_count(s.latencies.total_count())),
    ("failed", lambda r, s: fmt_count(s.failed)),
    ("mean", lambda r, s: fmt_float(to_ms(s.latencies.mean()))),
    ("stddev", lambda r, s: fmt_float(to_ms(s.latencies.stddev()))),
    ("p0", lambda r, s: fmt_float(to_ms(s.latencies.min()))),
    ("p25", _quantile(25)),
    ("p50", _quantile(50)),
    ("p75", _quantile(75)),
    ("p99", _quantile(99)),
    ("p99999", _quantile(99.999)),
    ("p100", lambda r, s: fmt_float(to_ms(s.latencies.max()))),
]

THROUGHPUT_COLUMNS = ["script", "succeeded", "failed", "transactions_per_second"]


def csv_header() -> str:
    return ",".join(name for name, _ in CSV_COLUMNS) + "\n"


class TabularRenderer(OutputPort):
    """
    Writes progress to ``err_stream`` and CSV results to ``out_stream``, for
    easy import into a spreadsheet or other tool.
    """

    def __init__(self, out_stream: TextIO | None = None, err_stream: TextIO | None = None) -> None:
        self.out_stream = out_stream or sys.stdout
        self.err_stream = err_stream or sys.stderr
        self.throttle = ProgressThrottle()

    def benchmark_start(self, database_name: str, url: str, scenario: str) -> None:
        write(self.err_stream, start_banner(database_name, url, scenario))
        write(self.out_stream, csv_header())

    def report_init_progress(self, report: ProgressReport) -> None:
        if not self.throttle.allow(report.section, report.step):
            return
        write(self.err_stream, init_progress_line(report))

    def report_workload_progress(self, completeness: float, checkpoint: Result) -> None:
        write(self.err_stream, f"[workload] {fmt_percent(completeness)} done\n")
        self._write_latency_rows(checkpoint)

    def report_throughput(self, result: Result) -> None:
        rows = [",".join(THROUGHPUT_COLUMNS) + "\n"]
        for script in result.scripts.values():
            cells = [
                quote(script.script_name),
                fmt_count(script.succeeded),
                fmt_count(script.failed),
                fmt_float(script.rate),
            ]
            rows.append(",".join(cells) + "\n")
        write(self.out_stream, "".join(rows))
        self._write_failures(result)

    def report_latency(self, result: Result) -> None:
        self._write_latency_rows(result)

    def _write_latency_rows(self, result: Result) -> None:
        rows = []
        for script in result.scripts.values():
            rows.append(",".join(value(result, script) for _, value in CSV_COLUMNS) + "\n")
        write(self.out_stream, "".join(rows))
        self._write_failures(result)

    def _write_failures(self, result: Result) -> None:
        if result.total_failed() > 0:
            write(self.err_stream, error_report(result))

    def errorf(self, fmt: str, *args) -> None:
        write(self.err_stream, f"ERROR: {format_message(fmt, args)}\n")
