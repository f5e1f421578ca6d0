import sys
import logging
from typing import TextIO

from rich.console import Console

from .errors import OutputWriteError
from .formatting import database_label, fmt_percent, to_ms
from .models import ProgressReport, Result, ScriptResult
from .output import OutputPort, format_message
from .throttling import ProgressThrottle

logger = logging.getLogger(__name__)

LATENCY_LADDER = [
    ("P00.000", None),
    ("P25.000", 25.0),
    ("P50.000", 50.0),
    ("P75.000", 75.0),
    ("P95.000", 95.0),
    ("P99.000", 99.0),
    ("P99.999", 99.999),
]


def make_console(stream: TextIO) -> Console:
    return Console(
        file=stream,
        markup=False,
        highlight=False,
        emoji=False,
        soft_wrap=True,
    )


def start_banner(database_name: str, url: str, scenario: str) -> str:
    return (
        f"Starting workload on database {database_label(database_name)} against {url}\n"
        f"Scenario: {scenario}\n"
    )


def init_progress_line(report: ProgressReport) -> str:
    return f"[{report.section}][{report.step}] {fmt_percent(report.completeness)}\n"


def totals_line(succeeded: int, failed: int, rate: float) -> str:
    return f"{succeeded} successful transactions, {failed} failed. (Total of {rate:.3f} per second)\n"


def error_report(result: Result) -> str:
    lines = ["Error stats:\n"]
    total_failed = result.total_failed()
    if total_failed == 0:
        lines.append("  no errors\n")
        return "".join(lines)

    share = 100 * total_failed / (total_failed + result.total_succeeded())
    lines.append(f"  Failed transactions: {total_failed} ({share:.3f} %)\n")
    lines.append("\n")
    lines.append("  Causes:\n")
    for name, group in result.failed_by_error_group.items():
        lines.append(f"    {name}: {group.count} failures\n")
        lines.append(f"      (ex: {group.first_failure})\n")
    return "".join(lines)


def latency_summary(script: ScriptResult, indent: str = "  ") -> str:
    histo = script.latencies
    lines = [
        totals_line(script.succeeded, script.failed, script.rate),
        f"Max: {to_ms(histo.max()):.3f}ms, Min: {to_ms(histo.min()):.3f}ms, "
        f"Mean: {to_ms(histo.mean()):.3f}ms, Stddev: {to_ms(histo.stddev()):.3f}ms\n\n",
        "Latency distribution:\n",
    ]
    for label, quantile in LATENCY_LADDER:
        value = histo.min() if quantile is None else histo.value_at_quantile(quantile)
        lines.append(f"  {label}: {to_ms(value):.3f}ms\n")
    return "".join(indent + line for line in lines)


class ConsoleRenderer(OutputPort):
    """
    Human-readable output. Progress and errors go to ``err_stream``; the
    final results go to ``out_stream`` so they can be redirected on their own.
    """

    def __init__(self, out_stream: TextIO | None = None, err_stream: TextIO | None = None) -> None:
        self.out = make_console(out_stream or sys.stdout)
        self.err = make_console(err_stream or sys.stderr)
        self.throttle = ProgressThrottle()

    def _emit(self, console: Console, text: str, style: str | None = None) -> None:
        try:
            console.print(text, end="", style=style)
        except OSError as e:
            raise OutputWriteError(f"failed writing console output: {e}") from e

    def benchmark_start(self, database_name: str, url: str, scenario: str) -> None:
        self._emit(self.err, start_banner(database_name, url, scenario))

    def report_init_progress(self, report: ProgressReport) -> None:
        if not self.throttle.allow(report.section, report.step):
            return
        self._emit(self.err, init_progress_line(report))

    def report_workload_progress(self, completeness: float, checkpoint: Result) -> None:
        self._emit(
            self.err,
            f"[{fmt_percent(completeness)}] {checkpoint.total_rate():.2f} tps / "
            f"{checkpoint.total_failed()} failures\n",
        )

    def report_throughput(self, result: Result) -> None:
        self._emit(self.out, "== Results ==\n", style="bold")
        body = [
            f"Scenario: {result.scenario}\n",
            totals_line(result.total_succeeded(), result.total_failed(), result.total_rate()),
            "\n",
        ]
        for script in result.scripts.values():
            body.append(f"  [{script.script_name}]: {script.rate:.3f} total transactions per second\n")
        body.append("\n")
        body.append(error_report(result))
        self._emit(self.out, "".join(body))

    def report_latency(self, result: Result) -> None:
        self._emit(self.out, "== Results ==\n", style="bold")
        body = [
            f"Scenario: {result.scenario}\n",
            totals_line(result.total_succeeded(), result.total_failed(), result.total_rate()),
        ]
        if result.total_succeeded() > 0:
            for script in result.scripts.values():
                body.append("\n")
                body.append(f"-- Script: {script.script_name} --\n\n")
                body.append(latency_summary(script))
        body.append("\n")
        body.append(error_report(result))
        self._emit(self.out, "".join(body))

    def errorf(self, fmt: str, *args) -> None:
        message = format_message(fmt, args)
        logger.debug(f"Reporting error: {message}")
        self._emit(self.err, f"ERROR: {message}\n", style="bold red")
