import io

import pytest

from benchtally.console import ConsoleRenderer, error_report
from benchtally.errors import OutputWriteError
from benchtally.models import ProgressReport, Result


def renderer():
    out, err = io.StringIO(), io.StringIO()
    return ConsoleRenderer(out, err), out, err


def test_benchmark_start_uses_placeholder_database():
    r, out, err = renderer()
    r.benchmark_start("", "bolt://localhost:7687", "-c 4")
    assert "Starting workload on database <default> against bolt://localhost:7687" in err.getvalue()
    assert "Scenario: -c 4" in err.getvalue()
    assert out.getvalue() == ""


def test_init_progress_rate_limited():
    r, _, err = renderer()
    r.report_init_progress(ProgressReport("load", "nodes", 0.25))
    r.report_init_progress(ProgressReport("load", "nodes", 0.26))
    assert err.getvalue().count("[load][nodes]") == 1
    assert "25.00%" in err.getvalue()

    r.report_init_progress(ProgressReport("load", "relationships", 0.0))
    assert "[load][relationships] 0.00%" in err.getvalue()


def test_workload_progress_line(make_worker):
    r, _, err = renderer()
    checkpoint = Result()
    checkpoint.add(make_worker({"tx": (12.5, 10, 3, [1])}))
    r.report_workload_progress(0.5, checkpoint)
    assert "[50.00%] 12.50 tps / 3 failures" in err.getvalue()


def test_no_errors_summary(make_worker):
    result = Result(scenario="-c 1")
    result.add(make_worker({"tx": (1.0, 10, 0, [1000])}))
    text = error_report(result)
    assert "no errors" in text
    assert "Causes" not in text


def test_error_summary_lists_groups(make_worker):
    result = Result()
    result.add(make_worker({"tx": (1.0, 3, 1, [1000])}, errors={"Deadlock": (1, "deadlock detected")}))
    text = error_report(result)
    assert "Failed transactions: 1 (25.000 %)" in text
    assert "Deadlock: 1 failures" in text
    assert "(ex: deadlock detected)" in text


def test_throughput_report(make_worker):
    r, out, err = renderer()
    result = Result(scenario="-w builtin:tpcb-like")
    result.add(make_worker({"tx": (10.0, 100, 0, [1000]), "read": (2.5, 20, 0, [500])}))
    r.report_throughput(result)
    text = out.getvalue()
    assert "== Results ==" in text
    assert "Scenario: -w builtin:tpcb-like" in text
    assert "120 successful transactions, 0 failed. (Total of 12.500 per second)" in text
    assert "[tx]: 10.000 total transactions per second" in text
    assert "[read]: 2.500 total transactions per second" in text
    assert "no errors" in text
    assert err.getvalue() == ""


def test_latency_report(make_worker):
    r, out, _ = renderer()
    result = Result(scenario="-l 10")
    result.add(make_worker({"tx": (3.0, 3, 0, [1000, 2000, 3000])}))
    r.report_latency(result)
    text = out.getvalue()
    assert "-- Script: tx --" in text
    assert "Max: 3.000ms, Min: 1.000ms, Mean: 2.000ms, Stddev: 0.816ms" in text
    assert "P00.000: 1.000ms" in text
    assert "P50.000: 2.000ms" in text
    assert "P99.999: 3.000ms" in text


def test_latency_report_skips_scripts_without_successes(make_worker):
    r, out, _ = renderer()
    result = Result()
    result.add(make_worker({"tx": (1.0, 0, 4, [])}, errors={"Timeout": (4, "timed out")}))
    r.report_latency(result)
    text = out.getvalue()
    assert "-- Script" not in text
    assert "Timeout: 4 failures" in text


def test_errorf_formats_args():
    r, _, err = renderer()
    r.errorf("failed to connect to %s after %d attempts", "bolt://db", 3)
    assert "ERROR: failed to connect to bolt://db after 3 attempts" in err.getvalue()


class BrokenStream(io.StringIO):
    def write(self, s):
        raise OSError("disk full")


def test_write_failure_propagates():
    r = ConsoleRenderer(BrokenStream(), BrokenStream())
    with pytest.raises(OutputWriteError):
        r.benchmark_start("db", "bolt://db", "")
