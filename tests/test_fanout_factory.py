import io

import pytest

from benchtally import factory
from benchtally.console import ConsoleRenderer
from benchtally.config import OutputSettings
from benchtally.errors import ConfigurationError
from benchtally.models import ProgressReport, Result
from benchtally.output import Fanout, OutputPort
from benchtally.prometheus import MetricsRenderer
from benchtally.tabular import TabularRenderer


class RecordingOutput(OutputPort):
    def __init__(self, name, calls, fail_on=None):
        self.name = name
        self.calls = calls
        self.fail_on = fail_on

    def _record(self, event, *args):
        if event == self.fail_on:
            raise RuntimeError(f"{self.name} failed on {event}")
        self.calls.append((self.name, event, args))

    def benchmark_start(self, database_name, url, scenario):
        self._record("start", database_name, url, scenario)

    def report_init_progress(self, report):
        self._record("init", report)

    def report_workload_progress(self, completeness, checkpoint):
        self._record("progress", completeness)

    def report_throughput(self, result):
        self._record("throughput")

    def report_latency(self, result):
        self._record("latency")

    def errorf(self, fmt, *args):
        self._record("error", fmt, *args)


def test_fanout_forwards_in_order():
    calls = []
    fanout = Fanout([RecordingOutput("a", calls), RecordingOutput("b", calls)])
    fanout.benchmark_start("db", "bolt://db", "-c 1")
    fanout.report_init_progress(ProgressReport("load", "nodes", 0.1))
    fanout.report_workload_progress(0.5, Result())
    fanout.report_latency(Result())
    assert [(n, e) for n, e, _ in calls] == [
        ("a", "start"), ("b", "start"),
        ("a", "init"), ("b", "init"),
        ("a", "progress"), ("b", "progress"),
        ("a", "latency"), ("b", "latency"),
    ]


def test_fanout_passes_errorf_args_through():
    calls = []
    fanout = Fanout([RecordingOutput("a", calls), RecordingOutput("b", calls)])
    fanout.errorf("lost %d workers on %s", 2, "db")
    assert calls == [
        ("a", "error", ("lost %d workers on %s", 2, "db")),
        ("b", "error", ("lost %d workers on %s", 2, "db")),
    ]


def test_fanout_stops_after_failing_delegate():
    calls = []
    fanout = Fanout([
        RecordingOutput("a", calls),
        RecordingOutput("b", calls, fail_on="throughput"),
        RecordingOutput("c", calls),
    ])
    with pytest.raises(RuntimeError):
        fanout.report_throughput(Result())
    assert calls == [("a", "throughput", ())]


class TtyStream(io.StringIO):
    def isatty(self):
        return True


def test_auto_picks_csv_when_not_a_terminal():
    output = factory.init_output("auto", out_stream=io.StringIO(), err_stream=io.StringIO())
    assert isinstance(output, TabularRenderer)


def test_auto_picks_console_on_terminal():
    output = factory.init_output("auto", out_stream=TtyStream(), err_stream=io.StringIO())
    assert isinstance(output, ConsoleRenderer)


def test_explicit_names():
    assert isinstance(factory.init_output("interactive", out_stream=io.StringIO()), ConsoleRenderer)
    assert isinstance(factory.init_output("csv", out_stream=io.StringIO()), TabularRenderer)


def test_unknown_format_rejected_before_construction(monkeypatch):
    def forbidden(*args, **kwargs):
        raise AssertionError("renderer must not be constructed")

    monkeypatch.setattr(factory, "ConsoleRenderer", forbidden)
    monkeypatch.setattr(factory, "TabularRenderer", forbidden)
    with pytest.raises(ConfigurationError) as exc:
        factory.init_output("xml")
    message = str(exc.value)
    for name in ("auto", "interactive", "csv"):
        assert name in message


class FakeListener:
    def __init__(self):
        self.started_on = []

    def start(self, address):
        self.started_on.append(address)


def test_metrics_address_wraps_in_fanout(monkeypatch):
    listener = FakeListener()
    monkeypatch.setattr(factory, "get_metrics_listener", lambda: listener)
    settings = OutputSettings(output="csv", metrics_address=":9090")
    output = factory.init_output_from_settings(settings, io.StringIO(), io.StringIO())
    assert isinstance(output, Fanout)
    assert isinstance(output.delegates[0], TabularRenderer)
    assert isinstance(output.delegates[1], MetricsRenderer)
    assert listener.started_on == [":9090"]


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("BENCHTALLY_OUTPUT", "csv")
    monkeypatch.setenv("BENCHTALLY_PROMETHEUS", "127.0.0.1:9100")
    settings = OutputSettings.from_env()
    assert settings.output == "csv"
    assert settings.metrics_address == "127.0.0.1:9100"
