__all__ = [
    "LatencyHistogram",
    "ProgressReport",
    "FailureGroup",
    "ScriptResult",
    "WorkerResult",
    "Result",
    "OutputPort",
    "Fanout",
    "ConsoleRenderer",
    "TabularRenderer",
    "MetricsRenderer",
    "ResultCollector",
    "init_output",
    "ConfigurationError",
]


from .histogram import LatencyHistogram
from .models import ProgressReport, FailureGroup, ScriptResult, WorkerResult, Result
from .output import OutputPort, Fanout
from .console import ConsoleRenderer
from .tabular import TabularRenderer
from .prometheus import MetricsRenderer
from .collector import ResultCollector
from .factory import init_output
from .errors import ConfigurationError
