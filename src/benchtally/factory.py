import sys
import logging
from typing import TextIO

from .config import OUTPUT_MODES, OutputSettings
from .console import ConsoleRenderer
from .errors import ConfigurationError
from .output import Fanout, OutputPort
from .prometheus import MetricsRenderer, get_metrics_listener
from .tabular import TabularRenderer

logger = logging.getLogger(__name__)


def _is_interactive(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def init_output(
    name: str,
    metrics_address: str = "",
    out_stream: TextIO | None = None,
    err_stream: TextIO | None = None,
) -> OutputPort:
    """
    Creates the output named ``name``. When ``metrics_address`` is set, also
    starts the metrics endpoint and returns an output publishing to both.
    """
    out_stream = out_stream or sys.stdout
    err_stream = err_stream or sys.stderr

    if name == "auto":
        name = "interactive" if _is_interactive(out_stream) else "csv"
        logger.debug(f"Auto-selected output format: {name}")

    if name == "interactive":
        output: OutputPort = ConsoleRenderer(out_stream, err_stream)
    elif name == "csv":
        output = TabularRenderer(out_stream, err_stream)
    else:
        supported = ", ".join(f"'{m}'" for m in OUTPUT_MODES)
        raise ConfigurationError(
            f"unknown output format: {name}, supported formats are {supported}"
        )

    if metrics_address:
        listener = get_metrics_listener()
        listener.start(metrics_address)
        output = Fanout([output, MetricsRenderer(listener)])

    return output


def init_output_from_settings(
    settings: OutputSettings,
    out_stream: TextIO | None = None,
    err_stream: TextIO | None = None,
) -> OutputPort:
    return init_output(settings.output, settings.metrics_address, out_stream, err_stream)
