class BenchtallyError(Exception):
    """Base class for every error raised by benchtally."""


class ConfigurationError(BenchtallyError):
    """Output configuration is invalid; raised before the run starts."""


class OutputWriteError(BenchtallyError):
    """A write to an output stream failed. Reporting cannot continue."""


class MetricsListenerError(BenchtallyError):
    """The metrics endpoint could not be started."""
