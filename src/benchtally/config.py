import os
import argparse

from pydantic import BaseModel

OUTPUT_MODES = ("auto", "interactive", "csv")


class OutputSettings(BaseModel):
    output: str = "auto"
    # host:port for the Prometheus endpoint; empty disables it
    metrics_address: str = ""

    @classmethod
    def from_env(cls) -> "OutputSettings":
        return cls(
            output=os.getenv("BENCHTALLY_OUTPUT", "auto"),
            metrics_address=os.getenv("BENCHTALLY_PROMETHEUS", ""),
        )


def add_output_arguments(parser: argparse.ArgumentParser) -> None:
    defaults = OutputSettings.from_env()
    parser.add_argument(
        "-o",
        "--output",
        default=defaults.output,
        help=f"Output format, one of {', '.join(OUTPUT_MODES)}",
    )
    parser.add_argument(
        "--prometheus",
        default=defaults.metrics_address,
        help="Serve Prometheus metrics on this host:port (e.g. :9090)",
    )


def settings_from_args(args: argparse.Namespace) -> OutputSettings:
    return OutputSettings(output=args.output, metrics_address=args.prometheus)
