#!/usr/bin/env python3
# cli.py — replay a recorded benchmark run through the configured output

import sys
import asyncio
import argparse
import logging

from benchtally.collector import ResultCollector
from benchtally.config import add_output_arguments, settings_from_args
from benchtally.errors import BenchtallyError, OutputWriteError
from benchtally.factory import init_output_from_settings
from benchtally.logging_config import setup_logging
from benchtally.output import OutputPort
from benchtally.persistence import Recording, load_recording


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Benchtally: aggregate and render recorded benchmark results",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "recording",
        help="JSON file with the worker results of a finished run",
    )
    add_output_arguments(parser)
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Report a cumulative checkpoint after each worker result",
    )
    parser.add_argument(
        "--linger",
        type=float,
        default=0.0,
        help="Seconds to keep serving metrics after the replay finishes",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug-level logging",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Optional file to write logs to",
    )
    return parser.parse_args(argv)


async def replay(recording: Recording, output: OutputPort, progress: bool = False) -> None:
    output.benchmark_start(recording.database, recording.url, recording.scenario)

    collector = ResultCollector(output, recording.database, recording.scenario)
    await collector.start()
    total = len(recording.workers)
    for i, worker in enumerate(recording.workers, start=1):
        await collector.submit(worker)
        if progress:
            await collector.flush()
            collector.checkpoint(i / total)
    result = await collector.stop()

    if recording.mode == "throughput":
        output.report_throughput(result)
    else:
        output.report_latency(result)


async def run(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(level="DEBUG" if args.debug else "WARNING", log_file=args.log_file)

    try:
        output = init_output_from_settings(settings_from_args(args))
    except BenchtallyError as e:
        logging.error(f"Cannot set up output: {e}")
        return 1

    try:
        recording = load_recording(args.recording)
        await replay(recording, output, progress=args.progress)
    except OutputWriteError as e:
        # the output itself is broken, so the error cannot go through it
        logging.error(f"Replay aborted: {e}")
        return 1
    except BenchtallyError as e:
        output.errorf("%s", e)
        return 1

    if args.prometheus and args.linger > 0:
        logging.info(f"Serving metrics for another {args.linger:.0f}s")
        await asyncio.sleep(args.linger)
    return 0


def main():
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
