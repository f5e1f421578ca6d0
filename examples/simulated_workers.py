"""
Quick sanity run: a handful of fake workers feeding one collector.
Run: uv run examples/simulated_workers.py --output interactive
"""
import argparse
import asyncio
import random

from benchtally import FailureGroup, LatencyHistogram, ResultCollector, ScriptResult, WorkerResult
from benchtally.config import add_output_arguments, settings_from_args
from benchtally.factory import init_output_from_settings

WORKERS = 4
ROUNDS = 5


def fake_window(rng: random.Random) -> WorkerResult:
    latencies = LatencyHistogram()
    for _ in range(200):
        latencies.record(int(rng.lognormvariate(7.5, 0.4)))
    failed = rng.randint(0, 3)
    return WorkerResult(
        scripts={"tpcb-like": ScriptResult("tpcb-like", 200.0 / ROUNDS, 200, failed, latencies)},
        failed_by_error_group={"Deadlock": FailureGroup(failed, "deadlock detected")} if failed else {},
        window_seconds=1.0,
    )


async def worker(collector: ResultCollector, seed: int):
    rng = random.Random(seed)
    for _ in range(ROUNDS):
        await asyncio.sleep(0.05)
        await collector.submit(fake_window(rng))


async def main():
    parser = argparse.ArgumentParser()
    add_output_arguments(parser)
    output = init_output_from_settings(settings_from_args(parser.parse_args()))

    scenario = f"-w builtin:tpcb-like -c {WORKERS}"
    output.benchmark_start("", "bolt://localhost:7687", scenario)
    collector = ResultCollector(output, scenario=scenario, checkpoint_interval_s=0.1)
    await collector.start()
    await asyncio.gather(*(worker(collector, i) for i in range(WORKERS)))
    result = await collector.stop()
    output.report_latency(result)


if __name__ == "__main__":
    asyncio.run(main())
