import asyncio
import logging
from collections.abc import Callable

from .models import Result, WorkerResult
from .output import OutputPort

logger = logging.getLogger(__name__)


class ResultCollector:
    """
    Serialises worker contributions into one ``Result``.

    Workers ``submit`` from any task; a single consumer task applies
    ``Result.add``, so the aggregate never sees concurrent mutation. With
    ``checkpoint_interval_s`` set, a cumulative snapshot is reported to the
    output on that interval.
    """

    def __init__(
        self,
        output: OutputPort,
        database_name: str = "",
        scenario: str = "",
        checkpoint_interval_s: float | None = None,
        completeness: Callable[[], float] | None = None,
    ) -> None:
        self.output = output
        self.result = Result(database_name=database_name, scenario=scenario)
        self.checkpoint_interval_s = checkpoint_interval_s
        self.completeness = completeness or (lambda: 0.0)
        self.q: asyncio.Queue = asyncio.Queue()
        self.failure: BaseException | None = None
        self._task: asyncio.Task | None = None
        self._ticker: asyncio.Task | None = None

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())
            if self.checkpoint_interval_s:
                self._ticker = asyncio.create_task(self._checkpoints())
                self._ticker.add_done_callback(self._ticker_done)
            logger.info("Result collector started")

    async def submit(self, res: WorkerResult) -> None:
        self._raise_failure()
        await self.q.put(res)

    async def flush(self) -> None:
        """Waits until every submitted contribution has been merged."""
        self._raise_failure()
        await self.q.join()
        self._raise_failure()

    def checkpoint(self, completeness: float | None = None) -> None:
        if completeness is None:
            completeness = self.completeness()
        self.output.report_workload_progress(completeness, self.result.copy())

    async def stop(self) -> Result:
        """Drains pending contributions; re-raises a failed periodic checkpoint."""
        ticker, self._ticker = self._ticker, None
        try:
            if ticker and not ticker.done():
                ticker.cancel()
                try:
                    await ticker
                except asyncio.CancelledError:
                    pass
        finally:
            if self._task:
                await self.q.put(None)
                await self._task
                self._task = None
                logger.info(
                    f"Result collector stopped: {self.result.total_succeeded()} succeeded, "
                    f"{self.result.total_failed()} failed"
                )
        self._raise_failure()
        return self.result

    def _ticker_done(self, task: asyncio.Task) -> None:
        if task.cancelled() or task.exception() is None:
            return
        self.failure = task.exception()
        logger.error(f"Periodic checkpoint failed: {self.failure}")

    def _raise_failure(self) -> None:
        if self.failure is not None:
            raise self.failure

    async def _run(self) -> None:
        while True:
            res = await self.q.get()
            try:
                if res is None:
                    return
                self.result.add(res)
            finally:
                self.q.task_done()

    async def _checkpoints(self) -> None:
        while True:
            await asyncio.sleep(self.checkpoint_interval_s)
            self.checkpoint()
