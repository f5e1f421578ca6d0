import logging
import threading

import uvicorn
from fastapi import FastAPI
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, generate_latest

from .errors import ConfigurationError, MetricsListenerError
from .models import ProgressReport, Result
from .output import OutputPort

logger = logging.getLogger(__name__)

METRICS_PATH = "/metrics"


def parse_address(address: str) -> tuple[str, int]:
    """Splits ``host:port``; an empty host (``:9090``) binds every interface."""
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit() or not 0 < int(port) < 65536:
        raise ConfigurationError(
            f"invalid metrics address: {address!r}, expected host:port or :port"
        )
    return host.strip("[]") or "0.0.0.0", int(port)


def create_metrics_app(registry: CollectorRegistry) -> FastAPI:
    app = FastAPI(title="benchtally metrics", docs_url=None, redoc_url=None, openapi_url=None)

    @app.get(METRICS_PATH)
    async def metrics():
        return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    return app


class MetricsListener:
    """
    Owns the transaction counters and the HTTP endpoint serving them.

    One per process, see ``get_metrics_listener``. Started at most once and
    never stopped.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.succeeded = Counter(
            "benchtally_successful_transactions",
            "The total number of successful transactions",
            registry=self.registry,
        )
        self.failed = Counter(
            "benchtally_failed_transactions",
            "The total number of failed transactions",
            registry=self.registry,
        )
        self.app = create_metrics_app(self.registry)
        self.address: str | None = None
        self.failure: MetricsListenerError | None = None
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def started(self) -> bool:
        return self._server is not None and self._server.started

    def start(self, address: str) -> None:
        with self._lock:
            if self.address is not None:
                if address == self.address:
                    logger.debug(f"Metrics listener already running on {address}")
                    return
                raise MetricsListenerError(
                    f"metrics listener already running on {self.address}, cannot also start on {address}"
                )
            host, port = parse_address(address)
            config = uvicorn.Config(
                self.app, host=host, port=port, log_level="warning", access_log=False
            )
            self._server = uvicorn.Server(config)
            self._thread = threading.Thread(
                target=self._serve, name="benchtally-metrics", daemon=True
            )
            self.address = address
            self._thread.start()
            logger.info(f"Serving metrics on http://{host}:{port}{METRICS_PATH}")

    def _serve(self) -> None:
        try:
            self._server.run()
        except SystemExit:
            # uvicorn exits when it cannot bind
            pass
        if not self._server.started:
            self.failure = MetricsListenerError(
                f"prometheus http server failed to start on {self.address}"
            )
            logger.critical(str(self.failure))
            raise self.failure


_listener: MetricsListener | None = None
_listener_lock = threading.Lock()


def get_metrics_listener() -> MetricsListener:
    global _listener
    with _listener_lock:
        if _listener is None:
            _listener = MetricsListener()
        return _listener


class MetricsRenderer(OutputPort):
    """
    Publishes cumulative transaction totals to Prometheus counters.

    Checkpoints carry running totals, so only the growth since the previous
    checkpoint is added.
    """

    def __init__(self, listener: MetricsListener | None = None) -> None:
        self.listener = listener or get_metrics_listener()
        self._seen_succeeded = 0
        self._seen_failed = 0

    def benchmark_start(self, database_name: str, url: str, scenario: str) -> None:
        pass

    def report_init_progress(self, report: ProgressReport) -> None:
        pass

    def report_workload_progress(self, completeness: float, checkpoint: Result) -> None:
        succeeded = checkpoint.total_succeeded()
        failed = checkpoint.total_failed()
        if succeeded > self._seen_succeeded:
            self.listener.succeeded.inc(succeeded - self._seen_succeeded)
            self._seen_succeeded = succeeded
        if failed > self._seen_failed:
            self.listener.failed.inc(failed - self._seen_failed)
            self._seen_failed = failed
        logger.debug(f"Published totals: succeeded={succeeded}, failed={failed}")

    def report_throughput(self, result: Result) -> None:
        pass

    def report_latency(self, result: Result) -> None:
        pass

    def errorf(self, fmt: str, *args) -> None:
        pass
