"""InfluxDB exporter – queues snapshots and writes them as line protocol.

Producers call :meth:`InfluxExporter.add_export`, which only enqueues.  A
single background thread drains the queue in FIFO order and, for each
snapshot, encodes it, makes sure the server version is known, builds the
write request for that version and sends it.  A failed batch is logged
and dropped; it never affects the batches behind it.
"""

from __future__ import annotations

import enum
import logging
import queue
import threading
import time
from typing import Callable

import requests

from ..config import InfluxConfig
from ..exceptions import ExporterIOError, UnsupportedVersionError
from ..table import TransferData
from ..transport import CONTENT_TYPE, CONTENT_TYPE_JSON, HttpTransport
from .base import BaseExporter
from .line_protocol import encode_transfer_data
from .settings import ConnectionSettings
from .version import resolve_version, select_version

logger = logging.getLogger(__name__)

TransportFactory = Callable[[ConnectionSettings], HttpTransport]

_STOP = object()


def default_transport_factory(settings: ConnectionSettings) -> HttpTransport:
    return HttpTransport(read_timeout_ms=settings.read_timeout_ms)


def create_request(
    transport: HttpTransport, settings: ConnectionSettings, body: str
) -> requests.PreparedRequest:
    """Build the write request for the cached server version.

    Raises :class:`UnsupportedVersionError` when the major version is
    neither 1 nor 2 and :class:`ExporterIOError` for a malformed URL.
    """
    influx_version = select_version(settings.major_version)
    if influx_version is None:
        raise UnsupportedVersionError(
            f"unsupported or unknown InfluxDB version '{settings.version}'"
        )
    url = influx_version.build_write_url(settings)
    logger.debug("url: %s, data: %s", url, body.replace("\n", ""))
    headers = influx_version.build_auth_headers(settings)
    return transport.build_post_request(url, headers, body)


def build_request(
    transport: HttpTransport, settings: ConnectionSettings, body: str
) -> requests.PreparedRequest | None:
    """Like :func:`create_request`, but logs and returns None on failure."""
    try:
        return create_request(transport, settings, body)
    except ExporterIOError as e:
        logger.error("cannot build InfluxDB request: %s", e)
        return None


class ExporterState(enum.Enum):
    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"


class InfluxExporter(BaseExporter):
    """Exports tabular snapshots to InfluxDB 1.x or 2.x over HTTP.

    Lifecycle is ``CREATED → RUNNING → STOPPED``: :meth:`initialize` starts
    the worker thread, :meth:`shutdown` stops it for good.  The queue is
    unbounded, so :meth:`add_export` never blocks.
    """

    def __init__(
        self,
        settings: ConnectionSettings | None = None,
        *,
        name: str = "influx",
        transport_factory: TransportFactory = default_transport_factory,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.name = name
        self.last_call: float | None = None
        self._transport_factory = transport_factory
        self._clock = clock
        settings = settings or self.default_settings()
        self._connection = (settings, transport_factory(settings))
        self._queue: queue.Queue = queue.Queue()
        self._stop_event = threading.Event()
        self._state = ExporterState.CREATED
        self._state_lock = threading.Lock()
        self._thread: threading.Thread | None = None

    @staticmethod
    def default_settings() -> ConnectionSettings:
        return ConnectionSettings()

    @property
    def settings(self) -> ConnectionSettings:
        return self._connection[0]

    @property
    def state(self) -> ExporterState:
        return self._state

    @property
    def pending(self) -> int:
        """Number of snapshots waiting in the queue."""
        return self._queue.qsize()

    def update_configuration(self, config: InfluxConfig) -> None:
        """Switch to new connection settings; the server version is probed again."""
        settings = ConnectionSettings.from_config(config)
        old_transport = self._connection[1]
        self._connection = (settings, self._transport_factory(settings))
        if old_transport is not self._connection[1]:
            old_transport.close()
        logger.info("exporter '%s' now targets %s", self.name, settings.base_url)

    # -- lifecycle -----------------------------------------------------------

    def initialize(self) -> None:
        with self._state_lock:
            if self._state is ExporterState.RUNNING:
                return
            if self._state is ExporterState.STOPPED:
                logger.warning("exporter '%s' has been shut down, not restarting", self.name)
                return
            self._thread = threading.Thread(
                target=self._run, name="InfluxExporterThread", daemon=True
            )
            self._thread.start()
            self._state = ExporterState.RUNNING
        logger.debug("initialize influx exporter '%s'", self.name)

    def shutdown(self, timeout: float = 5.0) -> None:
        """Stop the worker.

        Snapshots still queued are not sent.  A send already in progress is
        allowed to finish within *timeout* seconds.
        """
        with self._state_lock:
            if self._state is ExporterState.STOPPED:
                return
            was_running = self._state is ExporterState.RUNNING
            self._stop_event.set()
            self._state = ExporterState.STOPPED
        if was_running:
            self._queue.put(_STOP)
            if self._thread is not None:
                self._thread.join(timeout=timeout)
            if self._thread is not None and self._thread.is_alive():
                logger.warning("exporter '%s' worker still busy after %.1fs", self.name, timeout)
                return
        self._connection[1].close()
        logger.info("InfluxExporter '%s' shut down", self.name)

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until every queued snapshot has been processed.

        Returns False if *timeout* expired first.
        """
        with self._queue.all_tasks_done:
            return self._queue.all_tasks_done.wait_for(
                lambda: self._queue.unfinished_tasks == 0, timeout
            )

    # -- producer side -------------------------------------------------------

    def add_export(self, data: TransferData) -> None:
        if self._state is ExporterState.STOPPED:
            logger.warning("exporter '%s' has been shut down, dropping export", self.name)
            return
        if not data.tables:
            logger.debug("no exporting tables, skip export")
            return
        logger.debug("add export to '%s'", self.name)
        self.last_call = data.timestamp
        self._queue.put(data)

    # -- worker --------------------------------------------------------------

    def _run(self) -> None:
        """Background thread loop."""
        while not self._stop_event.is_set():
            data = self._queue.get()
            try:
                if data is _STOP or self._stop_event.is_set():
                    break
                self._export(data)
            except Exception:
                logger.exception("export to '%s' failed", self.name)
            finally:
                self._queue.task_done()

    def _export(self, data: TransferData) -> None:
        if not data.tables:
            logger.debug("no exporting tables, skip export")
            return
        start = time.monotonic()
        body = encode_transfer_data(data, int(self._clock()))
        if body:
            self._send(body)
        else:
            logger.warning("empty table(s), skip export")
        logger.debug(
            "export of %d table(s) to '%s' finished in %d ms",
            len(data.tables),
            self.name,
            (time.monotonic() - start) * 1000,
        )

    def _send(self, body: str) -> None:
        settings, transport = self._connection
        if settings.version is None:
            try:
                settings.set_version_if_absent(resolve_version(transport, settings))
            except ExporterIOError as e:
                logger.error("database error: %s", e)
        if settings.version is None:
            logger.error("InfluxDB version not detected, dropping %d bytes", len(body))
            return

        request = build_request(transport, settings, body)
        if request is None:
            return
        try:
            response = transport.send_request(request)
        except ExporterIOError as e:
            logger.error("sending to InfluxDB failed: %s", e)
            return
        if response.status_code >= 300:
            logger.error("Influx returns error code %s, data=%s", response.status_code, body)

    # -- configuration check -------------------------------------------------

    def test_connection(self, settings: ConnectionSettings) -> str:
        """Probe the server described by *settings* with an empty write.

        Returns a success message naming the server version.  Every failure
        is raised as :class:`ExporterIOError`; for JSON error responses its
        message is the server's ``error`` (or ``message``) field.
        """
        transport = self._transport_factory(settings)
        try:
            version = resolve_version(transport, settings)
            settings.reset_version()
            settings.set_version_if_absent(version)
            request = create_request(transport, settings, "")
            response = transport.send_request(request)
        finally:
            transport.close()

        status = response.status_code
        if 200 <= status <= 300:
            return f"Connection successful, InfluxDB version {version}"
        logger.error("connection test failed with status %s", status)
        content_type = response.headers.get(CONTENT_TYPE, "")
        if CONTENT_TYPE_JSON in content_type:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            if not isinstance(payload, dict):
                payload = {}
            error = payload.get("error", payload.get("message", f"unknown json error with {status}"))
            raise ExporterIOError(str(error), status_code=status)
        raise ExporterIOError(str(status), status_code=status)
