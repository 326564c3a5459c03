"""Collector manager that turns periodic resource readings into snapshots."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from ..config import CollectorConfig
from ..table import Table, TransferData
from .base import BaseCollector
from .cpu import CpuCollector
from .memory import MemoryCollector

logger = logging.getLogger(__name__)


class CollectorManager:
    """Runs resource collectors on an interval and feeds snapshots to sinks.

    Instantiate it with a :class:`CollectorConfig`, register one or more
    sinks via :meth:`add_sink` (typically ``InfluxExporter.add_export``),
    then call :meth:`start` / :meth:`stop`.
    """

    def __init__(
        self,
        config: CollectorConfig,
        collectors: list[BaseCollector] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._clock = clock
        self._sinks: list[Callable[[TransferData], None]] = []
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

        if collectors is not None:
            self._collectors = list(collectors)
        else:
            self._collectors = []
            if config.cpu:
                self._collectors.append(CpuCollector())
            if config.memory:
                self._collectors.append(MemoryCollector())

    @property
    def collectors(self) -> list[BaseCollector]:
        return list(self._collectors)

    def add_sink(self, sink: Callable[[TransferData], None]) -> None:
        """Register a callback to receive collected snapshots."""
        self._sinks.append(sink)

    def collect_once(self) -> TransferData:
        """Run all collectors once and wrap their tables into one snapshot."""
        now = self._clock()
        tables: list[Table] = []
        for collector in self._collectors:
            try:
                tables.append(collector.collect(now))
            except Exception:
                logger.exception("Collector %s failed", collector.name)
        return TransferData(timestamp=now, tables=tables)

    def _run(self) -> None:
        """Background thread loop."""
        while not self._stop_event.is_set():
            data = self.collect_once()
            for sink in self._sinks:
                try:
                    sink(data)
                except Exception:
                    logger.exception("Sink failed")
            self._stop_event.wait(self._config.interval_seconds)

    def start(self) -> None:
        """Start collecting in the background."""
        if not self._config.enabled:
            return
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="CollectorThread", daemon=True)
        self._thread.start()
        logger.info("CollectorManager started (interval=%.1fs)", self._config.interval_seconds)

    def stop(self) -> None:
        """Stop background collection."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
        logger.info("CollectorManager stopped")
