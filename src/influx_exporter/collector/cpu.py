"""CPU resource collector."""

from __future__ import annotations

import psutil

from ..table import Column
from .base import BaseCollector


class CpuCollector(BaseCollector):
    """Collects CPU usage and load average."""

    @property
    def name(self) -> str:
        return "cpu"

    @property
    def value_columns(self) -> list[Column]:
        return [
            Column("usage_percent"),
            Column("load_avg_1m"),
            Column("load_avg_5m"),
            Column("load_avg_15m"),
        ]

    def read(self) -> dict[str, float]:
        load1, load5, load15 = psutil.getloadavg()
        return {
            "usage_percent": psutil.cpu_percent(interval=0),
            "load_avg_1m": load1,
            "load_avg_5m": load5,
            "load_avg_15m": load15,
        }
