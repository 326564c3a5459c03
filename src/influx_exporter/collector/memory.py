"""Memory resource collector."""

from __future__ import annotations

import psutil

from ..table import Column, ColumnType
from .base import BaseCollector


class MemoryCollector(BaseCollector):
    """Collects memory and swap usage."""

    @property
    def name(self) -> str:
        return "memory"

    @property
    def value_columns(self) -> list[Column]:
        return [
            Column("usage_percent"),
            Column("used_bytes", ColumnType.INTEGER),
            Column("available_bytes", ColumnType.INTEGER),
            Column("total_bytes", ColumnType.INTEGER),
            Column("swap_usage_percent"),
        ]

    def read(self) -> dict[str, float]:
        mem = psutil.virtual_memory()
        swap = psutil.swap_memory()
        return {
            "usage_percent": mem.percent,
            "used_bytes": mem.used,
            "available_bytes": mem.available,
            "total_bytes": mem.total,
            "swap_usage_percent": swap.percent,
        }
