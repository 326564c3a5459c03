"""Base interface for system resource collectors."""

from __future__ import annotations

import abc
import socket

from ..table import Column, ColumnType, Table

HOST_COLUMN = Column("host", ColumnType.STRING)
TIME_COLUMN = Column("time", ColumnType.TIMESTAMP)


class BaseCollector(abc.ABC):
    """Abstract base class for system resource collectors.

    Each collector produces one table per call; its name becomes the
    measurement name.
    """

    def __init__(self, hostname: str | None = None) -> None:
        self.hostname = hostname or socket.gethostname()

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Collector name used in configuration and as table name."""

    @property
    @abc.abstractmethod
    def value_columns(self) -> list[Column]:
        """Numeric columns filled by :meth:`read`."""

    @abc.abstractmethod
    def read(self) -> dict[str, float]:
        """Read current values keyed by column name."""

    def new_table(self) -> Table:
        columns = [HOST_COLUMN, *self.value_columns, TIME_COLUMN]
        return Table(name=self.name, columns=columns, timestamp_column=TIME_COLUMN)

    def collect(self, timestamp: float) -> Table:
        """Collect current metrics into a single-row table."""
        table = self.new_table()
        table.add_row({"host": self.hostname, **self.read(), "time": int(timestamp)})
        return table
