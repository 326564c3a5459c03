"""Tabular snapshot model consumed by the exporter.

Producers build :class:`Table` objects whose cells already hold the final
(calculated) values, group them into a :class:`TransferData` and hand that
to an exporter.  The exporter only ever reads from these objects.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping


class ColumnType(str, enum.Enum):
    """Type tag of a table column."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"


@dataclass(frozen=True)
class Column:
    """A named, typed table column."""

    name: str
    column_type: ColumnType = ColumnType.NUMBER


@dataclass(frozen=True)
class Row:
    """Identity of one table row."""

    index: int


@dataclass(frozen=True)
class Cell:
    """A resolved cell value."""

    value: Any = None

    @property
    def as_string(self) -> str | None:
        if self.value is None:
            return None
        return str(self.value)

    @property
    def as_timestamp_seconds(self) -> int:
        """Cell value as whole seconds since the epoch."""
        if isinstance(self.value, datetime):
            return int(self.value.timestamp())
        return int(float(self.value))


@dataclass
class Table:
    """A named table of rows and columns.

    One column may be designated as the timestamp column; it is excluded
    from :meth:`columns_without_timestamp`.
    """

    name: str
    columns: list[Column] = field(default_factory=list)
    timestamp_column: Column | None = None
    rows: list[Row] = field(default_factory=list)
    _cells: dict[tuple[str, int], Cell] = field(default_factory=dict, repr=False)

    def columns_without_timestamp(self) -> list[Column]:
        return [c for c in self.columns if c != self.timestamp_column]

    def get_cell(self, column: Column | None, row: Row) -> Cell | None:
        if column is None:
            return None
        return self._cells.get((column.name, row.index))

    def set_cell(self, column: Column, row: Row, value: Any) -> None:
        self._cells[(column.name, row.index)] = Cell(value)

    def add_row(self, values: Mapping[str, Any]) -> Row:
        """Append a row; keys of *values* are column names.

        Columns missing from *values* get no cell at all.
        """
        row = Row(len(self.rows))
        self.rows.append(row)
        by_name = {c.name: c for c in self.columns}
        if self.timestamp_column is not None:
            by_name.setdefault(self.timestamp_column.name, self.timestamp_column)
        for name, value in values.items():
            column = by_name.get(name)
            if column is None:
                raise KeyError(f"unknown column {name!r} in table {self.name!r}")
            self.set_cell(column, row, value)
        return row


@dataclass
class TransferData:
    """One unit of exportable data: a timestamp and its tables."""

    timestamp: float
    tables: list[Table] = field(default_factory=list)
