"""Line protocol encoding of tabular snapshots.

Produces the subset of the InfluxDB line protocol the exporter writes::

    <measurement> <field>=<value>[,<field>=<value>...] <timestamp-seconds>

No tags are written and nothing is escaped: measurement names, field
names and string values are embedded verbatim.
"""

from __future__ import annotations

from ..table import Column, ColumnType, Row, Table, TransferData


def encode_field(table: Table, column: Column, row: Row) -> str | None:
    """``name=value`` for one cell, or None when the cell has no usable value."""
    cell = table.get_cell(column, row)
    if cell is None:
        return None
    value = cell.as_string
    if not value:
        return None
    if column.column_type is ColumnType.STRING:
        return f'{column.name}="{value}"'
    if not value.strip():
        return None
    return f"{column.name}={value}"


def encode_table(table: Table, timestamp_column: Column | None, fallback_timestamp: int) -> str:
    """Encode every row of *table* that has at least one field.

    Rows without a cell in *timestamp_column* are stamped with
    *fallback_timestamp*.
    """
    lines: list[str] = []
    columns = table.columns_without_timestamp()
    for row in table.rows:
        fields = [f for f in (encode_field(table, c, row) for c in columns) if f is not None]
        if not fields:
            continue
        ts_cell = table.get_cell(timestamp_column, row)
        timestamp = ts_cell.as_timestamp_seconds if ts_cell is not None else fallback_timestamp
        lines.append(f"{table.name} {','.join(fields)} {timestamp}\n")
    return "".join(lines)


def encode_transfer_data(data: TransferData, fallback_timestamp: int) -> str:
    """Concatenate the encoded tables of *data* into one request body."""
    return "".join(
        encode_table(table, table.timestamp_column, fallback_timestamp)
        for table in data.tables
    )
