"""Shared fixtures: an in-memory transport and snapshot builders."""

from __future__ import annotations

import threading

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from influx_exporter.exceptions import ExporterIOError
from influx_exporter.exporter.version import VERSION_HEADER
from influx_exporter.table import Column, ColumnType, Table, TransferData
from influx_exporter.transport import HttpTransport


def make_response(status: int = 200, headers: dict | None = None, body: str = "") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.headers = CaseInsensitiveDict(headers or {})
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    return response


class FakeTransport(HttpTransport):
    """Records requests instead of sending them.

    GET requests answer the version probe, POST requests answer with the
    configured write status.  ``probe_failures`` makes the first N probes
    raise; ``gate`` (when set) holds every write until it is released.
    """

    def __init__(
        self,
        version: str | None = "1.8.3",
        write_status: int = 204,
        write_headers: dict | None = None,
        write_body: str = "",
        probe_failures: int = 0,
        gate: threading.Event | None = None,
    ) -> None:
        super().__init__()
        self.version = version
        self.write_status = write_status
        self.write_headers = write_headers
        self.write_body = write_body
        self.probe_failures = probe_failures
        self.gate = gate
        self.write_started = threading.Event()
        self.requests: list[requests.PreparedRequest] = []
        self.closed = False

    @property
    def probes(self) -> list[requests.PreparedRequest]:
        return [r for r in self.requests if r.method == "GET"]

    @property
    def writes(self) -> list[requests.PreparedRequest]:
        return [r for r in self.requests if r.method == "POST"]

    @property
    def bodies(self) -> list[str]:
        return [(r.body or b"").decode("utf-8") for r in self.writes]

    def send_request(self, request: requests.PreparedRequest) -> requests.Response:
        self.requests.append(request)
        if request.method == "GET":
            if self.probe_failures > 0:
                self.probe_failures -= 1
                raise ExporterIOError("connection failed: refused")
            headers = {VERSION_HEADER: self.version} if self.version is not None else {}
            return make_response(200, headers, "")
        self.write_started.set()
        if self.gate is not None:
            self.gate.wait(5)
        return make_response(self.write_status, self.write_headers, self.write_body)

    def close(self) -> None:
        self.closed = True


def make_table(name: str = "inverter", rows: list[dict] | None = None, with_timestamp: bool = False) -> Table:
    """Table with a STRING ``status`` and numeric ``power`` column."""
    timestamp_column = Column("time", ColumnType.TIMESTAMP) if with_timestamp else None
    columns = [Column("status", ColumnType.STRING), Column("power")]
    if timestamp_column is not None:
        columns.append(timestamp_column)
    table = Table(name=name, columns=columns, timestamp_column=timestamp_column)
    for values in rows or []:
        table.add_row(values)
    return table


def make_snapshot(*tables: Table, timestamp: float = 1700000000.0) -> TransferData:
    return TransferData(timestamp=timestamp, tables=list(tables))


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
