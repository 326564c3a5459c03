"""Exceptions raised by the exporter and its HTTP transport."""

from __future__ import annotations


class ExporterError(Exception):
    """Base exception for all exporter errors."""


class ExporterIOError(ExporterError, OSError):
    """Error talking to the InfluxDB server.

    Raised when:
    - the URL built from the settings is malformed
    - the server is unreachable or the request times out
    - the server rejects a write during a connection test
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UnsupportedVersionError(ExporterIOError):
    """The server advertises an InfluxDB major version we cannot write to."""
