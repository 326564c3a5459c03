"""InfluxDB API dialects and server version detection.

InfluxDB 1.x and 2.x accept the same line protocol but differ in the
write endpoint and in how clients authenticate.  Each dialect is an
:class:`InfluxVersion`; :func:`select_version` picks one by major version.
"""

from __future__ import annotations

import abc
import base64
import logging

from ..transport import HttpTransport
from .settings import ConnectionSettings

logger = logging.getLogger(__name__)

VERSION_HEADER = "X-Influxdb-Version"
UNKNOWN_VERSION = "unknown"


class InfluxVersion(abc.ABC):
    """Write URL and authorization for one InfluxDB major version."""

    major: int

    @abc.abstractmethod
    def build_write_url(self, settings: ConnectionSettings) -> str:
        """URL that line protocol is POSTed to."""

    @abc.abstractmethod
    def build_auth_headers(self, settings: ConnectionSettings) -> dict[str, str]:
        """Authorization headers; empty when no credentials are configured."""


class InfluxVersionV1(InfluxVersion):
    """InfluxDB 1.x: ``/write`` with HTTP basic auth."""

    major = 1

    def build_write_url(self, settings: ConnectionSettings) -> str:
        return f"{settings.base_url}/write?db={settings.database}&precision=s"

    def build_auth_headers(self, settings: ConnectionSettings) -> dict[str, str]:
        if not settings.has_credentials:
            return {}
        credentials = f"{settings.user}:{settings.password}".encode("iso-8859-1", errors="replace")
        return {"Authorization": "Basic " + base64.b64encode(credentials).decode("ascii")}


class InfluxVersionV2(InfluxVersion):
    """InfluxDB 2.x: ``/api/v2/write`` with token auth.

    The user setting is sent as the organization, the password as the token.
    """

    major = 2

    def build_write_url(self, settings: ConnectionSettings) -> str:
        return (
            f"{settings.base_url}/api/v2/write?bucket={settings.database}"
            f"&precision=s&org={settings.user or ''}"
        )

    def build_auth_headers(self, settings: ConnectionSettings) -> dict[str, str]:
        if not settings.has_credentials:
            return {}
        return {"Authorization": f"Token {settings.password}"}


_VERSIONS: dict[int, InfluxVersion] = {v.major: v for v in (InfluxVersionV1(), InfluxVersionV2())}


def select_version(major: int) -> InfluxVersion | None:
    """Dialect for *major*, or None when that major version is unsupported."""
    return _VERSIONS.get(major)


def resolve_version(transport: HttpTransport, settings: ConnectionSettings) -> str:
    """Ask the server for its version.

    Sends one GET to the server root and returns the advertised version
    header, ``"unknown"`` when the header is missing.  Transport failures
    propagate as :class:`~influx_exporter.exceptions.ExporterIOError`.
    """
    url = settings.connection_url
    logger.debug("probing InfluxDB version at %s", url)
    response = transport.get(url)
    version = response.headers.get(VERSION_HEADER, UNKNOWN_VERSION)
    logger.debug("InfluxDB version=%s", version)
    return version
