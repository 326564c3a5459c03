"""HTTP transport used by the exporter to talk to InfluxDB."""

from __future__ import annotations

import logging
from typing import Mapping

import requests

from .exceptions import ExporterIOError

logger = logging.getLogger(__name__)

CONTENT_TYPE = "Content-Type"
CONTENT_TYPE_JSON = "application/json"

_MALFORMED_URL = (
    requests.exceptions.InvalidURL,
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
)


class HttpTransport:
    """Builds and sends HTTP requests over a :class:`requests.Session`.

    Every failure raised by ``requests`` is turned into
    :class:`~influx_exporter.exceptions.ExporterIOError`.
    """

    def __init__(self, read_timeout_ms: int = 5000, session: requests.Session | None = None) -> None:
        self.timeout = read_timeout_ms / 1000.0
        self.session = session or requests.Session()

    def build_get_request(
        self, url: str, headers: Mapping[str, str] | None = None
    ) -> requests.PreparedRequest:
        return self._prepare("GET", url, headers, None)

    def build_post_request(
        self, url: str, headers: Mapping[str, str] | None, body: str
    ) -> requests.PreparedRequest:
        return self._prepare("POST", url, headers, body.encode("utf-8"))

    def _prepare(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None,
        data: bytes | None,
    ) -> requests.PreparedRequest:
        request = requests.Request(method, url, headers=dict(headers or {}), data=data)
        try:
            return self.session.prepare_request(request)
        except _MALFORMED_URL as e:
            raise ExporterIOError("malformed url") from e
        except requests.exceptions.RequestException as e:
            raise ExporterIOError(f"invalid request: {e}") from e

    def send_request(self, request: requests.PreparedRequest) -> requests.Response:
        """Send *request* once and return the response, whatever its status."""
        try:
            return self.session.send(request, timeout=self.timeout)
        except _MALFORMED_URL as e:
            raise ExporterIOError("malformed url") from e
        except requests.exceptions.Timeout as e:
            raise ExporterIOError("connection timeout") from e
        except requests.exceptions.RequestException as e:
            logger.debug("%s %s failed: %s", request.method, request.url, e)
            raise ExporterIOError(f"connection failed: {e}") from e

    def get(self, url: str) -> requests.Response:
        return self.send_request(self.build_get_request(url))

    def close(self) -> None:
        self.session.close()
