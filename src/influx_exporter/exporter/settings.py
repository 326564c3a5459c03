"""Connection settings for one InfluxDB server."""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field

from ..config import InfluxConfig

_NON_VERSION_CHARS = re.compile(r"[^0-9.]")


def parse_major_version(version: str | None) -> int:
    """Leading integer of a dotted version string, ``1`` when unparsable.

    >>> parse_major_version("v2.1")
    2
    >>> parse_major_version("unknown")
    1
    """
    if version is None:
        return 1
    first = (_NON_VERSION_CHARS.sub("", version) + ".").split(".")[0]
    try:
        return int(first)
    except ValueError:
        return 1


@dataclass
class ConnectionSettings:
    """Where and how to reach an InfluxDB server.

    Connection fields are never changed after construction; build a new
    instance when the configuration changes.  The server version is cached
    lazily: it is set at most once via :meth:`set_version_if_absent` and
    cleared with :meth:`reset_version`.

    For InfluxDB 2.x *user* is the organization and *password* the API
    token.
    """

    host: str = "localhost"
    port: int = 8086
    user: str | None = None
    password: str | None = None
    database: str = "solarreader"
    ssl: bool = False
    read_timeout_ms: int = 5000
    version: str | None = field(default=None, init=False, compare=False)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    @classmethod
    def from_config(cls, config: InfluxConfig) -> ConnectionSettings:
        return cls(
            host=config.host,
            port=int(config.port),
            user=config.user or None,
            password=config.password or None,
            database=config.database,
            ssl=bool(config.ssl),
            read_timeout_ms=int(config.read_timeout_ms),
        )

    def to_config(self) -> InfluxConfig:
        return InfluxConfig(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
            database=self.database,
            ssl=self.ssl,
            read_timeout_ms=self.read_timeout_ms,
        )

    @property
    def scheme(self) -> str:
        return "https" if self.ssl else "http"

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"

    @property
    def connection_url(self) -> str:
        """Server root, used for the version probe."""
        return f"{self.base_url}/"

    @property
    def has_credentials(self) -> bool:
        return bool(self.user) and bool(self.password)

    @property
    def major_version(self) -> int:
        return parse_major_version(self.version)

    def set_version_if_absent(self, version: str) -> bool:
        """Cache *version* unless one is already cached; True if stored."""
        with self._lock:
            if self.version is not None:
                return False
            self.version = version
            return True

    def reset_version(self) -> None:
        with self._lock:
            self.version = None
