"""Base interface for data exporters."""

from __future__ import annotations

import abc

from ..table import TransferData
from .settings import ConnectionSettings


class BaseExporter(abc.ABC):
    """Abstract base for exporters that receive tabular snapshots."""

    @abc.abstractmethod
    def initialize(self) -> None:
        """Start background processing."""

    @abc.abstractmethod
    def add_export(self, data: TransferData) -> None:
        """Queue a snapshot for export; must not block."""

    @abc.abstractmethod
    def test_connection(self, settings: ConnectionSettings) -> str:
        """Check *settings* against the server and return a success message."""

    @abc.abstractmethod
    def shutdown(self) -> None:
        """Stop background processing and release resources."""
