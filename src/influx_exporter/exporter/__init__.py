"""Exporters for tabular snapshots."""

from .influx import ExporterState, InfluxExporter
from .settings import ConnectionSettings

__all__ = ["ConnectionSettings", "ExporterState", "InfluxExporter"]
