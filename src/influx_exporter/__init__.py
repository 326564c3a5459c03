"""Asynchronous InfluxDB line-protocol exporter for tabular snapshots."""

__version__ = "1.0.1"
