"""FastNetMon Exporter - Prometheus exporter for FastNetMon blocked IPs."""

__version__ = "1.0.0"
