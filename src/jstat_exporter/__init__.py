"""Prometheus exporter for JVM statistics reported by jstat."""

__version__ = "0.1.0"
