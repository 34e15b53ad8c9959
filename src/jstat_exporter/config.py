"""Configuration management for jstat exporter."""

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Tuple

LOG_LEVELS = ("debug", "info", "warning", "error")


class ConfigError(ValueError):
    """Invalid exporter configuration."""
    pass


@dataclass
class ExporterConfig:
    """Exporter configuration."""

    target_pid: str = ""
    listen_address: str = ":9010"
    metrics_path: str = "/metrics"
    max_requests: int = 40  # 0 disables the limit
    jstat_path: str = "/usr/bin/jstat"
    jstat_timeout: float = 0  # seconds, 0 waits forever
    exit_on_error: bool = True
    log_level: str = "info"

    def validate(self) -> None:
        """Raise ConfigError if the configuration cannot be served."""
        if not self.target_pid:
            raise ConfigError("target pid is required")
        if not self.metrics_path.startswith("/") or self.metrics_path == "/":
            raise ConfigError(f"invalid metrics path: {self.metrics_path!r}")
        if self.max_requests < 0:
            raise ConfigError("max requests must not be negative")
        if self.jstat_timeout < 0:
            raise ConfigError("jstat timeout must not be negative")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"invalid log level: {self.log_level!r}")
        parse_listen_address(self.listen_address)


def parse_listen_address(address: str) -> Tuple[str, int]:
    """
    Split a ``host:port`` listen address.

    An empty host (``:9010``) binds all interfaces.

    Returns:
        Tuple of (host, port)
    """
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ConfigError(f"listen address must be host:port, got {address!r}")

    try:
        port_num = int(port)
    except ValueError:
        raise ConfigError(f"invalid port in listen address: {address!r}")

    if not 0 <= port_num <= 65535:
        raise ConfigError(f"port out of range in listen address: {address!r}")

    return host or "0.0.0.0", port_num


class ConfigManager:
    """Loads exporter configuration from a JSON file."""

    def __init__(self, config_path: str):
        self.config_path = Path(config_path)

    def load(self) -> ExporterConfig:
        """Load configuration from file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        with open(self.config_path, "r") as f:
            data = json.load(f)

        known = {f.name for f in fields(ExporterConfig)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys in {self.config_path}: {', '.join(unknown)}")

        if "target_pid" in data:
            data["target_pid"] = str(data["target_pid"])

        return ExporterConfig(**data)