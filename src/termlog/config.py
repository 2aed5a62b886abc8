"""Configuration loading for termlog.

Supports two file formats, looked up in the working directory:
1. TOML (termlog.toml, .termlog.toml)
2. JSON (termlog.json, .termlog.json)

Missing files mean defaults; every key is optional.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .errors import ConfigError

# Python 3.11+ has tomllib in stdlib; fall back to tomli for older versions
try:
    import tomllib  # Python 3.11+
except ImportError:  # pragma: no cover
    import tomli as tomllib  # Python <3.11


EXPORT_FORMATS = ("markdown", "text")


@dataclass
class ServerConfig:
    """Where the log service listens and keeps its data."""
    host: str = "127.0.0.1"
    port: int = 3000
    database: Path = field(default_factory=lambda: Path("logs.db"))


@dataclass
class ClientConfig:
    """How the terminal client reaches the service and renders entries."""
    api_url: str = "http://localhost:3000"
    timeout: float = 10.0
    exit_delay: float = 1.0
    timezone: str = "Europe/Istanbul"


@dataclass
class ExportConfig:
    """Defaults for the export command."""
    output: str = "logs.md"
    format: str = "markdown"


@dataclass
class TermlogConfig:
    """Complete configuration for the server and the client."""
    server: ServerConfig = field(default_factory=ServerConfig)
    client: ClientConfig = field(default_factory=ClientConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    log_level: Optional[str] = None  # None = entry point default

    # Directory relative paths are resolved against
    base_dir: Path = field(default_factory=Path.cwd)

    def get_database_path(self) -> Path:
        if self.server.database.is_absolute():
            return self.server.database
        return self.base_dir / self.server.database


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def dict_to_config(data: dict[str, Any], base_dir: Path) -> TermlogConfig:
    """Convert dictionary to TermlogConfig."""
    config = TermlogConfig(base_dir=base_dir)

    try:
        if "server" in data:
            srv = data["server"]
            if "host" in srv:
                config.server.host = str(srv["host"])
            if "port" in srv:
                config.server.port = int(srv["port"])
            if "database" in srv:
                config.server.database = Path(srv["database"])

        if "client" in data:
            cli = data["client"]
            if "api_url" in cli:
                config.client.api_url = str(cli["api_url"]).rstrip("/")
            if "timeout" in cli:
                config.client.timeout = float(cli["timeout"])
            if "exit_delay" in cli:
                config.client.exit_delay = float(cli["exit_delay"])
            if "timezone" in cli:
                config.client.timezone = str(cli["timezone"])

        if "export" in data:
            exp = data["export"]
            if "output" in exp:
                config.export.output = str(exp["output"])
            if "format" in exp:
                config.export.format = str(exp["format"])

        if "logging" in data:
            if "level" in data["logging"]:
                config.log_level = str(data["logging"]["level"]).upper()
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration value: {e}") from e

    if config.export.format not in EXPORT_FORMATS:
        raise ConfigError(f"Unsupported export format: {config.export.format}")
    if config.client.exit_delay < 0:
        raise ConfigError("client.exit_delay must not be negative")

    return config


def find_config_file(directory: Path) -> Optional[Path]:
    """Find configuration file in a directory.

    Search order:
    1. termlog.toml
    2. termlog.json
    3. .termlog.toml
    4. .termlog.json
    """
    candidates = [
        "termlog.toml",
        "termlog.json",
        ".termlog.toml",
        ".termlog.json",
    ]

    for name in candidates:
        path = directory / name
        if path.exists():
            return path

    return None


def load_config(directory: Optional[Path] = None, config_path: Optional[Path] = None) -> TermlogConfig:
    """Load termlog configuration.

    Args:
        directory: Directory to search for a config file (default: cwd)
        config_path: Optional explicit path to config file

    Returns:
        TermlogConfig instance

    Raises:
        ConfigError: If the file cannot be read or has an unsupported type
    """
    directory = directory or Path.cwd()
    if config_path is None:
        config_path = find_config_file(directory)

    if config_path is None:
        # No config file - use defaults
        return TermlogConfig(base_dir=directory)

    suffix = config_path.suffix.lower()

    try:
        if suffix == ".toml":
            config_dict = load_toml_config(config_path)
        elif suffix == ".json":
            config_dict = load_json_config(config_path)
        else:
            raise ConfigError(f"Unsupported config file type: {suffix}")
    except (OSError, ValueError) as e:
        # tomllib.TOMLDecodeError and json.JSONDecodeError are both ValueErrors
        raise ConfigError(f"Cannot load config from {config_path}: {e}") from e

    return dict_to_config(config_dict, config_path.resolve().parent)
