"""
Configuration loader for the Book Search service.

Reads config/config.json into typed dataclasses. Every key has a
default, so a config file only needs the values it changes. Access goes
through the get_config() singleton; reload_config() re-reads the file.
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional

from .exceptions import ConfigurationError

CONFIG_ENV_VAR = "BOOK_SEARCH_CONFIG"

_log = logging.getLogger(__name__)


@dataclass
class PathsConfig:
    """Filesystem locations. Relative paths resolve against the project root."""
    database_path: Path = Path("output/books.db")
    files_directory: Path = Path("public/files")
    logs_directory: Path = Path("output/logs")


@dataclass
class ExtractionConfig:
    """PDF loading and decoding."""
    primary_backend: str = "pypdf"
    fallback_backend: str = "pdfplumber"
    max_file_size_mb: int = 100
    download_timeout_seconds: float = 30.0
    server_url: str = "http://localhost:8000"
    files_url_prefix: str = "/files/"
    page_placeholder: str = "[unavailable]"


@dataclass
class PipelineConfig:
    """Background extraction worker pool."""
    max_workers: int = 2


@dataclass
class SearchConfig:
    """Snippet search."""
    max_matches_per_page: int = 15
    context_chars: int = 40
    normalize_arabic: bool = True
    max_workers: int = 1


@dataclass
class APIConfig:
    """HTTP server."""
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass
class LoggingConfig:
    """Logging behaviour."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_file_size_mb: int = 10
    backup_count: int = 5


@dataclass
class Config:
    """All configuration sections plus the project root they were resolved against."""
    paths: PathsConfig = field(default_factory=PathsConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    api: APIConfig = field(default_factory=APIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    project_root: Path = field(default_factory=Path)

    @classmethod
    def from_file(cls, config_path: Path) -> "Config":
        """
        Load configuration from a JSON file.

        The project root is the parent of the directory holding the file.

        Raises:
            ConfigurationError: If the file is missing, not JSON, or has invalid values.
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}",
                {"path": str(config_path)}
            )

        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {e}",
                {"path": str(config_path)}
            )

        return cls.from_dict(data, config_path.resolve().parent.parent)

    @classmethod
    def from_dict(cls, data: dict, project_root: Path) -> "Config":
        """Build a validated Config from parsed JSON."""
        sections = {}

        for section in fields(cls):
            if section.name == "project_root":
                continue
            sections[section.name] = _build_section(
                section.default_factory, data.get(section.name) or {}, section.name
            )

        paths = sections["paths"]
        for path_field in fields(paths):
            setattr(paths, path_field.name, _resolve_path(getattr(paths, path_field.name), project_root))

        config = cls(project_root=project_root, **sections)
        config.validate()
        return config

    def validate(self) -> None:
        """
        Raises:
            ConfigurationError: If a value is out of range.
        """
        checks = (
            ("extraction.download_timeout_seconds", self.extraction.download_timeout_seconds, 0),
            ("extraction.max_file_size_mb", self.extraction.max_file_size_mb, 0),
            ("search.max_matches_per_page", self.search.max_matches_per_page, 0),
            ("pipeline.max_workers", self.pipeline.max_workers, 0),
            ("search.max_workers", self.search.max_workers, 0),
        )

        for name, value, floor in checks:
            if value <= floor:
                raise ConfigurationError(f"{name} must be positive", {"value": value})

        if self.search.context_chars < 0:
            raise ConfigurationError(
                "search.context_chars must not be negative",
                {"value": self.search.context_chars}
            )


def _build_section(section_cls, values: dict, name: str):
    """Instantiate a section dataclass, ignoring keys it does not define."""
    known = {f.name for f in fields(section_cls)}
    unknown = set(values) - known

    if unknown:
        _log.warning(
            f"Unknown keys in config section '{name}': {', '.join(sorted(unknown))}"
        )

    return section_cls(**{key: value for key, value in values.items() if key in known})


def _resolve_path(value, project_root: Path) -> Path:
    path = Path(value)
    return path if path.is_absolute() else project_root / path


_config_instance: Optional[Config] = None


def get_config(config_path: Path = None) -> Config:
    """
    Get the singleton Config instance.

    Args:
        config_path: Config file to load. If omitted on first use, the
                     BOOK_SEARCH_CONFIG environment variable is used, then
                     config/config.json is searched upward from the working directory.

    Returns:
        The global Config instance.

    Raises:
        ConfigurationError: If config cannot be loaded.
    """
    global _config_instance

    if _config_instance is None or config_path is not None:
        _config_instance = Config.from_file(config_path or _find_config_file())

    return _config_instance


def _find_config_file() -> Path:
    """Locate config.json from the environment or the working directory upward."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)

    current = Path.cwd()

    for directory in (current, *current.parents):
        candidate = directory / "config" / "config.json"
        if candidate.exists():
            return candidate

    raise ConfigurationError(
        "Could not find config/config.json in current directory or parents",
        {"cwd": str(current)}
    )


def reload_config(config_path: Path = None) -> Config:
    """
    Discard the cached configuration and load it again.

    Args:
        config_path: Optional path to config file.

    Returns:
        Fresh Config instance.
    """
    global _config_instance
    _config_instance = None
    return get_config(config_path)


if __name__ == "__main__":
    try:
        config = get_config()
        print(f"Project root: {config.project_root}")
        print(f"Database path: {config.paths.database_path}")
        print(f"Files directory: {config.paths.files_directory}")
        print(f"Primary backend: {config.extraction.primary_backend}")
        print(f"Matches per page: {config.search.max_matches_per_page}")
    except ConfigurationError as e:
        print(f"Config error: {e.message}")
