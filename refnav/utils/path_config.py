"""Centralized path configuration for the reference generator.

Provides a singleton PathConfig class that resolves the OpenAPI source,
the reference output tree, reports and the tool config from
config/paths.yaml, falling back to built-in defaults.
"""

import logging
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)


class PathConfig:
    """Centralized configuration for all tool paths.

    Implements singleton pattern for efficiency and consistency.
    Reads from config/paths.yaml with sensible defaults.
    """

    _instance: Optional["PathConfig"] = None
    _initialized: bool = False

    DEFAULTS: dict[tuple[str, ...], str] = {
        ("openapi", "spec"): "api-reference/openapi.json",
        ("reference", "directory"): "api-reference",
        ("reports", "directory"): "reports",
        ("reports", "reference_report"): "reference-report.json",
        ("config", "refnav"): "config/refnav.yaml",
    }

    def __new__(cls, config_path: Path | None = None) -> "PathConfig":  # noqa: ARG003
        """Implement singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False  # noqa: SLF001
        return cls._instance

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize path configuration from YAML file.

        Args:
            config_path: Path to paths.yaml. Defaults to config/paths.yaml
                        relative to project root.
        """
        if self._initialized:
            return

        self.config_path = (
            config_path or Path(__file__).parent.parent.parent / "config" / "paths.yaml"
        )
        self.config: dict[str, object] = {}
        self._load_config()
        self._initialized = True

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next instantiation reloads config."""
        cls._instance = None

    def _load_config(self) -> None:
        """Load path configuration from YAML file."""
        try:
            with self.config_path.open() as f:
                self.config = yaml.safe_load(f) or {}
                logger.info("Loaded path configuration from %s", self.config_path)
        except FileNotFoundError:
            logger.warning("Config file not found: %s. Using defaults.", self.config_path)
            self.config = {}
        except yaml.YAMLError:
            logger.exception("Error parsing path configuration")
            self.config = {}

    def _get_path(self, *keys: str) -> str:
        """Get a path value from nested config keys, or its default."""
        value: object = self.config
        for key in keys:
            if isinstance(value, dict):
                value = value.get(key)
            else:
                value = None
                break

        if isinstance(value, str):
            return value

        return self.DEFAULTS.get(tuple(keys), "")

    @property
    def openapi_spec(self) -> Path:
        """Path to the OpenAPI document the reference is built from."""
        return Path(self._get_path("openapi", "spec"))

    @property
    def reference_dir(self) -> Path:
        """Directory receiving navigation JSON and introduction pages."""
        return Path(self._get_path("reference", "directory"))

    @property
    def reports_dir(self) -> Path:
        """Directory for generated reports."""
        return Path(self._get_path("reports", "directory"))

    @property
    def reference_report(self) -> Path:
        """Path to the reference generation report (JSON)."""
        return self.reports_dir / self._get_path("reports", "reference_report")

    @property
    def refnav_config(self) -> Path:
        """Path to ordering and navigation configuration."""
        return Path(self._get_path("config", "refnav"))

    def ensure_report_dir_exists(self) -> Path:
        """Ensure reports directory exists and return its path."""
        self.reports_dir.mkdir(parents=True, exist_ok=True)
        return self.reports_dir
