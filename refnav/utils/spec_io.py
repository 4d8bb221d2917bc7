"""Loading and saving of specifications and tool configuration."""

import copy
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from .reference_tree import DEFAULT_NAVIGATION_CONFIG

logger = logging.getLogger(__name__)


# Default configuration
DEFAULT_CONFIG: dict[str, Any] = {
    "ordering": {
        "strict": False,
    },
    "navigation": dict(DEFAULT_NAVIGATION_CONFIG),
    "docs": {
        "tab": "API Reference",
    },
    "output": {
        "json_indent": 2,
        "pretty": False,
    },
}


class SpecLoadError(ValueError):
    """Raised when a specification file cannot be read or parsed."""


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from YAML file or use defaults."""
    if config_path is None:
        return copy.deepcopy(DEFAULT_CONFIG)
    try:
        with config_path.open() as f:
            config = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file not found: %s. Using defaults.", config_path)
        return copy.deepcopy(DEFAULT_CONFIG)
    except yaml.YAMLError:
        logger.exception("Error parsing configuration %s", config_path)
        return copy.deepcopy(DEFAULT_CONFIG)

    logger.info("Loaded configuration from %s", config_path)
    return _deep_merge(DEFAULT_CONFIG, config)


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_spec(spec_path: Path) -> dict[str, Any]:
    """Load an OpenAPI specification from JSON file.

    Raises:
        SpecLoadError: If the file is missing, unreadable or not a JSON object.
    """
    try:
        with spec_path.open(encoding="utf-8") as f:
            spec = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        msg = f"Could not parse JSON from {spec_path}: {e}"
        raise SpecLoadError(msg) from e
    except OSError as e:
        msg = f"Could not read {spec_path}: {e}"
        raise SpecLoadError(msg) from e

    if not isinstance(spec, dict):
        msg = f"Expected a JSON object in {spec_path}, got {type(spec).__name__}"
        raise SpecLoadError(msg)
    return spec


def save_spec(
    spec: dict[str, Any],
    output_path: Path,
    indent: int | None = 2,
) -> None:
    """Save a JSON document.

    With indent=None the output is compact; otherwise it ends with a newline.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        if indent is None:
            json.dump(spec, f, separators=(",", ":"), ensure_ascii=False)
        else:
            json.dump(spec, f, indent=indent, ensure_ascii=False)
            f.write("\n")
