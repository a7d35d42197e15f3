"""Configuration for parsing, layout and code generation."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml


@dataclass
class OTUIConfig:
    """Settings shared by the generator, layout engine and preview.

    YAML format (every key optional):
    ```yaml
    center_threshold: 10
    default_width: 400
    default_height: 300
    module_name: main
    module_title: My Module
    registry_path: widgets.yaml
    style_paths: [data/styles]
    image_paths: [data/images]
    ```

    Attributes:
        center_threshold: Max distance (px) between centers to anchor to a center
        default_width: Width used when a widget has no size information
        default_height: Height used when a widget has no size information
        module_name: Module id used for the default document and scaffolds
        module_title: Human readable module title
        registry_path: Optional widget registry YAML replacing the packaged one
        style_paths: Directories searched for .otui style files
        image_paths: Directories searched for images
    """

    center_threshold: float = 10.0
    default_width: int = 400
    default_height: int = 300
    module_name: str = "main"
    module_title: str = "My Module"
    registry_path: Path | None = None
    style_paths: list[Path] = field(default_factory=list)
    image_paths: list[Path] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.registry_path is not None:
            self.registry_path = Path(self.registry_path)
        self.style_paths = [Path(p) for p in self.style_paths]
        self.image_paths = [Path(p) for p in self.image_paths]
        try:
            self.center_threshold = float(self.center_threshold)
            self.default_width = int(self.default_width)
            self.default_height = int(self.default_height)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid numeric config value: {e}") from e
        if self.center_threshold < 0:
            raise ValueError("center_threshold must not be negative")
        if self.default_width <= 0 or self.default_height <= 0:
            raise ValueError("default size must be positive")


def load_config(path: str | Path) -> OTUIConfig:
    """Load configuration from a YAML file.

    Relative paths inside the file are resolved against the file's directory.

    Args:
        path: Path to the YAML file

    Returns:
        OTUIConfig instance

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file contains unknown keys or invalid values
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path) as f:
        data = yaml.safe_load(f)

    config = _config_from_data(data)
    base_dir = path.parent
    if config.registry_path is not None and not config.registry_path.is_absolute():
        config.registry_path = base_dir / config.registry_path
    config.style_paths = [p if p.is_absolute() else base_dir / p for p in config.style_paths]
    config.image_paths = [p if p.is_absolute() else base_dir / p for p in config.image_paths]
    return config


def load_config_string(yaml_string: str) -> OTUIConfig:
    """Load configuration from a YAML string."""
    return _config_from_data(yaml.safe_load(yaml_string))


def _config_from_data(data: Any) -> OTUIConfig:
    if data is None:
        return OTUIConfig()
    if not isinstance(data, dict):
        raise ValueError("Config must be a mapping")

    known = {f.name for f in fields(OTUIConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

    values = dict(data)
    for key in ("style_paths", "image_paths"):
        if key in values and values[key] is None:
            values[key] = []
        elif isinstance(values.get(key), str):
            values[key] = [values[key]]
    return OTUIConfig(**values)
