# delve/utils/config_loader.py
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
import yaml

from delve.constants import MAP_HEIGHT, MAP_WIDTH
from delve.utils.logging_utils import LOG_FORMATS

log = structlog.get_logger(__name__)


def load_toml_config(config_path: Path, config_name: str) -> Dict[str, Any]:
    """Loads an optional TOML file. Missing or broken files yield ``{}``."""
    if not config_path.is_file():
        log.info(f"{config_name} config file not found", path=str(config_path))
        return {}
    try:
        with config_path.open("rb") as f:  # tomllib requires bytes mode
            config_data = tomllib.load(f)
        log.info(f"{config_name} config loaded", path=str(config_path))
        return config_data
    except tomllib.TOMLDecodeError as e:
        log.error(
            f"Error parsing TOML for {config_name}",
            path=str(config_path),
            error=str(e),
        )
        return {}


def load_yaml_config(config_path: Path, config_name: str) -> Dict[str, Any]:
    """Loads a required YAML file, re-raising parse errors after logging."""
    if not config_path.is_file():
        log.error(f"{config_name} config file not found", path=str(config_path))
        raise FileNotFoundError(
            f"{config_name} configuration file not found: {config_path}"
        )
    try:
        with config_path.open("r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        log.error(
            f"Error parsing YAML for {config_name}",
            path=str(config_path),
            error=str(e),
        )
        raise
    if config_data is None:
        log.warning(f"{config_name} config file is empty.", path=str(config_path))
        return {}
    log.info(f"{config_name} config loaded", path=str(config_path))
    return config_data


@dataclass
class GenerationConfig:
    """Settings for one level-generation run."""

    map_width: int = MAP_WIDTH
    map_height: int = MAP_HEIGHT
    depth: int = 1
    seed: Optional[int] = None
    # "random" or a BuilderType name / value, e.g. "bsp_dungeon"
    algorithm: str = "random"
    snapshots: bool = False
    fov_radius: int = 8
    log_level: str = "INFO"
    # "console" or "json"
    log_format: str = "console"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GenerationConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            log.warning("Ignoring unknown config keys", keys=unknown)
        config = cls(**{k: v for k, v in data.items() if k in known})
        if config.map_width <= 0 or config.map_height <= 0:
            log.error(
                "Invalid map dimensions in config",
                width=config.map_width,
                height=config.map_height,
            )
            raise ValueError("map_width and map_height must be positive integers.")
        if config.log_format not in LOG_FORMATS:
            log.error("Invalid log format in config", log_format=config.log_format)
            raise ValueError(
                f"log_format must be one of {', '.join(LOG_FORMATS)}; "
                f"got {config.log_format!r}"
            )
        return config


def load_generation_config(
    yaml_path: Path, toml_override_path: Optional[Path] = None
) -> GenerationConfig:
    """Reads the YAML settings, then applies any local TOML overrides."""
    data = load_yaml_config(yaml_path, "Main")
    if toml_override_path is not None:
        data.update(load_toml_config(toml_override_path, "Settings"))
    return GenerationConfig.from_dict(data)


__all__ = [
    "GenerationConfig",
    "load_generation_config",
    "load_toml_config",
    "load_yaml_config",
]
