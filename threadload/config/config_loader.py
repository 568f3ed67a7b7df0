"""
Configuration manager for thread load monitoring.

This module provides the ConfigLoader class for loading and validating
monitor configuration from YAML files.
"""
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from threadload.config.monitor_config import MonitorConfig
from threadload.util.log_config import setup_logger

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config_yaml"

logger = setup_logger(__name__)


class ConfigLoader:

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH, env: Optional[str] = None):
        self.config_path = Path(config_path)
        self.env = env
        self.config_data = self._load_config()

    def _read_yaml(self, file_name: str) -> Dict[str, Any]:
        config_file = self.config_path / file_name
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping in {config_file}, got {type(data).__name__}")
        return data

    def _load_config(self) -> MonitorConfig:
        """
        Load and parse monitor configuration from YAML file.
        Supports environment-specific overrides via config_<env>.yaml

        Returns:
            MonitorConfig: Validated monitor configuration instance
        """
        data = self._read_yaml("config.yaml")

        if self.env:
            # dict.update() will overwrite existing keys
            data.update(self._read_yaml(f"config_{self.env}.yaml"))
            logger.debug(f"Applied config override for env '{self.env}'")

        config = MonitorConfig()

        config.interval = float(data["interval"])
        if config.interval <= 0:
            raise ValueError(f"interval must be > 0, got {config.interval}")

        duration = data.get("duration")
        config.duration = float(duration) if duration is not None else None
        if config.duration is not None and config.duration <= 0:
            raise ValueError(f"duration must be > 0 or null, got {config.duration}")

        config.min_resolution_nanos = int(data.get("min_resolution_nanos", config.min_resolution_nanos))
        if config.min_resolution_nanos < 0:
            raise ValueError(f"min_resolution_nanos must be >= 0, got {config.min_resolution_nanos}")

        processor_count = data.get("processor_count")
        config.processor_count = int(processor_count) if processor_count is not None else None

        config.cwd = str(data.get("output_cwd", config.cwd))
        config.log_level = str(data.get("log_level", config.log_level))

        return config


if __name__ == "__main__":

    # python3 -m threadload.config.config_loader

    loader = ConfigLoader(env="dev")
    print(loader.config_data)
