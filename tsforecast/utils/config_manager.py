"""
Configuration management utilities.
"""

import yaml
import json
import logging
import jsonschema
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Any, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    """
    Settings for one forecasting run.

    Attributes:
        window_sizes: Candidate input window lengths
        hidden_widths: Candidate recurrent layer widths
        epochs_per_config: Training epochs for every candidate
        train_fraction: Chronological share of points used for training
        min_points: Smallest series accepted for training
        batch_size: Mini-batch size passed to the network
        learning_rate: Adam learning rate
        seed: Optional backend seed; None leaves training stochastic
    """
    window_sizes: Tuple[int, ...] = (3, 5)
    hidden_widths: Tuple[int, ...] = (32, 64)
    epochs_per_config: int = 1000
    train_fraction: float = 0.8
    min_points: int = 20
    batch_size: int = 32
    learning_rate: float = 0.001
    seed: Optional[int] = None

    def __post_init__(self):
        self.window_sizes = tuple(int(w) for w in self.window_sizes)
        self.hidden_widths = tuple(int(h) for h in self.hidden_widths)
        if not self.window_sizes or not self.hidden_widths:
            raise ValueError("window_sizes and hidden_widths must not be empty")
        if min(self.window_sizes) < 1 or min(self.hidden_widths) < 1:
            raise ValueError("window sizes and hidden widths must be >= 1")
        if self.epochs_per_config < 1:
            raise ValueError(f"epochs_per_config must be >= 1, got {self.epochs_per_config}")
        if not 0.0 < self.train_fraction < 1.0:
            raise ValueError(f"train_fraction must be in (0, 1), got {self.train_fraction}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineConfig":
        """Create from a (possibly partial) configuration dictionary."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        unknown = set(data) - set(known)
        if unknown:
            logger.warning(f"Ignoring unknown pipeline config keys: {sorted(unknown)}")
        return cls(**known)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["window_sizes"] = list(self.window_sizes)
        data["hidden_widths"] = list(self.hidden_widths)
        return data


class ConfigManager:
    """
    Manages loading, validation, and merging of configurations.
    """

    def __init__(self, config_dir: Optional[str] = None, schema_dir: Optional[str] = None):
        self.config_dir = Path(config_dir) if config_dir else Path("config")
        self.schema_dir = Path(schema_dir) if schema_dir else self.config_dir / "schemas"

    def load_config(self, config_name: str, schema_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Load a configuration file (YAML or JSON).
        Optionally validate against a schema.

        Args:
            config_name: Name of config file (e.g. 'forecast_config.yaml')
            schema_name: Name of schema file (e.g. 'forecast_config_schema.json')

        Returns:
            Loaded configuration dictionary
        """
        config_path = self.config_dir / config_name

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r") as f:
            if config_path.suffix in (".yaml", ".yml"):
                config = yaml.safe_load(f) or {}
            elif config_path.suffix == ".json":
                config = json.load(f)
            else:
                raise ValueError(f"Unsupported configuration format: {config_path.suffix}")

        if schema_name:
            self.validate_config(config, schema_name)

        return config

    def load_pipeline_config(
        self,
        config_name: str = "forecast_config.yaml",
        schema_name: Optional[str] = "forecast_config_schema.json",
        overrides: Optional[Dict[str, Any]] = None,
    ) -> PipelineConfig:
        """
        Load the 'forecast' section of a config file into a PipelineConfig.

        Args:
            config_name: Name of config file
            schema_name: Schema to validate against (None skips validation)
            overrides: Values merged on top of the file contents

        Returns:
            PipelineConfig instance
        """
        config = self.load_config(config_name, schema_name)
        if overrides:
            config = self.merge_configs(config, {"forecast": overrides})
        pipeline_config = PipelineConfig.from_dict(self.get_value(config, "forecast", {}))
        logger.info(f"Loaded pipeline config from {self.config_dir / config_name}")
        return pipeline_config

    def load_logging_settings(
        self,
        config_name: str = "forecast_config.yaml",
        schema_name: Optional[str] = "forecast_config_schema.json",
    ) -> Dict[str, Any]:
        """
        Read the 'logging' section as keyword arguments for setup_logging.

        Missing keys fall back to setup_logging's defaults.
        """
        config = self.load_config(config_name, schema_name)
        return {
            "log_level": self.get_value(config, "logging.level", "INFO"),
            "log_dir": self.get_value(config, "logging.log_dir", "logs"),
        }

    def validate_config(self, config: Dict[str, Any], schema_name: str) -> None:
        """
        Validate configuration against a schema.

        Args:
            config: Configuration dictionary
            schema_name: Name of schema file
        """
        schema_path = self.schema_dir / schema_name

        if not schema_path.exists():
            raise FileNotFoundError(f"Schema file not found: {schema_path}")

        with open(schema_path, "r") as f:
            schema = json.load(f)

        try:
            jsonschema.validate(instance=config, schema=schema)
        except jsonschema.exceptions.ValidationError as e:
            path_str = " -> ".join(str(p) for p in e.path) if e.path else "root"
            error_msg = f"Configuration validation failed at '{path_str}': {e.message}"
            logger.error(error_msg)
            raise ValueError(error_msg) from e

        logger.info(f"Configuration successfully validated against {schema_name}")

    def merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """
        Deep merge two configurations.

        Args:
            base: Base configuration
            override: Override configuration

        Returns:
            Merged configuration
        """
        merged = base.copy()
        for key, value in override.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self.merge_configs(merged[key], value)
            else:
                merged[key] = value
        return merged

    def get_value(self, config: Dict[str, Any], path: str, default: Any = None) -> Any:
        """
        Get a value from configuration using dot notation.

        Args:
            config: Configuration dictionary
            path: Dot-separated path (e.g., 'forecast.epochs_per_config')
            default: Default value if path not found

        Returns:
            Value at path or default
        """
        current = config
        for key in path.split('.'):
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default
        return current

    def set_value(self, config: Dict[str, Any], path: str, value: Any) -> None:
        """
        Set a value in configuration using dot notation.
        Creates intermediate dictionaries if they don't exist.

        Args:
            config: Configuration dictionary (modified in-place)
            path: Dot-separated path
            value: Value to set
        """
        keys = path.split('.')
        current = config

        for key in keys[:-1]:
            if key not in current or not isinstance(current[key], dict):
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value
