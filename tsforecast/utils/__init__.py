"""Logging, configuration, error handling and progress utilities."""

from tsforecast.utils.config_manager import ConfigManager, PipelineConfig
from tsforecast.utils.monitoring import ProgressTracker, SearchProgress

__all__ = ["ConfigManager", "PipelineConfig", "ProgressTracker", "SearchProgress"]
