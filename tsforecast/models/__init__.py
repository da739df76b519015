"""Model implementations for forecasting."""

from tsforecast.models.base_model import BaseModel, ModelConfig

__all__ = ["BaseModel", "ModelConfig"]
