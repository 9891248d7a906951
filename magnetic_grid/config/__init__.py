"""
配置模块

包含:
- schema: 配置数据结构
- loader: 配置加载
- validator: 配置校验
"""

from magnetic_grid.config.schema import (
    AnimationConfig,
    BehaviorConfig,
    DropZoneConfig,
    GridConfig,
    LayoutEngineConfig,
    StorageConfig,
    ThresholdConfig,
)
from magnetic_grid.config.loader import compute_config_hash, load_config, parse_config
from magnetic_grid.config.validator import ConfigValidator, ConfigValidationError

__all__ = [
    "AnimationConfig",
    "BehaviorConfig",
    "DropZoneConfig",
    "GridConfig",
    "LayoutEngineConfig",
    "StorageConfig",
    "ThresholdConfig",
    "compute_config_hash",
    "load_config",
    "parse_config",
    "ConfigValidator",
    "ConfigValidationError",
]
