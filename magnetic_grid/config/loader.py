"""
配置加载器
"""

import hashlib
import inspect
import json
import yaml
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict

from magnetic_grid.config.schema import (
    AnimationConfig,
    BehaviorConfig,
    DropZoneConfig,
    GridConfig,
    LayoutEngineConfig,
    StorageConfig,
    ThresholdConfig,
)
from magnetic_grid.utils.types import ConfigHash


def load_config(config_path: str) -> LayoutEngineConfig:
    """
    从 YAML 文件加载配置
    
    Args:
        config_path: 配置文件路径
        
    Returns:
        LayoutEngineConfig 实例
    """
    path = Path(config_path)
    
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    
    return parse_config(data or {})


# 段落名 → dataclass；未列出的顶层键被忽略
SECTIONS = {
    "grid": GridConfig,
    "thresholds": ThresholdConfig,
    "drop_zone": DropZoneConfig,
    "animation": AnimationConfig,
    "behavior": BehaviorConfig,
    "storage": StorageConfig,
}


def parse_config(data: Dict[str, Any]) -> LayoutEngineConfig:
    """解析配置字典，缺失的段落取默认值"""
    sections = {
        name: _parse_section(data.get(name) or {}, cls)
        for name, cls in SECTIONS.items()
    }
    return LayoutEngineConfig(name=data.get("name", LayoutEngineConfig.name), **sections)


def _parse_section(data: Dict[str, Any], cls: type) -> Any:
    """解析配置段落"""
    if not data:
        return cls()
    
    # 过滤掉 cls 不接受的字段
    sig = inspect.signature(cls)
    valid_keys = set(sig.parameters.keys())
    filtered_data = {k: v for k, v in data.items() if k in valid_keys}
    
    return cls(**filtered_data)


def compute_config_hash(config: LayoutEngineConfig) -> ConfigHash:
    """
    计算配置哈希
    
    写入审计事件，用于追踪配置变化
    
    Returns:
        SHA256 哈希的前 8 位
    """
    config_str = json.dumps(asdict(config), sort_keys=True, default=str)
    hash_obj = hashlib.sha256(config_str.encode())
    return ConfigHash(hash_obj.hexdigest()[:8])


def save_config_snapshot(config: LayoutEngineConfig, output_path: str) -> None:
    """
    保存配置快照
    
    Args:
        config: 配置实例
        output_path: 输出路径
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(asdict(config), f, allow_unicode=True, default_flow_style=False)
