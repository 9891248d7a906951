"""
布局存储实现

持久化格式：扁平记录列表 [{id, width, positionX, positionY}, ...]
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from magnetic_grid.config.schema import StorageConfig
from magnetic_grid.interfaces import ILayoutRepository
from magnetic_grid.models.field import (
    ConfigMap,
    FieldConfig,
    configs_from_records,
    configs_to_records,
)


class InMemoryLayoutRepository(ILayoutRepository):
    """内存存储（测试和回放）"""
    
    def __init__(self):
        self._storage: Dict[str, List[Dict[str, Any]]] = {}
        self.save_count = 0
    
    def load(self, key: str) -> ConfigMap:
        return configs_from_records(self._storage.get(key, []))
    
    def save(self, key: str, configs: ConfigMap) -> None:
        self._storage[key] = configs_to_records(configs)
        self.save_count += 1
    
    def exists(self, key: str) -> bool:
        return bool(self._storage.get(key))
    
    def clear(self, key: str) -> None:
        self._storage.pop(key, None)


class JsonLayoutRepository(ILayoutRepository):
    """
    JSON 文件存储
    
    每个 key 对应 <directory>/<key>.json；
    缺字段或类型错误的记录在读取时跳过
    """
    
    def __init__(self, directory: str):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.skipped_records = 0
    
    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"
    
    def load(self, key: str) -> ConfigMap:
        path = self._path(key)
        if not path.exists():
            return {}
        
        with open(path, "r", encoding="utf-8") as f:
            try:
                records = json.load(f)
            except json.JSONDecodeError:
                self.skipped_records += 1
                return {}
        
        if not isinstance(records, list):
            self.skipped_records += 1
            return {}
        
        configs: ConfigMap = {}
        for record in records:
            try:
                config = FieldConfig.from_record(record)
            except (KeyError, TypeError, ValueError):
                self.skipped_records += 1
                continue
            configs[config.id] = config
        return configs
    
    def save(self, key: str, configs: ConfigMap) -> None:
        path = self._path(key)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(configs_to_records(configs), f, ensure_ascii=False, indent=2)
    
    def exists(self, key: str) -> bool:
        return bool(self.load(key))
    
    def clear(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()


def create_repository(storage: StorageConfig, base_dir: Optional[str] = None) -> ILayoutRepository:
    """
    按配置创建存储
    
    json 后端的相对目录以 base_dir 为根
    """
    if storage.backend == "memory":
        return InMemoryLayoutRepository()
    
    directory = Path(storage.directory)
    if base_dir is not None and not directory.is_absolute():
        directory = Path(base_dir) / directory
    return JsonLayoutRepository(str(directory))
