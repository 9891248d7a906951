"""
存储模块

包含:
- repository: 内存与 JSON 文件布局存储
"""

from magnetic_grid.storage.repository import (
    InMemoryLayoutRepository,
    JsonLayoutRepository,
    create_repository,
)

__all__ = ["InMemoryLayoutRepository", "JsonLayoutRepository", "create_repository"]
