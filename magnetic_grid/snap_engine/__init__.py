"""
吸附引擎模块

包含:
- snap: 离散宽度表、位置吸附、可用位置搜索
"""

from magnetic_grid.snap_engine.snap import SnapEngine

__all__ = ["SnapEngine"]
