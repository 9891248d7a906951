"""
调整大小模块

包含:
- controller: 调整大小控制器
"""

from magnetic_grid.resize.controller import ResizeController

__all__ = ["ResizeController"]
