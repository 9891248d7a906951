"""
拖拽模块

包含:
- controller: 拖拽控制器
"""

from magnetic_grid.drag.controller import DragController

__all__ = ["DragController"]
