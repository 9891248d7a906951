"""
预览模块

包含:
- preview_system: 拖拽中的假想布局
"""

from magnetic_grid.preview.preview_system import PreviewSystem

__all__ = ["PreviewSystem"]
