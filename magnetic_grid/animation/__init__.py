"""
动画模块

包含:
- curves: 缓动曲线
- orchestrator: 配置表过渡编排
"""

from magnetic_grid.animation.curves import CURVES, get_curve
from magnetic_grid.animation.orchestrator import AnimationOrchestrator, Transition

__all__ = [
    "CURVES",
    "get_curve",
    "AnimationOrchestrator",
    "Transition",
]
