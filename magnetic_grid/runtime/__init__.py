"""
运行时模块

包含:
- event_loop: 手势脚本回放
- haptics: 触觉反馈记录
"""

from magnetic_grid.runtime.event_loop import ReplayEventLoop, ReplayScript, load_script
from magnetic_grid.runtime.haptics import RecordingHapticFeedback

__all__ = [
    "ReplayEventLoop",
    "ReplayScript",
    "load_script",
    "RecordingHapticFeedback",
]
