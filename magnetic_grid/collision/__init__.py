"""
碰撞检测模块

包含:
- detector: 重叠判定、行查询、放置校验
"""

from magnetic_grid.collision.detector import CollisionDetector, FreeRun

__all__ = ["CollisionDetector", "FreeRun"]
