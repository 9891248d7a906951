"""
数据模型模块

包含:
- grid: 网格常量与离散宽度表
- field: 字段配置与持久化记录
- gesture: 手势状态与结果
- preview: 预览状态
- events: 输入事件
"""

from magnetic_grid.models.field import (
    ConfigMap,
    FieldConfig,
    Position,
    configs_from_records,
    configs_to_records,
    replace_config,
)
from magnetic_grid.models.gesture import (
    DragEndResult,
    DragState,
    DragUpdateResult,
    DropZone,
    DropZoneResult,
    GesturePhase,
    Point,
    ResizeDirection,
    ResizeEndResult,
    ResizeSnapshot,
    ResizeUpdateResult,
    is_valid_transition,
)
from magnetic_grid.models.preview import PreviewInfo, PreviewState
from magnetic_grid.models.events import EventType, GestureEvent

__all__ = [
    # Field
    "ConfigMap",
    "FieldConfig",
    "Position",
    "configs_from_records",
    "configs_to_records",
    "replace_config",
    # Gesture
    "DragEndResult",
    "DragState",
    "DragUpdateResult",
    "DropZone",
    "DropZoneResult",
    "GesturePhase",
    "Point",
    "ResizeDirection",
    "ResizeEndResult",
    "ResizeSnapshot",
    "ResizeUpdateResult",
    "is_valid_transition",
    # Preview
    "PreviewInfo",
    "PreviewState",
    # Events
    "EventType",
    "GestureEvent",
]
