"""
手势状态与结果模型

手势状态机：
- 拖拽: IDLE → DRAGGING → PREVIEWING → ENDED
- 调整大小: IDLE → RESIZING → ENDED
- 任意状态都可以直接开始新手势（覆盖旧手势）
"""

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Dict, Optional, Set

from magnetic_grid.models.field import ConfigMap, FieldConfig, Position


class GesturePhase(Enum):
    """单个字段的手势阶段"""
    IDLE = auto()
    DRAGGING = auto()          # 未超过拖拽阈值
    PREVIEWING = auto()        # 超过阈值，显示预览
    RESIZING = auto()
    ENDED = auto()


class ResizeDirection(Enum):
    """调整大小的边"""
    LEFT = "left"
    RIGHT = "right"


class DropZone(Enum):
    """放置区"""
    LEFT_DROP = auto()         # 左侧 35%
    CENTER_DROP = auto()       # 中间 35%-65%
    RIGHT_DROP = auto()        # 右侧 65% 以上
    PUSH_DOWN = auto()         # 行的上下 10% 带


# 状态迁移图（开始新手势总是合法的，见 is_valid_transition）
VALID_TRANSITIONS: Dict[GesturePhase, Set[GesturePhase]] = {
    GesturePhase.IDLE: {
        GesturePhase.DRAGGING,
        GesturePhase.RESIZING,
    },
    GesturePhase.DRAGGING: {
        GesturePhase.PREVIEWING,
        GesturePhase.ENDED,
    },
    GesturePhase.PREVIEWING: {
        GesturePhase.ENDED,
    },
    GesturePhase.RESIZING: {
        GesturePhase.ENDED,
    },
    GesturePhase.ENDED: {
        GesturePhase.IDLE,
    },
}

GESTURE_START_PHASES = {GesturePhase.DRAGGING, GesturePhase.RESIZING}


def is_valid_transition(from_phase: GesturePhase, to_phase: GesturePhase) -> bool:
    """检查阶段迁移是否合法"""
    if from_phase == to_phase:
        return True
    if to_phase in GESTURE_START_PHASES:
        return True  # 新手势覆盖旧手势
    return to_phase in VALID_TRANSITIONS.get(from_phase, set())


@dataclass(frozen=True)
class Point:
    """指针位置（像素）"""
    x: float
    y: float
    
    def distance_to(self, other: "Point") -> float:
        return ((self.x - other.x) ** 2 + (self.y - other.y) ** 2) ** 0.5


@dataclass(frozen=True)
class DragState:
    """
    拖拽状态
    
    moved_beyond_threshold 在一次手势内只会从 False 变为 True
    """
    field_id: str
    start_pointer: Point
    start_field_position: Position
    moved_beyond_threshold: bool = False
    
    def with_moved(self, moved: bool) -> "DragState":
        # 单调：一旦为 True 不再回退
        return replace(self, moved_beyond_threshold=self.moved_beyond_threshold or moved)


@dataclass(frozen=True)
class DragUpdateResult:
    """拖拽更新结果"""
    position: Position
    hovered_row: int
    hovered_column: int
    moved_beyond_threshold: bool
    should_preview: bool
    drag_state: DragState


@dataclass(frozen=True)
class DragEndResult:
    """
    拖拽结束结果
    
    configs 是完整的新配置表；无效输入时原样返回
    """
    committed_preview: bool
    final_position: Optional[Position]
    configs: ConfigMap
    relocated: bool = False


@dataclass(frozen=True)
class DropZoneResult:
    """放置区检测结果"""
    zone: DropZone
    row: int
    column: int


@dataclass(frozen=True)
class ResizeSnapshot:
    """调整大小开始时的配置（找不到合法宽度时的回退目标）"""
    field_id: str
    config: FieldConfig


@dataclass(frozen=True)
class ResizeUpdateResult:
    """
    调整大小更新结果
    
    stepped: 本次是否跨过累计阈值并执行了一步
    """
    config: Optional[FieldConfig]
    accumulated: float
    stepped: bool = False


@dataclass(frozen=True)
class ResizeEndResult:
    """调整大小结束结果"""
    config: Optional[FieldConfig]
    configs: ConfigMap
    reverted: bool = False
    adjusted: bool = False
