"""
输入事件定义

手势识别层（外部）产生的指针/帧事件，按事件顺序串行送入会话。
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, Optional

from magnetic_grid.models.gesture import ResizeDirection


class EventType(Enum):
    """
    输入事件类型
    
    分类：
    - 拖拽：DRAG_START, DRAG_MOVE, DRAG_END, DRAG_CANCEL
    - 调整大小：RESIZE_START, RESIZE_UPDATE, RESIZE_END
    - 帧：FRAME_TICK
    - 表单：FIELD_ADD, FIELD_REMOVE
    """
    DRAG_START = auto()
    DRAG_MOVE = auto()
    DRAG_END = auto()
    DRAG_CANCEL = auto()
    
    RESIZE_START = auto()
    RESIZE_UPDATE = auto()
    RESIZE_END = auto()
    
    FRAME_TICK = auto()
    
    FIELD_ADD = auto()
    FIELD_REMOVE = auto()


@dataclass(frozen=True)
class GestureEvent:
    """
    输入事件
    
    - x / y: 指针像素坐标（拖拽）
    - delta: 水平像素增量（调整大小）
    - width: 新字段宽度（FIELD_ADD）
    - timestamp: 秒，FRAME_TICK 用作动画时钟
    """
    event_type: EventType
    field_id: str = ""
    timestamp: float = 0.0
    x: float = 0.0
    y: float = 0.0
    delta: float = 0.0
    direction: Optional[ResizeDirection] = None
    container_width: Optional[float] = None
    width: Optional[float] = None
    
    def to_dict(self) -> Dict[str, Any]:
        """转换为字典，用于序列化"""
        d = {
            "type": self.event_type.name,
            "field_id": self.field_id,
            "timestamp": self.timestamp,
        }
        if self.event_type in (EventType.DRAG_START, EventType.DRAG_MOVE):
            d["x"] = self.x
            d["y"] = self.y
        if self.event_type == EventType.RESIZE_UPDATE:
            d["delta"] = self.delta
        if self.direction is not None:
            d["direction"] = self.direction.value
        if self.container_width is not None:
            d["container_width"] = self.container_width
        if self.width is not None:
            d["width"] = self.width
        return d
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GestureEvent":
        """从脚本字典解析"""
        direction = data.get("direction")
        container_width = data.get("container_width")
        width = data.get("width")
        return cls(
            event_type=EventType[str(data["type"]).upper()],
            field_id=str(data.get("field_id", "")),
            timestamp=float(data.get("timestamp", 0.0)),
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            delta=float(data.get("delta", 0.0)),
            direction=ResizeDirection(direction) if direction else None,
            container_width=float(container_width) if container_width is not None else None,
            width=float(width) if width is not None else None,
        )
