"""
字段配置模型

FieldConfig 是不可变的：控制器通过替换生成新配置，从不原地修改。
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional

from magnetic_grid.models.grid import ROW_HEIGHT
from magnetic_grid.utils.geometry import round_half_up


@dataclass(frozen=True)
class Position:
    """
    字段位置
    
    x: 容器宽度比例 [0, 1]
    y: 像素，已提交时为 row * row_height
    """
    x: float = 0.0
    y: float = 0.0
    
    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class FieldConfig:
    """
    字段布局配置
    
    不变量（已提交状态）：
    - width ∈ {1/3, 1/2, 2/3, 1}
    - 0 <= x, x + width <= 1
    - y 为行高的非负整数倍
    """
    id: str
    width: float = 1.0
    position: Position = Position()
    
    @property
    def x(self) -> float:
        return self.position.x
    
    @property
    def y(self) -> float:
        return self.position.y
    
    @property
    def right_edge(self) -> float:
        """右边缘 x + width"""
        return self.position.x + self.width
    
    @property
    def center_x(self) -> float:
        return self.position.x + self.width / 2
    
    def row(self, row_height: float = ROW_HEIGHT) -> int:
        """所在行（四舍五入）"""
        return round_half_up(self.position.y / row_height)
    
    def copy_with(
        self,
        width: Optional[float] = None,
        position: Optional[Position] = None,
    ) -> "FieldConfig":
        """生成修改后的副本"""
        return replace(
            self,
            width=self.width if width is None else width,
            position=self.position if position is None else position,
        )
    
    def to_record(self) -> Dict[str, Any]:
        """
        转换为持久化记录
        
        格式: {id, width, positionX, positionY}
        """
        return {
            "id": self.id,
            "width": self.width,
            "positionX": self.position.x,
            "positionY": self.position.y,
        }
    
    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "FieldConfig":
        """从持久化记录还原"""
        return cls(
            id=str(record["id"]),
            width=float(record["width"]),
            position=Position(float(record["positionX"]), float(record["positionY"])),
        )


# id → FieldConfig
ConfigMap = Dict[str, FieldConfig]


def configs_to_records(configs: ConfigMap) -> List[Dict[str, Any]]:
    """配置表 → 记录列表（保持插入顺序）"""
    return [config.to_record() for config in configs.values()]


def configs_from_records(records: Iterable[Dict[str, Any]]) -> ConfigMap:
    """记录列表 → 配置表"""
    configs: ConfigMap = {}
    for record in records:
        config = FieldConfig.from_record(record)
        configs[config.id] = config
    return configs


def replace_config(configs: ConfigMap, config: FieldConfig) -> ConfigMap:
    """返回替换了单个字段的新配置表"""
    updated = dict(configs)
    updated[config.id] = config
    return updated
