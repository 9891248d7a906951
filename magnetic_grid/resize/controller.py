"""
调整大小控制器 (ResizeController)

实现:
- 像素位移累计，超过容器宽度 10% 时走一步离散宽度
- 右边缘：只改宽度；左边缘：右边缘固定，重新求 x
- 交互中允许与邻居重叠（宽松模式），结束时严格校验
- 结束时向下搜索不重叠的宽度，都不行则回退到快照
"""

from dataclasses import dataclass
from typing import Optional

from magnetic_grid.collision.detector import CollisionDetector
from magnetic_grid.config.schema import GridConfig, ThresholdConfig
from magnetic_grid.models.field import ConfigMap, FieldConfig, Position, replace_config
from magnetic_grid.models.gesture import (
    ResizeDirection,
    ResizeEndResult,
    ResizeSnapshot,
    ResizeUpdateResult,
)
from magnetic_grid.snap_engine.snap import SnapEngine


@dataclass
class ResizeController:
    """
    调整大小控制器
    
    快照和累计量由调用方保存，每次调用显式传入
    """
    grid: GridConfig = None
    thresholds: ThresholdConfig = None
    collision: CollisionDetector = None
    snap: SnapEngine = None
    
    def __post_init__(self):
        if self.grid is None:
            self.grid = GridConfig()
        if self.thresholds is None:
            self.thresholds = ThresholdConfig()
        if self.collision is None:
            self.collision = CollisionDetector(
                grid=self.grid, epsilon=self.thresholds.overlap_epsilon
            )
        if self.snap is None:
            self.snap = SnapEngine(
                grid=self.grid,
                epsilon=self.thresholds.overlap_epsilon,
                collision=self.collision,
            )
    
    def start(self, field_id: str, configs: ConfigMap) -> Optional[ResizeSnapshot]:
        """记录开始时的配置；未知字段返回 None"""
        if field_id not in configs:
            return None
        return ResizeSnapshot(field_id=field_id, config=configs[field_id])
    
    def update(
        self,
        field_id: str,
        raw_delta: float,
        direction: ResizeDirection,
        config: Optional[FieldConfig],
        container_width: float,
        accumulated: float,
    ) -> ResizeUpdateResult:
        """
        累计位移并在越过阈值时走一步
        
        Args:
            field_id: 字段 id
            raw_delta: 本次指针水平位移（像素，向右为正）
            direction: 拖动的边
            config: 字段当前配置
            container_width: 容器宽度（像素）
            accumulated: 之前的累计量（像素）
            
        Returns:
            ResizeUpdateResult；越过阈值后累计量归零
        """
        if config is None or config.id != field_id or container_width <= 0:
            return ResizeUpdateResult(config=config, accumulated=accumulated)
        
        accumulated += raw_delta
        if abs(accumulated) < container_width * self.thresholds.accumulation_threshold:
            return ResizeUpdateResult(config=config, accumulated=accumulated)
        
        if direction == ResizeDirection.RIGHT:
            grow = accumulated > 0
        else:
            grow = accumulated < 0
        
        stepped = self._step(config, direction, grow, container_width)
        changed = stepped is not config
        return ResizeUpdateResult(config=stepped, accumulated=0.0, stepped=changed)
    
    def end(
        self,
        field_id: str,
        configs: ConfigMap,
        container_width: float,
        direction: ResizeDirection,
        snapshot: Optional[ResizeSnapshot],
    ) -> ResizeEndResult:
        """
        结束调整大小
        
        当前配置严格合法则直接采用；否则按同样的锚定规则从当前宽度向下
        逐级尝试，全部重叠时回退到快照
        
        Args:
            field_id: 字段 id
            configs: 配置表，字段为交互中的最新配置
            container_width: 容器宽度（像素）
            direction: 拖动的边
            snapshot: 开始时的快照
        """
        current = configs.get(field_id)
        if current is None or container_width <= 0:
            return ResizeEndResult(config=current, configs=configs)
        
        if self.collision.is_placement_valid(current, configs, exclude_id=field_id, strict=True):
            return ResizeEndResult(config=current, configs=configs)
        
        index = self.snap.width_index(current.width)
        if index < 0:
            start = self.snap.width_index(self.snap.nearest_discrete_width(current.width))
        else:
            start = index - 1
        
        for i in range(start, -1, -1):
            candidate = self._with_width(current, self.snap.widths[i], direction)
            if self.collision.is_placement_valid(candidate, configs, exclude_id=field_id, strict=True):
                return ResizeEndResult(
                    config=candidate,
                    configs=replace_config(configs, candidate),
                    adjusted=True,
                )
        
        if snapshot is None or snapshot.field_id != field_id:
            return ResizeEndResult(config=current, configs=configs)
        
        return ResizeEndResult(
            config=snapshot.config,
            configs=replace_config(configs, snapshot.config),
            reverted=True,
        )
    
    # ==================== 内部 ====================
    
    def _step(
        self,
        config: FieldConfig,
        direction: ResizeDirection,
        grow: bool,
        container_width: float,
    ) -> FieldConfig:
        """走一步离散宽度；到达表边界或无法增长时原样返回"""
        index = self.snap.width_index(config.width)
        if index < 0:
            index = self.snap.width_index(self.snap.nearest_discrete_width(config.width))
        
        if grow:
            target = self.snap.width_at(index + 1)
            if target is None:
                return config
            if direction == ResizeDirection.RIGHT:
                target = self.snap.achievable_width(config.position, target, container_width)
                if target <= config.width + self.collision.epsilon:
                    return config
        else:
            target = self.snap.width_at(index - 1)
            if target is None:
                return config
        
        candidate = self._with_width(config, target, direction)
        # 中间状态只做宽松校验
        if not self.collision.is_placement_valid(candidate, {}, strict=False):
            return config
        return candidate
    
    def _with_width(
        self,
        config: FieldConfig,
        width: float,
        direction: ResizeDirection,
    ) -> FieldConfig:
        if direction == ResizeDirection.LEFT:
            x = max(0.0, config.right_edge - width)
        else:
            x = config.x
        return config.copy_with(width=width, position=Position(x, config.y))
