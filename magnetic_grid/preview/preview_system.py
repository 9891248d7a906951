"""
预览系统 (PreviewSystem)

拖拽过程中模拟"如果现在松手"的布局，不修改任何状态。

优先级：
1. 放入：目标行最大空闲区段能容纳的最大离散宽度
2. 重分配：目标行所有字段（含被拖字段）等宽排列
3. 下推：被拖字段占据目标行，其余行依次下移
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from magnetic_grid.auto_expand.engine import AutoExpandEngine
from magnetic_grid.collision.detector import CollisionDetector
from magnetic_grid.config.schema import GridConfig, ThresholdConfig
from magnetic_grid.models.field import ConfigMap, FieldConfig, Position
from magnetic_grid.models.grid import TOTAL_COLUMNS, column_span
from magnetic_grid.models.preview import PreviewInfo
from magnetic_grid.snap_engine.snap import SnapEngine
from magnetic_grid.utils.geometry import round_half_up


@dataclass
class PreviewSystem:
    """
    预览系统
    
    只有得到严格合法、无重叠的配置表时 has_space 才为 True
    """
    grid: GridConfig = None
    thresholds: ThresholdConfig = None
    collision: CollisionDetector = None
    snap: SnapEngine = None
    auto_expand: AutoExpandEngine = None
    
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
        if self.auto_expand is None:
            self.auto_expand = AutoExpandEngine(
                grid=self.grid,
                thresholds=self.thresholds,
                collision=self.collision,
                snap=self.snap,
            )
    
    def compute_preview(
        self,
        target_row: int,
        dragged_id: str,
        configs: ConfigMap,
        container_width: float,
        drop_x: Optional[float] = None,
    ) -> PreviewInfo:
        """
        计算预览
        
        Args:
            target_row: 目标行
            dragged_id: 被拖字段
            configs: 手势开始时的配置表
            container_width: 容器宽度（像素）
            drop_x: 被拖字段当前 x（比例），决定重分配时的插入位置
            
        Returns:
            PreviewInfo；无效输入或没有合法方案时 has_space=False
        """
        if dragged_id not in configs:
            return PreviewInfo.no_space(configs, f"Unknown field {dragged_id}")
        if container_width <= 0:
            return PreviewInfo.no_space(configs, "Container width must be positive")
        if not (0 <= target_row < self.grid.max_rows):
            return PreviewInfo.no_space(configs, f"Row {target_row} is outside the grid")
        
        dragged = configs[dragged_id]
        if drop_x is None:
            drop_x = dragged.x
        
        for attempt in (self._try_fit, self._try_redistribute, self._try_push_down):
            info = attempt(target_row, dragged, configs, drop_x)
            if info is not None:
                return info
        
        return PreviewInfo.no_space(configs, f"No space in row {target_row + 1}")
    
    # ==================== 方案 ====================
    
    def _try_fit(
        self,
        target_row: int,
        dragged: FieldConfig,
        configs: ConfigMap,
        drop_x: float,
    ) -> Optional[PreviewInfo]:
        runs = self.collision.free_runs(target_row, configs, exclude_id=dragged.id)
        if not runs:
            return None
        
        # 最大区段，平局取最左
        start, length = max(runs, key=lambda run: run[1])
        index = self.snap.floor_width_index(length)
        width = self.snap.widths[index]
        if width > length + self.collision.epsilon:
            return None
        
        placed = dragged.copy_with(
            width=width,
            position=Position(start, target_row * self.grid.row_height),
        )
        preview = dict(configs)
        preview[dragged.id] = placed
        if not self._is_acceptable(preview):
            return None
        
        percent = round_half_up(width * 100)
        return PreviewInfo(
            has_space=True,
            target_position=placed.position,
            target_columns=self._columns_of(placed),
            message=f"Place in row {target_row + 1} at {percent}% width",
            preview_configs=preview,
        )
    
    def _try_redistribute(
        self,
        target_row: int,
        dragged: FieldConfig,
        configs: ConfigMap,
        drop_x: float,
    ) -> Optional[PreviewInfo]:
        siblings = self.collision.fields_in_row(target_row, configs, exclude_id=dragged.id)
        if not siblings:
            return None
        
        insert_at = sum(1 for s in siblings if s.center_x <= drop_x)
        ordered: List[FieldConfig] = list(siblings)
        ordered.insert(insert_at, dragged)
        
        planned = self.auto_expand.equal_distribution(ordered, target_row)
        if planned is None:
            return None
        
        preview = dict(configs)
        preview.update(planned)
        if not self._is_acceptable(preview):
            return None
        
        placed = planned[dragged.id]
        return PreviewInfo(
            has_space=True,
            target_position=placed.position,
            target_columns=self._columns_of(placed),
            message=f"Share row {target_row + 1} equally with {len(siblings)} field(s)",
            preview_configs=preview,
        )
    
    def _try_push_down(
        self,
        target_row: int,
        dragged: FieldConfig,
        configs: ConfigMap,
        drop_x: float,
    ) -> Optional[PreviewInfo]:
        rh = self.grid.row_height
        placed = dragged.copy_with(position=Position(0.0, target_row * rh))
        
        rows: Dict[int, List[FieldConfig]] = {}
        for config in configs.values():
            if config.id == dragged.id:
                continue
            rows.setdefault(self.collision.row_of(config), []).append(config)
        
        moved: ConfigMap = {dragged.id: placed}
        next_row = 0
        for original_row in sorted(rows):
            # 目标行留给被拖字段
            if next_row == target_row:
                next_row += 1
            for config in rows[original_row]:
                moved[config.id] = config.copy_with(position=Position(config.x, next_row * rh))
            next_row += 1
        
        if self.collision.max_occupied_row(moved) >= self.grid.max_rows:
            return None
        
        preview = {field_id: moved[field_id] for field_id in configs}
        if not self._is_acceptable(preview):
            return None
        
        return PreviewInfo(
            has_space=True,
            target_position=placed.position,
            target_columns=self._columns_of(placed),
            message=f"Insert into row {target_row + 1} and push rows below down",
            is_push_down=True,
            preview_configs=preview,
        )
    
    # ==================== 内部 ====================
    
    def _is_acceptable(self, preview: ConfigMap) -> bool:
        return self.collision.is_layout_valid(preview)
    
    def _columns_of(self, config: FieldConfig):
        start = int(round_half_up(config.x * TOTAL_COLUMNS))
        return start, column_span(config.width)
