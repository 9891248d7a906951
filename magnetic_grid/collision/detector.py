"""
碰撞检测器 (CollisionDetector)

实现:
- 两字段重叠判定（带 epsilon 容差，贴边不算重叠）
- 按行分组、行剩余空间、空闲区段
- 两种模式的放置校验（交互中宽松，提交时严格）

所有方法都是纯函数：输入配置表快照，不持有可变状态
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from magnetic_grid.config.schema import GridConfig
from magnetic_grid.models.field import ConfigMap, FieldConfig
from magnetic_grid.models.grid import DISCRETE_WIDTHS, OVERLAP_EPSILON
from magnetic_grid.utils.geometry import approx_equal

# (start_x, length)
FreeRun = Tuple[float, float]


@dataclass
class CollisionDetector:
    """
    碰撞检测器
    
    水平方向 epsilon 是宽度比例；垂直方向按行高缩放
    """
    grid: GridConfig = None
    epsilon: float = OVERLAP_EPSILON
    
    def __post_init__(self):
        if self.grid is None:
            self.grid = GridConfig()
    
    @property
    def row_height(self) -> float:
        return self.grid.row_height
    
    def row_of(self, config: FieldConfig) -> int:
        return config.row(self.grid.row_height)
    
    # ==================== 重叠 ====================
    
    def overlaps(self, a: FieldConfig, b: FieldConfig) -> bool:
        """a 与 b 的行区间和 x 区间是否同时相交"""
        rh = self.grid.row_height
        v_eps = self.epsilon * rh
        
        vertical = a.y < b.y + rh - v_eps and b.y < a.y + rh - v_eps
        if not vertical:
            return False
        
        return a.x < b.right_edge - self.epsilon and b.x < a.right_edge - self.epsilon
    
    def would_overlap(
        self,
        candidate: FieldConfig,
        configs: ConfigMap,
        exclude_id: Optional[str] = None,
    ) -> bool:
        """
        candidate 是否与 configs 中任何其他字段重叠
        
        exclude_id 以及 candidate 自身的 id 都会被跳过
        """
        for field_id, other in configs.items():
            if field_id == exclude_id or field_id == candidate.id:
                continue
            if self.overlaps(candidate, other):
                return True
        return False
    
    def find_overlaps(self, configs: ConfigMap) -> List[Tuple[str, str]]:
        """所有重叠的字段对"""
        items = list(configs.values())
        pairs = []
        for i, a in enumerate(items):
            for b in items[i + 1:]:
                if self.overlaps(a, b):
                    pairs.append((a.id, b.id))
        return pairs
    
    # ==================== 行查询 ====================
    
    def group_by_row(self, configs: ConfigMap) -> Dict[int, List[str]]:
        """
        行号 → 字段 id
        
        行号按 round(y / row_height) 计算；行按升序，行内按 x 升序
        """
        rows: Dict[int, List[FieldConfig]] = defaultdict(list)
        for config in configs.values():
            rows[self.row_of(config)].append(config)
        
        return {
            row: [c.id for c in sorted(rows[row], key=lambda c: c.x)]
            for row in sorted(rows)
        }
    
    def fields_in_row(
        self,
        row: int,
        configs: ConfigMap,
        exclude_id: Optional[str] = None,
    ) -> List[FieldConfig]:
        """行内字段，按 x 升序"""
        fields = [
            c for c in configs.values()
            if c.id != exclude_id and self.row_of(c) == row
        ]
        return sorted(fields, key=lambda c: c.x)
    
    def row_available_space(
        self,
        row: int,
        configs: ConfigMap,
        exclude_id: Optional[str] = None,
    ) -> float:
        """max(0, 1 - 行内宽度之和)"""
        used = sum(c.width for c in self.fields_in_row(row, configs, exclude_id))
        return max(0.0, 1.0 - used)
    
    def free_runs(
        self,
        row: int,
        configs: ConfigMap,
        exclude_id: Optional[str] = None,
    ) -> List[FreeRun]:
        """
        行内的空闲区段，从左到右
        
        小于 epsilon 的区段忽略
        """
        runs: List[FreeRun] = []
        cursor = 0.0
        for config in self.fields_in_row(row, configs, exclude_id):
            if config.x - cursor > self.epsilon:
                runs.append((cursor, config.x - cursor))
            cursor = max(cursor, config.right_edge)
        if 1.0 - cursor > self.epsilon:
            runs.append((cursor, 1.0 - cursor))
        return runs
    
    def max_occupied_row(self, configs: ConfigMap, exclude_id: Optional[str] = None) -> int:
        """最大已占用行号，没有字段时为 -1"""
        rows = [self.row_of(c) for c in configs.values() if c.id != exclude_id]
        return max(rows) if rows else -1
    
    # ==================== 校验 ====================
    
    def is_discrete_width(self, width: float) -> bool:
        return any(approx_equal(width, w, self.epsilon) for w in DISCRETE_WIDTHS)
    
    def is_row_aligned(self, config: FieldConfig) -> bool:
        rh = self.grid.row_height
        return approx_equal(config.y, self.row_of(config) * rh, self.epsilon * rh)
    
    def is_within_bounds(self, config: FieldConfig) -> bool:
        return (
            config.x >= -self.epsilon
            and config.right_edge <= 1.0 + self.epsilon
            and config.y >= 0.0
            and config.width > 0.0
        )
    
    def is_placement_valid(
        self,
        candidate: FieldConfig,
        configs: ConfigMap,
        exclude_id: Optional[str] = None,
        strict: bool = True,
    ) -> bool:
        """
        放置校验
        
        宽松模式（交互中间状态）只检查几何边界，允许与邻居重叠；
        严格模式（提交）还要求离散宽度、行对齐以及无重叠
        
        Args:
            candidate: 候选配置
            configs: 当前配置表
            exclude_id: 忽略的字段（通常是被移动的字段本身）
            strict: 是否严格模式
        """
        if not self.is_within_bounds(candidate):
            return False
        if not strict:
            return True
        
        if not self.is_discrete_width(candidate.width):
            return False
        if not self.is_row_aligned(candidate):
            return False
        return not self.would_overlap(candidate, configs, exclude_id)
    
    def is_layout_valid(self, configs: ConfigMap) -> bool:
        """整个配置表是否满足已提交状态的全部不变量"""
        for config in configs.values():
            if not self.is_placement_valid(config, configs, strict=True):
                return False
        return True
