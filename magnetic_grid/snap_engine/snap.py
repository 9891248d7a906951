"""
吸附引擎 (SnapEngine)

实现:
- 离散宽度表查找（显式下标运算）
- 像素/比例位置 → 网格单元
- 位置吸附到列与行
- 贴边增长时的可达宽度
- 下一个可用位置搜索
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from magnetic_grid.collision.detector import CollisionDetector
from magnetic_grid.config.schema import GridConfig
from magnetic_grid.models.field import ConfigMap, Position
from magnetic_grid.models.grid import (
    DISCRETE_WIDTHS,
    OVERLAP_EPSILON,
    TOTAL_COLUMNS,
    column_span,
)
from magnetic_grid.utils.geometry import approx_equal, clamp, round_half_up


@dataclass
class SnapEngine:
    """
    吸附引擎
    
    宽度搜索只用下标运算，避免浮点推断造成的不确定平局
    """
    grid: GridConfig = None
    epsilon: float = OVERLAP_EPSILON
    collision: CollisionDetector = None
    
    def __post_init__(self):
        if self.grid is None:
            self.grid = GridConfig()
        if self.collision is None:
            self.collision = CollisionDetector(grid=self.grid, epsilon=self.epsilon)
    
    # ==================== 宽度表 ====================
    
    @property
    def widths(self) -> Tuple[float, ...]:
        return DISCRETE_WIDTHS
    
    def width_index(self, width: float) -> int:
        """宽度在表中的下标，不是离散宽度时返回 -1"""
        for i, w in enumerate(DISCRETE_WIDTHS):
            if approx_equal(width, w, self.epsilon):
                return i
        return -1
    
    def width_at(self, index: int) -> Optional[float]:
        """越界下标返回 None"""
        if 0 <= index < len(DISCRETE_WIDTHS):
            return DISCRETE_WIDTHS[index]
        return None
    
    def nearest_discrete_width(self, raw: float) -> float:
        """最接近的离散宽度，平局取较小者"""
        best = DISCRETE_WIDTHS[0]
        best_diff = abs(raw - best)
        for w in DISCRETE_WIDTHS[1:]:
            diff = abs(raw - w)
            if diff < best_diff:
                best, best_diff = w, diff
        return best
    
    def floor_width_index(self, raw: float) -> int:
        """不超过 raw 的最大离散宽度下标，raw 小于最小宽度时为 0"""
        index = 0
        for i, w in enumerate(DISCRETE_WIDTHS):
            if w <= raw + self.epsilon:
                index = i
        return index
    
    def next_larger_width(self, width: float) -> Optional[float]:
        index = self.width_index(width)
        if index < 0:
            return None
        return self.width_at(index + 1)
    
    def next_smaller_width(self, width: float) -> Optional[float]:
        index = self.width_index(width)
        if index <= 0:
            return None
        return self.width_at(index - 1)
    
    def column_span(self, width: float) -> int:
        return column_span(width)
    
    # ==================== 位置 ====================
    
    def grid_position_from_pixels(
        self,
        position: Position,
        container_width: Optional[float] = None,
    ) -> Tuple[int, int]:
        """
        位置 → (row, column)
        
        给出 container_width 时 x 视为像素，否则视为宽度比例。
        row = round(y / row_height)，column = clamp(floor(x * 6), 0, 5)
        """
        x = position.x
        if container_width is not None and container_width > 0:
            x = x / container_width
        
        row = round_half_up(position.y / self.grid.row_height)
        column = int(clamp(math.floor(x * TOTAL_COLUMNS), 0, TOTAL_COLUMNS - 1))
        return row, column
    
    def snap_position(self, position: Position, width: Optional[float] = None) -> Position:
        """
        x 吸附到最近的列边界，y 吸附到最近的行
        
        给出 width 时列上限收紧到 6 - span，保证不越过右边界
        """
        max_column = TOTAL_COLUMNS - 1
        if width is not None:
            max_column = TOTAL_COLUMNS - column_span(width)
        
        column = int(clamp(round_half_up(position.x * TOTAL_COLUMNS), 0, max_column))
        row = int(clamp(round_half_up(position.y / self.grid.row_height), 0, self.grid.max_rows - 1))
        return Position(column / TOTAL_COLUMNS, row * self.grid.row_height)
    
    def achievable_width(
        self,
        position: Position,
        candidate_width: float,
        container_width: float,
    ) -> float:
        """
        不超过 candidate 且满足 x + width <= 1 的最大离散宽度
        
        容差取 epsilon 与一个像素中的较大者；没有可行宽度时返回
        candidate 向下取整后的表项
        """
        tolerance = self.epsilon
        if container_width > 0:
            tolerance = max(self.epsilon, 1.0 / container_width)
        
        floor_index = self.floor_width_index(candidate_width)
        for index in range(floor_index, -1, -1):
            w = DISCRETE_WIDTHS[index]
            if position.x + w <= 1.0 + tolerance:
                return w
        return DISCRETE_WIDTHS[floor_index]
    
    def find_next_available_position(
        self,
        width: float,
        configs: ConfigMap,
        exclude_id: Optional[str] = None,
    ) -> Position:
        """
        从第 0 行向下找第一段长度 >= width 的空闲区段，返回其起点
        
        所有行都满时返回最大已占用行的下一行，x = 0
        """
        rh = self.grid.row_height
        for row in range(self.grid.max_rows):
            for start, length in self.collision.free_runs(row, configs, exclude_id):
                if length >= width - self.epsilon:
                    return Position(start, row * rh)
        
        next_row = self.collision.max_occupied_row(configs, exclude_id) + 1
        return Position(0.0, next_row * rh)
