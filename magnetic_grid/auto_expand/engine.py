"""
自动扩展引擎 (AutoExpandEngine)

实现:
- 提交后逐行检查空隙
- 单字段整行、等宽重分配、空隙触发重分配、尾部空隙就近扩展
- 行压缩（把已占用行重新编号为从 0 开始的连续行）

引擎只计算目标配置表，动画由调用方负责
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from magnetic_grid.collision.detector import CollisionDetector
from magnetic_grid.config.schema import GridConfig, ThresholdConfig
from magnetic_grid.models.field import ConfigMap, FieldConfig, Position
from magnetic_grid.models.grid import FULL_WIDTH, FULL_WIDTH_SNAP, ROW_END_EDGE, ROW_START_EDGE
from magnetic_grid.snap_engine.snap import SnapEngine


class ExpansionRule(Enum):
    """行扩展规则"""
    SINGLE_FIELD = "single_field"          # a. 唯一字段占满整行
    EQUAL_WIDTHS = "equal_widths"          # b. 等宽重分配
    GAP_REDISTRIBUTE = "gap_redistribute"  # c. 行首/中间空隙 → 重分配
    GROW_CLOSEST = "grow_closest"          # d. 尾部空隙 → 就近扩展


class GapKind(Enum):
    LEADING = "leading"
    INTERIOR = "interior"
    TRAILING = "trailing"


@dataclass(frozen=True)
class Gap:
    """行内空隙"""
    start: float
    size: float
    kind: GapKind
    
    @property
    def center(self) -> float:
        return self.start + self.size / 2


@dataclass(frozen=True)
class RowExpansion:
    """单行的扩展结果"""
    row: int
    rule: ExpansionRule
    changes: ConfigMap


@dataclass(frozen=True)
class AutoExpandResult:
    """
    自动扩展结果
    
    configs 是应用全部行变化后的完整配置表；没有变化时与输入相同
    """
    configs: ConfigMap
    rows: List[RowExpansion] = field(default_factory=list)
    
    @property
    def has_changes(self) -> bool:
        return len(self.rows) > 0
    
    @property
    def changed_ids(self) -> List[str]:
        return [field_id for row in self.rows for field_id in row.changes]


@dataclass
class AutoExpandEngine:
    """
    自动扩展引擎
    
    对每个 row_available_space > significant_gap_threshold 的行按规则 a-d 计算目标，
    结果会重叠的行保持不变
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
    
    def expand(self, configs: ConfigMap) -> AutoExpandResult:
        """
        计算自动扩展目标
        
        Args:
            configs: 已提交的配置表
            
        Returns:
            AutoExpandResult
        """
        target = dict(configs)
        expansions: List[RowExpansion] = []
        
        for row in self.collision.group_by_row(configs):
            available = self.collision.row_available_space(row, configs)
            if available <= self.thresholds.significant_gap_threshold:
                continue
            
            fields = self.collision.fields_in_row(row, configs)
            plan = self._plan_row(row, fields)
            if plan is None:
                continue
            
            rule, planned = plan
            changes = {
                field_id: new
                for field_id, new in planned.items()
                if self._is_significant_change(configs[field_id], new)
            }
            if not changes:
                continue
            
            candidate = dict(target)
            candidate.update(changes)
            if not self._row_result_valid(changes, candidate):
                continue
            
            target = candidate
            expansions.append(RowExpansion(row=row, rule=rule, changes=changes))
        
        return AutoExpandResult(configs=target, rows=expansions)
    
    # ==================== 规则 ====================
    
    def _plan_row(self, row: int, fields: List[FieldConfig]):
        if not fields:
            return None
        
        # a. 唯一字段
        if len(fields) == 1:
            only = fields[0]
            return ExpansionRule.SINGLE_FIELD, {
                only.id: only.copy_with(
                    width=FULL_WIDTH, position=Position(0.0, self._row_y(row))
                )
            }
        
        # b. 等宽
        widths = [f.width for f in fields]
        avg = sum(widths) / len(widths)
        if all(abs(w - avg) < self.thresholds.equal_width_tolerance for w in widths):
            planned = self.equal_distribution(fields, row)
            return (ExpansionRule.EQUAL_WIDTHS, planned) if planned else None
        
        # c. 行首或中间空隙
        gaps = self.find_gaps(fields)
        sig = self.thresholds.significant_gap_threshold
        has_leading = any(
            g.kind == GapKind.LEADING and g.start < ROW_START_EDGE and g.size > sig
            for g in gaps
        )
        has_interior = any(
            g.kind == GapKind.INTERIOR
            and ROW_START_EDGE < g.start < ROW_END_EDGE
            and g.size > sig
            for g in gaps
        )
        if has_leading or has_interior:
            planned = self.equal_distribution(fields, row)
            return (ExpansionRule.GAP_REDISTRIBUTE, planned) if planned else None
        
        # d. 只剩尾部空隙
        trailing = [g for g in gaps if g.kind == GapKind.TRAILING]
        if not trailing:
            return None
        gap = trailing[0]
        closest = min(fields, key=lambda f: abs(f.center_x - gap.center))
        
        new_width = self.snap.nearest_discrete_width(min(FULL_WIDTH, closest.width + gap.size))
        if new_width >= FULL_WIDTH_SNAP:
            new_x = 0.0
        else:
            new_x = min(closest.x, FULL_WIDTH - new_width)
        return ExpansionRule.GROW_CLOSEST, {
            closest.id: closest.copy_with(
                width=new_width, position=Position(new_x, self._row_y(row))
            )
        }
    
    def find_gaps(self, fields: Sequence[FieldConfig]) -> List[Gap]:
        """
        行内空隙（fields 需按 x 排序）
        
        行首：第一个字段 x > 0；中间：相邻字段间大于阈值的空隙；
        尾部：最后一个字段右边缘 < ROW_END_EDGE
        """
        gaps: List[Gap] = []
        if not fields:
            return gaps
        
        first = fields[0]
        if first.x > self.collision.epsilon:
            gaps.append(Gap(0.0, first.x, GapKind.LEADING))
        
        for current, nxt in zip(fields, fields[1:]):
            size = nxt.x - current.right_edge
            if size > self.thresholds.significant_gap_threshold:
                gaps.append(Gap(current.right_edge, size, GapKind.INTERIOR))
        
        last_end = fields[-1].right_edge
        if last_end < ROW_END_EDGE:
            gaps.append(Gap(last_end, FULL_WIDTH - last_end, GapKind.TRAILING))
        
        return gaps
    
    def equal_distribution(
        self,
        ordered_fields: Sequence[FieldConfig],
        row: int,
    ) -> Optional[Dict[str, FieldConfig]]:
        """
        按给定顺序把字段等宽排列，从 x = 0 连续放置
        
        1 / count 不是离散宽度时返回 None
        """
        if not ordered_fields:
            return None
        index = self.snap.width_index(FULL_WIDTH / len(ordered_fields))
        if index < 0:
            return None
        width = self.snap.widths[index]
        
        planned: Dict[str, FieldConfig] = {}
        y = self._row_y(row)
        for i, config in enumerate(ordered_fields):
            planned[config.id] = config.copy_with(
                width=width, position=Position(i * width, y)
            )
        return planned
    
    # ==================== 行压缩 ====================
    
    def compact_rows(self, configs: ConfigMap) -> ConfigMap:
        """
        把已占用行重新编号为 0, 1, 2, ... 并对齐到行高
        
        行的先后顺序保持不变，配置表顺序保持不变
        """
        occupied = sorted({self.collision.row_of(c) for c in configs.values()})
        mapping = {old: new for new, old in enumerate(occupied)}
        
        compacted: ConfigMap = {}
        for field_id, config in configs.items():
            y = self._row_y(mapping[self.collision.row_of(config)])
            if config.y == y:
                compacted[field_id] = config
            else:
                compacted[field_id] = config.copy_with(position=Position(config.x, y))
        return compacted
    
    # ==================== 内部 ====================
    
    def _row_y(self, row: int) -> float:
        return row * self.grid.row_height
    
    def _is_significant_change(self, old: FieldConfig, new: FieldConfig) -> bool:
        if abs(new.width - old.width) > self.thresholds.width_change_threshold:
            return True
        moved = (
            abs(new.x - old.x) > self.collision.epsilon
            or abs(new.y - old.y) > self.collision.epsilon * self.grid.row_height
        )
        return moved
    
    def _row_result_valid(self, changes: ConfigMap, candidate: ConfigMap) -> bool:
        for config in changes.values():
            if not self.collision.is_placement_valid(config, candidate, strict=True):
                return False
        return True
