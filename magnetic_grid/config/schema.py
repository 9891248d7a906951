"""
配置数据结构定义

默认值即 models.grid 中的命名常量
"""

from dataclasses import dataclass, field

from magnetic_grid.models import grid as g


@dataclass(frozen=True)
class GridConfig:
    """网格配置（列数固定为 6）"""
    row_height: float = g.ROW_HEIGHT
    max_rows: int = g.MAX_ROWS
    
    @property
    def max_y(self) -> float:
        """拖拽时 y 的上限"""
        return self.max_rows * self.row_height


@dataclass
class ThresholdConfig:
    """交互阈值配置"""
    overlap_epsilon: float = g.OVERLAP_EPSILON
    drag_threshold_px: float = g.DRAG_THRESHOLD_PX
    accumulation_threshold: float = g.ACCUMULATION_THRESHOLD
    significant_gap_threshold: float = g.SIGNIFICANT_GAP_THRESHOLD
    width_change_threshold: float = g.WIDTH_CHANGE_THRESHOLD
    equal_width_tolerance: float = g.EQUAL_WIDTH_TOLERANCE


@dataclass
class DropZoneConfig:
    """放置区配置"""
    push_down_band: float = g.PUSH_DOWN_BAND
    left_boundary: float = g.LEFT_ZONE_BOUNDARY
    right_boundary: float = g.RIGHT_ZONE_BOUNDARY


@dataclass
class AnimationConfig:
    """动画配置"""
    preview_duration_ms: int = g.PREVIEW_DURATION_MS
    commit_duration_ms: int = g.COMMIT_DURATION_MS
    revert_duration_ms: int = g.REVERT_DURATION_MS
    default_duration_ms: int = g.DEFAULT_DURATION_MS
    preview_curve: str = "ease_out_quart"
    commit_curve: str = "ease_out_cubic"
    revert_curve: str = "ease_in_out"
    default_curve: str = "ease_out_cubic"


@dataclass
class BehaviorConfig:
    """行为开关"""
    compact_rows_after_drag: bool = True
    auto_expand_after_drag: bool = True
    auto_expand_after_remove: bool = True
    auto_expand_after_resize: bool = False
    debug: bool = False


@dataclass
class StorageConfig:
    """持久化配置"""
    backend: str = "json"          # "json" | "memory"
    directory: str = "layouts"
    storage_key: str = "default_form"


@dataclass
class LayoutEngineConfig:
    """
    完整引擎配置
    
    所有阈值都参数化，默认值为调优后的原值
    """
    name: str = "magnetic-form"
    
    grid: GridConfig = field(default_factory=GridConfig)
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    drop_zone: DropZoneConfig = field(default_factory=DropZoneConfig)
    animation: AnimationConfig = field(default_factory=AnimationConfig)
    behavior: BehaviorConfig = field(default_factory=BehaviorConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)


DEFAULT_GRID = GridConfig()
