"""
拖拽控制器 (DragController)

状态: IDLE → DRAGGING(阈值内) → PREVIEWING(超过阈值) → ENDED

实现:
- 指针位移 → 候选位置（限制在网格内）
- 单调的拖拽阈值标记
- 放置区判定
- 结束时提交预览，或吸附并在重叠时重新定位
"""

import math
from dataclasses import dataclass
from typing import Optional

from magnetic_grid.collision.detector import CollisionDetector
from magnetic_grid.config.schema import DropZoneConfig, GridConfig, ThresholdConfig
from magnetic_grid.models.field import ConfigMap, Position, replace_config
from magnetic_grid.models.gesture import (
    DragEndResult,
    DragState,
    DragUpdateResult,
    DropZone,
    DropZoneResult,
    Point,
)
from magnetic_grid.models.preview import PreviewState
from magnetic_grid.preview.preview_system import PreviewSystem
from magnetic_grid.snap_engine.snap import SnapEngine
from magnetic_grid.utils.geometry import clamp


@dataclass
class DragController:
    """
    拖拽控制器
    
    不持有手势状态：DragState 由调用方保存并在每次调用时传入
    """
    grid: GridConfig = None
    thresholds: ThresholdConfig = None
    drop_zone: DropZoneConfig = None
    collision: CollisionDetector = None
    snap: SnapEngine = None
    preview: PreviewSystem = None
    
    def __post_init__(self):
        if self.grid is None:
            self.grid = GridConfig()
        if self.thresholds is None:
            self.thresholds = ThresholdConfig()
        if self.drop_zone is None:
            self.drop_zone = DropZoneConfig()
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
        if self.preview is None:
            self.preview = PreviewSystem(
                grid=self.grid,
                thresholds=self.thresholds,
                collision=self.collision,
                snap=self.snap,
            )
    
    def start(self, field_id: str, pointer: Point, configs: ConfigMap) -> Optional[DragState]:
        """
        开始拖拽，记录指针与被拖字段的起始位置
        
        未知字段返回 None
        """
        if field_id not in configs:
            return None
        
        return DragState(
            field_id=field_id,
            start_pointer=pointer,
            start_field_position=configs[field_id].position,
            moved_beyond_threshold=False,
        )
    
    def update(
        self,
        pointer: Point,
        drag_state: DragState,
        configs: ConfigMap,
        container_width: float,
    ) -> Optional[DragUpdateResult]:
        """
        指针移动
        
        候选位置 = 起始位置 + (dx / 容器宽度, dy 像素)，
        x 限制在 [0, 1 - width]，y 限制在 [0, max_rows * row_height]
        
        Returns:
            DragUpdateResult；无效输入返回 None
        """
        config = configs.get(drag_state.field_id)
        if config is None or container_width <= 0:
            return None
        
        distance = pointer.distance_to(drag_state.start_pointer)
        next_state = drag_state.with_moved(distance > self.thresholds.drag_threshold_px)
        
        delta_x = (pointer.x - drag_state.start_pointer.x) / container_width
        delta_y = pointer.y - drag_state.start_pointer.y
        
        start = drag_state.start_field_position
        position = Position(
            clamp(start.x + delta_x, 0.0, 1.0 - config.width),
            clamp(start.y + delta_y, 0.0, self.grid.max_y),
        )
        row, column = self.snap.grid_position_from_pixels(position)
        
        return DragUpdateResult(
            position=position,
            hovered_row=row,
            hovered_column=column,
            moved_beyond_threshold=next_state.moved_beyond_threshold,
            should_preview=next_state.moved_beyond_threshold,
            drag_state=next_state,
        )
    
    def compute_preview(
        self,
        update: DragUpdateResult,
        configs: ConfigMap,
        container_width: float,
    ) -> PreviewState:
        """悬停行的预览；configs 是当前已提交配置表（被拖字段在起始位置）"""
        field_id = update.drag_state.field_id
        info = self.preview.compute_preview(
            update.hovered_row,
            field_id,
            configs,
            container_width,
            drop_x=update.position.x,
        )
        return PreviewState.activate(field_id, update.hovered_row, info, base_configs=configs)
    
    def detect_drop_zone(
        self,
        position: Position,
        container_width: float,
    ) -> Optional[DropZoneResult]:
        """
        放置区判定
        
        行内相对高度落在上下 push_down_band 内 → PUSH_DOWN；
        否则按 x 分为左/中/右
        """
        if container_width <= 0:
            return None
        
        rh = self.grid.row_height
        row, column = self.snap.grid_position_from_pixels(position)
        relative_y = (position.y - math.floor(position.y / rh) * rh) / rh
        
        band = self.drop_zone.push_down_band
        if relative_y <= band or relative_y >= 1.0 - band:
            zone = DropZone.PUSH_DOWN
        elif position.x < self.drop_zone.left_boundary:
            zone = DropZone.LEFT_DROP
        elif position.x < self.drop_zone.right_boundary:
            zone = DropZone.CENTER_DROP
        else:
            zone = DropZone.RIGHT_DROP
        
        return DropZoneResult(zone=zone, row=row, column=column)
    
    def end(
        self,
        field_id: str,
        configs: ConfigMap,
        container_width: float,
        preview_state: Optional[PreviewState] = None,
    ) -> DragEndResult:
        """
        结束拖拽
        
        有可用预览、预览之后布局没有其他提交、且预览配置严格合法 → 提交整张预览配置表；
        否则吸附被拖字段当前位置，重叠时改放到下一个可用位置
        
        Args:
            field_id: 被拖字段
            configs: 已提交配置表，被拖字段为当前拖拽位置
            container_width: 容器宽度（像素）
            preview_state: 当前预览状态
        """
        if field_id not in configs or container_width <= 0:
            return DragEndResult(committed_preview=False, final_position=None, configs=configs)
        
        if self._can_commit_preview(field_id, configs, preview_state):
            committed = dict(preview_state.preview_configs)
            return DragEndResult(
                committed_preview=True,
                final_position=committed[field_id].position,
                configs=committed,
            )
        
        config = configs[field_id]
        width = config.width
        if self.snap.width_index(width) < 0:
            width = self.snap.nearest_discrete_width(width)
        
        snapped = config.copy_with(
            width=width,
            position=self.snap.snap_position(config.position, width),
        )
        relocated = False
        if self.collision.would_overlap(snapped, configs, exclude_id=field_id):
            position = self.snap.find_next_available_position(width, configs, exclude_id=field_id)
            snapped = snapped.copy_with(position=position)
            relocated = True
        
        return DragEndResult(
            committed_preview=False,
            final_position=snapped.position,
            configs=replace_config(configs, snapped),
            relocated=relocated,
        )
    
    def _can_commit_preview(
        self,
        field_id: str,
        configs: ConfigMap,
        preview_state: Optional[PreviewState],
    ) -> bool:
        if preview_state is None or not preview_state.active or not preview_state.has_space:
            return False
        if preview_state.dragged_field_id != field_id:
            return False
        
        if not preview_state.is_current(configs):
            return False
        return self.collision.is_layout_valid(preview_state.preview_configs)
