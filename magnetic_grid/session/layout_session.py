"""
表单布局会话 (LayoutSession)

唯一持有可变状态的对象：
- 已提交配置表（渲染的真值来源）与显示配置表（动画中间帧）
- 每个字段的手势阶段、拖拽状态、调整大小快照、预览状态

控制器都是无状态的，会话把状态显式传给它们。
每次提交：行压缩 → 自动扩展 → 严格校验 → 动画 → 保存 → 审计
"""

from datetime import datetime
from typing import Dict, List, Optional

from magnetic_grid.animation.orchestrator import AnimationOrchestrator
from magnetic_grid.audit.events import AuditEvent, AuditEventType
from magnetic_grid.audit.journal import IAuditJournal, NullAuditJournal
from magnetic_grid.auto_expand.engine import AutoExpandEngine
from magnetic_grid.collision.detector import CollisionDetector
from magnetic_grid.config.loader import compute_config_hash
from magnetic_grid.config.schema import LayoutEngineConfig
from magnetic_grid.drag.controller import DragController
from magnetic_grid.interfaces import HapticKind, IHapticFeedback, ILayoutRepository
from magnetic_grid.models.field import ConfigMap, FieldConfig, Position, replace_config
from magnetic_grid.models.gesture import (
    DragEndResult,
    DragState,
    DragUpdateResult,
    GesturePhase,
    Point,
    ResizeDirection,
    ResizeEndResult,
    ResizeSnapshot,
    ResizeUpdateResult,
    is_valid_transition,
)
from magnetic_grid.models.grid import FULL_WIDTH
from magnetic_grid.models.preview import PreviewInfo, PreviewState
from magnetic_grid.preview.preview_system import PreviewSystem
from magnetic_grid.resize.controller import ResizeController
from magnetic_grid.snap_engine.snap import SnapEngine
from magnetic_grid.utils.timeutils import generate_session_id, ms_to_seconds


class LayoutSession:
    """
    表单布局会话

    调用方负责按事件顺序串行调用手势方法，并在每帧调用 tick
    """

    def __init__(
        self,
        config: Optional[LayoutEngineConfig] = None,
        repository: Optional[ILayoutRepository] = None,
        audit_journal: Optional[IAuditJournal] = None,
        haptics: Optional[IHapticFeedback] = None,
        orchestrator: Optional[AnimationOrchestrator] = None,
        session_id: Optional[str] = None,
        storage_key: Optional[str] = None,
        default_configs: Optional[ConfigMap] = None,
    ):
        """
        初始化会话

        Args:
            config: 引擎配置
            repository: 布局存储（None 时不持久化）
            audit_journal: 审计日志
            haptics: 触觉反馈
            orchestrator: 动画编排器
            session_id: 会话 ID（可选，自动生成）
            storage_key: 存储 key，默认取配置中的 storage_key
            default_configs: 没有已保存布局（或已保存布局无效）时使用的布局
        """
        self.config = config or LayoutEngineConfig()
        self.session_id = session_id or generate_session_id()
        self.config_hash = compute_config_hash(self.config)
        self.storage_key = storage_key or self.config.storage.storage_key
        self.debug = self.config.behavior.debug

        self._repository = repository
        self._audit_journal = audit_journal or NullAuditJournal()
        self._haptics = haptics
        self.orchestrator = orchestrator or AnimationOrchestrator()
        self._default_configs: ConfigMap = dict(default_configs or {})

        # 组件共享同一套检测器与吸附引擎
        grid = self.config.grid
        thresholds = self.config.thresholds
        self.collision = CollisionDetector(grid=grid, epsilon=thresholds.overlap_epsilon)
        self.snap = SnapEngine(grid=grid, epsilon=thresholds.overlap_epsilon, collision=self.collision)
        self.auto_expand = AutoExpandEngine(
            grid=grid, thresholds=thresholds, collision=self.collision, snap=self.snap
        )
        self.preview = PreviewSystem(
            grid=grid,
            thresholds=thresholds,
            collision=self.collision,
            snap=self.snap,
            auto_expand=self.auto_expand,
        )
        self.drag = DragController(
            grid=grid,
            thresholds=thresholds,
            drop_zone=self.config.drop_zone,
            collision=self.collision,
            snap=self.snap,
            preview=self.preview,
        )
        self.resize = ResizeController(
            grid=grid, thresholds=thresholds, collision=self.collision, snap=self.snap
        )

        # 已提交状态与显示状态
        self._configs: ConfigMap = {}
        self._display: ConfigMap = {}

        # 每个字段的手势状态
        self._phases: Dict[str, GesturePhase] = {}
        self._drag_states: Dict[str, DragState] = {}
        self._drag_positions: Dict[str, Position] = {}
        self._previews: Dict[str, PreviewState] = {}
        self._resize_snapshots: Dict[str, ResizeSnapshot] = {}
        self._resize_directions: Dict[str, ResizeDirection] = {}
        self._resize_accumulated: Dict[str, float] = {}
        self._resize_current: Dict[str, FieldConfig] = {}

    # ==================== 查询 ====================

    @property
    def configs(self) -> ConfigMap:
        """已提交配置表（副本）"""
        return dict(self._configs)

    @property
    def display_configs(self) -> ConfigMap:
        """当前帧的显示配置表（副本）"""
        return dict(self._display)

    def phase(self, field_id: str) -> GesturePhase:
        return self._phases.get(field_id, GesturePhase.IDLE)

    def preview_state(self, field_id: str) -> PreviewState:
        return self._previews.get(field_id, PreviewState.initial())

    def preview_info(self, field_id: str) -> Optional[PreviewInfo]:
        return self.preview_state(field_id).info

    def is_layout_valid(self) -> bool:
        return self.collision.is_layout_valid(self._configs)

    # ==================== 加载 ====================

    def load(self) -> ConfigMap:
        """
        从存储加载布局

        没有已保存布局时使用默认布局；已保存布局违反不变量时
        拒绝它并改用默认布局
        """
        timestamp = datetime.now()
        loaded: ConfigMap = {}
        if self._repository is not None:
            loaded = self._repository.load(self.storage_key)

        if loaded and not self.collision.is_layout_valid(loaded):
            self._audit(AuditEvent.storage(
                session_id=self.session_id,
                timestamp=timestamp,
                event_type=AuditEventType.LAYOUT_REJECTED,
                storage_key=self.storage_key,
                field_count=len(loaded),
                reason="Stored layout violates layout invariants",
                details={"overlaps": [list(p) for p in self.collision.find_overlaps(loaded)]},
            ))
            loaded = {}

        source = "storage"
        if not loaded:
            loaded = dict(self._default_configs)
            source = "defaults"

        self._configs = dict(loaded)
        self._display = dict(loaded)

        self._audit(AuditEvent.storage(
            session_id=self.session_id,
            timestamp=timestamp,
            event_type=AuditEventType.LAYOUT_LOADED,
            storage_key=self.storage_key,
            field_count=len(loaded),
            reason=f"Loaded from {source}",
            details={"config_hash": self.config_hash},
        ))
        return self.configs

    # ==================== 拖拽 ====================

    def begin_drag(self, field_id: str, pointer: Point) -> Optional[DragState]:
        """长按开始拖拽"""
        state = self.drag.start(field_id, pointer, self._configs)
        if state is None:
            self._reject("begin_drag", f"Unknown field {field_id}", field_id)
            return None

        self._discard_gesture(field_id)
        self._set_phase(field_id, GesturePhase.DRAGGING, "drag started")

        self._drag_states[field_id] = state
        self._drag_positions[field_id] = state.start_field_position

        self._trigger_haptic(HapticKind.DRAG_START)
        return state

    def drag_to(
        self,
        field_id: str,
        pointer: Point,
        container_width: float,
    ) -> Optional[DragUpdateResult]:
        """
        指针移动

        超过阈值后，悬停行变化（或布局有新的提交）时重新计算预览，
        并把其他字段动画到预览位置
        """
        state = self._drag_states.get(field_id)
        if state is None:
            self._reject("drag_to", "No active drag", field_id)
            return None

        result = self.drag.update(pointer, state, self._configs, container_width)
        if result is None:
            self._reject("drag_to", "Invalid drag update", field_id)
            return None

        self._drag_states[field_id] = result.drag_state
        self._drag_positions[field_id] = result.position
        if field_id in self._display:
            self._display[field_id] = self._display[field_id].copy_with(position=result.position)

        if result.should_preview:
            if self.phase(field_id) == GesturePhase.DRAGGING:
                self._set_phase(field_id, GesturePhase.PREVIEWING, "drag threshold crossed")

            previous = self._previews.get(field_id)
            if (
                previous is None
                or previous.target_row != result.hovered_row
                or not previous.is_current(self._configs)
            ):
                preview = self.drag.compute_preview(result, self._configs, container_width)
                self._previews[field_id] = preview
                self._animate_preview(field_id, preview)

        return result

    def end_drag(self, field_id: str, container_width: float) -> Optional[DragEndResult]:
        """
        松手：提交预览或吸附/重新定位，然后进入提交流程

        以当前已提交配置表为基础，只移动被拖字段；拖拽期间其他字段的提交保留，
        预览计算之后布局有变化时预览作废，改为吸附/重新定位
        """
        state = self._drag_states.get(field_id)
        if state is None:
            self._reject("end_drag", "No active drag", field_id)
            return None

        before = dict(self._configs)
        current = replace_config(
            before,
            before[field_id].copy_with(position=self._drag_positions[field_id]),
        )
        result = self.drag.end(field_id, current, container_width, self._previews.get(field_id))
        if result.final_position is None:
            self._reject("end_drag", "Invalid drag end", field_id)
            self.cancel_drag(field_id)
            return result

        self._clear_gesture_state(field_id)
        behavior = self.config.behavior
        self._commit(
            before=before,
            proposed=result.configs,
            field_id=field_id,
            event_type=AuditEventType.DRAG_COMMIT,
            reason="preview committed" if result.committed_preview else (
                "relocated to next available position" if result.relocated else "snapped"
            ),
            compact=behavior.compact_rows_after_drag,
            expand=behavior.auto_expand_after_drag,
        )
        self._finish_gesture(field_id, "drag ended")
        return result

    def cancel_drag(self, field_id: str) -> bool:
        """
        取消拖拽

        拖拽从不修改已提交配置表：被拖字段和被预览挤开的字段动画回已提交位置
        """
        if field_id not in self._drag_states:
            self._reject("cancel_drag", "No active drag", field_id)
            return False

        restored = self._drag_revert_targets(field_id)
        self._clear_gesture_state(field_id)
        self._animate_revert(restored)
        committed = self._configs
        self._audit(AuditEvent.layout_change(
            session_id=self.session_id,
            timestamp=datetime.now(),
            event_type=AuditEventType.DRAG_CANCEL,
            field_id=field_id,
            before=None,
            after=committed[field_id].to_record() if field_id in committed else None,
            reason="drag cancelled",
        ))
        self._finish_gesture(field_id, "drag cancelled")
        return True

    # ==================== 调整大小 ====================

    def begin_resize(self, field_id: str, direction: ResizeDirection) -> Optional[ResizeSnapshot]:
        """开始拖动字段的左/右边缘"""
        snapshot = self.resize.start(field_id, self._configs)
        if snapshot is None:
            self._reject("begin_resize", f"Unknown field {field_id}", field_id)
            return None

        self._discard_gesture(field_id)
        self._set_phase(field_id, GesturePhase.RESIZING, f"resize {direction.value} edge")

        self._resize_snapshots[field_id] = snapshot
        self._resize_directions[field_id] = direction
        self._resize_accumulated[field_id] = 0.0
        self._resize_current[field_id] = snapshot.config
        return snapshot

    def resize_by(
        self,
        field_id: str,
        raw_delta: float,
        container_width: float,
    ) -> Optional[ResizeUpdateResult]:
        """边缘移动 raw_delta 像素"""
        if field_id not in self._resize_snapshots:
            self._reject("resize_by", "No active resize", field_id)
            return None

        result = self.resize.update(
            field_id,
            raw_delta,
            self._resize_directions[field_id],
            self._resize_current[field_id],
            container_width,
            self._resize_accumulated[field_id],
        )
        self._resize_accumulated[field_id] = result.accumulated

        if result.stepped:
            self._resize_current[field_id] = result.config
            self._trigger_haptic(HapticKind.RESIZE_STEP)
            anim = self.config.animation
            self.orchestrator.animate(
                {field_id: self._display.get(field_id, result.config)},
                {field_id: result.config},
                ms_to_seconds(anim.preview_duration_ms),
                anim.preview_curve,
                on_update=self._apply_frame,
            )
        return result

    def end_resize(self, field_id: str, container_width: float) -> Optional[ResizeEndResult]:
        """
        结束调整大小

        严格校验当前宽度，必要时缩小或回退到快照
        """
        snapshot = self._resize_snapshots.get(field_id)
        if snapshot is None:
            self._reject("end_resize", "No active resize", field_id)
            return None

        before = dict(self._configs)
        current = replace_config(before, self._resize_current[field_id])
        result = self.resize.end(
            field_id,
            current,
            container_width,
            self._resize_directions[field_id],
            snapshot,
        )
        self._clear_gesture_state(field_id)

        if result.reverted:
            self._commit(
                before=before,
                proposed=result.configs,
                field_id=field_id,
                event_type=AuditEventType.RESIZE_REVERT,
                reason="no non-overlapping width, reverted to snapshot",
                revert=True,
            )
        else:
            self._commit(
                before=before,
                proposed=result.configs,
                field_id=field_id,
                event_type=AuditEventType.RESIZE_COMMIT,
                reason="width reduced to avoid overlap" if result.adjusted else "resize committed",
                expand=self.config.behavior.auto_expand_after_resize,
            )
        self._finish_gesture(field_id, "resize ended")
        return result

    # ==================== 字段增删 ====================

    def add_field(self, field_id: str, width: float = FULL_WIDTH) -> Optional[FieldConfig]:
        """在下一个可用位置添加字段"""
        if not field_id or field_id in self._configs:
            self._reject("add_field", f"Field {field_id!r} already exists or is empty", field_id)
            return None

        if self.snap.width_index(width) < 0:
            width = self.snap.nearest_discrete_width(width)
        position = self.snap.find_next_available_position(width, self._configs)
        config = FieldConfig(id=field_id, width=width, position=position)

        committed = self._commit(
            before=dict(self._configs),
            proposed=replace_config(self._configs, config),
            field_id=field_id,
            event_type=AuditEventType.FIELD_ADDED,
            reason="field added",
        )
        return config if committed else None

    def remove_field(self, field_id: str) -> bool:
        """删除字段，然后压缩行并自动扩展剩余字段"""
        if field_id not in self._configs:
            self._reject("remove_field", f"Unknown field {field_id}", field_id)
            return False

        self._discard_gesture(field_id)
        self._phases.pop(field_id, None)

        before = dict(self._configs)
        remaining = {fid: c for fid, c in before.items() if fid != field_id}
        self._display.pop(field_id, None)

        return self._commit(
            before=before,
            proposed=remaining,
            field_id=field_id,
            event_type=AuditEventType.FIELD_REMOVED,
            reason="field removed",
            compact=True,
            expand=self.config.behavior.auto_expand_after_remove,
        )

    # ==================== 帧 ====================

    def tick(self, now: Optional[float] = None) -> int:
        """推进动画一帧，返回仍在进行的过渡数"""
        return self.orchestrator.tick(now)

    # ==================== 提交流程 ====================

    def _commit(
        self,
        before: ConfigMap,
        proposed: ConfigMap,
        field_id: str,
        event_type: AuditEventType,
        reason: str,
        compact: bool = False,
        expand: bool = False,
        revert: bool = False,
    ) -> bool:
        """
        提交新布局

        结果违反不变量时整体丢弃，显示回到提交前的布局

        Returns:
            是否提交成功
        """
        timestamp = datetime.now()
        anim = self.config.animation

        target = dict(proposed)
        if compact:
            target = self.auto_expand.compact_rows(target)

        expansion = None
        if expand:
            expansion = self.auto_expand.expand(target)
            target = expansion.configs

        if not self.collision.is_layout_valid(target):
            self._audit(AuditEvent.layout_change(
                session_id=self.session_id,
                timestamp=timestamp,
                event_type=AuditEventType.COMMIT_REJECTED,
                field_id=field_id,
                before=None,
                after=None,
                reason=f"{event_type.name} rejected: result violates layout invariants",
                details={"overlaps": [list(p) for p in self.collision.find_overlaps(target)]},
            ))
            self._animate(before, ms_to_seconds(anim.revert_duration_ms), anim.revert_curve)
            return False

        self._configs = target
        for stale in [fid for fid in self._display if fid not in target]:
            del self._display[stale]

        if revert:
            self._animate(target, ms_to_seconds(anim.revert_duration_ms), anim.revert_curve)
        else:
            self._animate(target, ms_to_seconds(anim.commit_duration_ms), anim.commit_curve)

        self._save(timestamp)

        changed = [
            fid for fid, config in target.items()
            if before.get(fid) != config
        ]
        details = {}
        if self.debug:
            details = {
                "before_layout": [c.to_record() for c in before.values()],
                "after_layout": [c.to_record() for c in target.values()],
            }
        self._audit(AuditEvent.layout_change(
            session_id=self.session_id,
            timestamp=timestamp,
            event_type=event_type,
            field_id=field_id,
            before=before[field_id].to_record() if field_id in before else None,
            after=target[field_id].to_record() if field_id in target else None,
            reason=reason,
            changed_ids=changed,
            details=details,
        ))

        if expansion is not None and expansion.has_changes:
            self._audit(AuditEvent.auto_expand(
                session_id=self.session_id,
                timestamp=timestamp,
                changed_ids=expansion.changed_ids,
                reason=", ".join(f"row {r.row}: {r.rule.value}" for r in expansion.rows),
            ))
        return True

    def _save(self, timestamp: datetime) -> None:
        if self._repository is None:
            return
        self._repository.save(self.storage_key, self._configs)
        self._audit(AuditEvent.storage(
            session_id=self.session_id,
            timestamp=timestamp,
            event_type=AuditEventType.LAYOUT_SAVED,
            storage_key=self.storage_key,
            field_count=len(self._configs),
        ))

    # ==================== 动画 ====================

    def _animate(self, target: ConfigMap, duration: float, curve: str) -> int:
        return self.orchestrator.animate(
            dict(self._display),
            target,
            duration,
            curve,
            on_update=self._apply_frame,
        )

    def _animate_preview(self, field_id: str, preview: PreviewState) -> None:
        """其他字段动画到预览位置；没有空间时回到已提交位置"""
        anim = self.config.animation
        if preview.has_space:
            source = preview.preview_configs
            duration, curve = anim.preview_duration_ms, anim.preview_curve
        else:
            source = self._configs
            duration, curve = anim.revert_duration_ms, anim.revert_curve

        others = {fid: c for fid, c in source.items() if fid != field_id}
        if others:
            self._animate(others, ms_to_seconds(duration), curve)

    def _apply_frame(self, frame: ConfigMap) -> None:
        for fid, config in frame.items():
            if fid not in self._configs:
                continue  # 已删除
            if fid in self._drag_states:
                continue  # 被拖字段跟随指针
            self._display[fid] = config

    # ==================== 手势状态 ====================

    def _set_phase(self, field_id: str, phase: GesturePhase, reason: str) -> bool:
        current = self.phase(field_id)
        if current == phase:
            return True
        if not is_valid_transition(current, phase):
            self._reject("set_phase", f"Invalid transition {current.name} -> {phase.name}", field_id)
            return False

        self._phases[field_id] = phase
        self._audit(AuditEvent.phase_change(
            session_id=self.session_id,
            timestamp=datetime.now(),
            from_phase=current.name,
            to_phase=phase.name,
            reason=reason,
            field_id=field_id,
        ))
        return True

    def _clear_gesture_state(self, field_id: str) -> None:
        self._drag_states.pop(field_id, None)
        self._drag_positions.pop(field_id, None)
        self._previews.pop(field_id, None)
        self._resize_snapshots.pop(field_id, None)
        self._resize_directions.pop(field_id, None)
        self._resize_accumulated.pop(field_id, None)
        self._resize_current.pop(field_id, None)

    def _discard_gesture(self, field_id: str) -> None:
        """
        丢弃该字段残留的手势状态

        被覆盖的拖拽：显示回到已提交位置；否则接管该字段进行中的动画
        """
        if field_id in self._drag_states:
            restored = self._drag_revert_targets(field_id)
            self._clear_gesture_state(field_id)
            self._animate_revert(restored)
            return

        self._clear_gesture_state(field_id)
        if self.orchestrator.is_animating(field_id) and field_id in self._display:
            current = {field_id: self._display[field_id]}
            self.orchestrator.animate(current, current, 0.0, on_update=self._apply_frame)

    def _drag_revert_targets(self, field_id: str) -> ConfigMap:
        """被拖字段及其预览挤开的字段的已提交配置"""
        ids = {field_id}
        preview = self._previews.get(field_id)
        if preview is not None:
            ids.update(
                fid for fid, config in preview.preview_configs.items()
                if self._configs.get(fid) != config
            )
        return {fid: self._configs[fid] for fid in ids if fid in self._configs}

    def _animate_revert(self, target: ConfigMap) -> None:
        if target:
            anim = self.config.animation
            self._animate(target, ms_to_seconds(anim.revert_duration_ms), anim.revert_curve)

    def _finish_gesture(self, field_id: str, reason: str) -> None:
        """手势状态应在提交之前已清除"""
        self._clear_gesture_state(field_id)
        if field_id in self._phases:
            self._set_phase(field_id, GesturePhase.ENDED, reason)
            self._set_phase(field_id, GesturePhase.IDLE, reason)

    def active_gestures(self) -> List[str]:
        return [fid for fid, phase in self._phases.items() if phase not in (GesturePhase.IDLE, GesturePhase.ENDED)]

    # ==================== 外部协作者 ====================

    def _trigger_haptic(self, kind: HapticKind) -> None:
        if self._haptics is not None:
            self._haptics.trigger(kind)

    def _audit(self, event: AuditEvent) -> None:
        self._audit_journal.write(event)

    def _reject(self, operation: str, reason: str, field_id: Optional[str] = None) -> None:
        self._audit(AuditEvent.invalid_input(
            session_id=self.session_id,
            timestamp=datetime.now(),
            operation=operation,
            reason=reason,
            field_id=field_id,
        ))
