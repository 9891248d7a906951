"""
回放事件循环

把脚本化的手势事件按顺序送入 LayoutSession，
动画时钟取事件时间戳，回放结果可重复
"""

import math
import yaml
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from magnetic_grid.animation.orchestrator import AnimationOrchestrator
from magnetic_grid.audit.journal import AuditJournal, IAuditJournal
from magnetic_grid.config.schema import LayoutEngineConfig
from magnetic_grid.interfaces import ILayoutRepository
from magnetic_grid.models.events import EventType, GestureEvent
from magnetic_grid.models.field import ConfigMap, configs_from_records
from magnetic_grid.models.gesture import Point, ResizeDirection
from magnetic_grid.runtime.haptics import RecordingHapticFeedback
from magnetic_grid.session.layout_session import LayoutSession
from magnetic_grid.storage.repository import create_repository

DEFAULT_CONTAINER_WIDTH = 400.0


@dataclass
class ReplayScript:
    """回放脚本"""
    events: List[GestureEvent] = field(default_factory=list)
    container_width: float = DEFAULT_CONTAINER_WIDTH
    default_configs: ConfigMap = field(default_factory=dict)


def load_script(script_path: str) -> ReplayScript:
    """
    从 YAML 加载回放脚本
    
    格式:
        container_width: 400
        fields:            # 默认布局（记录格式）
          - {id: name, width: 1.0, positionX: 0.0, positionY: 0.0}
        events:
          - {type: drag_start, field_id: name, x: 10, y: 10, timestamp: 0.0}
    """
    path = Path(script_path)
    if not path.exists():
        raise FileNotFoundError(f"Script file not found: {script_path}")
    
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    
    return ReplayScript(
        events=[GestureEvent.from_dict(e) for e in data.get("events", [])],
        container_width=float(data.get("container_width", DEFAULT_CONTAINER_WIDTH)),
        default_configs=configs_from_records(data.get("fields", [])),
    )


class ReplayEventLoop:
    """
    回放事件循环
    
    每个事件同步处理；FRAME_TICK 推进动画
    """
    
    def __init__(
        self,
        config: LayoutEngineConfig,
        output_dir: str,
        session_id: Optional[str] = None,
        default_configs: Optional[ConfigMap] = None,
        container_width: float = DEFAULT_CONTAINER_WIDTH,
        repository: Optional[ILayoutRepository] = None,
        audit_journal: Optional[IAuditJournal] = None,
    ):
        """
        初始化事件循环
        
        Args:
            config: 引擎配置
            output_dir: 输出目录（审计日志、JSON 布局）
            session_id: 会话 ID（可选，自动生成）
            default_configs: 默认布局
            container_width: 事件未指定时使用的容器宽度（像素）
            repository: 布局存储（默认按配置创建）
            audit_journal: 审计日志（默认写入 output_dir）
        """
        self.config = config
        self.output_dir = output_dir
        self.container_width = container_width
        
        self._now = 0.0
        self.audit_journal = audit_journal or AuditJournal(output_dir)
        self.haptics = RecordingHapticFeedback(verbose=config.behavior.debug)
        self.session = LayoutSession(
            config=config,
            repository=repository or create_repository(config.storage, base_dir=output_dir),
            audit_journal=self.audit_journal,
            haptics=self.haptics,
            orchestrator=AnimationOrchestrator(clock=lambda: self._now),
            session_id=session_id,
            default_configs=default_configs,
        )
        self.session_id = self.session.session_id
        
        self._event_count = 0
        self._ignored_count = 0
        self._frame_count = 0
        self._event_handlers: List[Callable[[GestureEvent], None]] = []
    
    def register_handler(self, handler: Callable[[GestureEvent], None]) -> None:
        """注册事件处理器（在事件处理之后调用）"""
        self._event_handlers.append(handler)
    
    def process_event(self, event: GestureEvent) -> None:
        """处理单个事件"""
        self._event_count += 1
        self._now = max(self._now, event.timestamp)
        width = event.container_width or self.container_width
        session = self.session
        
        handled = True
        if event.event_type == EventType.DRAG_START:
            handled = session.begin_drag(event.field_id, Point(event.x, event.y)) is not None
        elif event.event_type == EventType.DRAG_MOVE:
            handled = session.drag_to(event.field_id, Point(event.x, event.y), width) is not None
        elif event.event_type == EventType.DRAG_END:
            handled = session.end_drag(event.field_id, width) is not None
        elif event.event_type == EventType.DRAG_CANCEL:
            handled = session.cancel_drag(event.field_id)
        elif event.event_type == EventType.RESIZE_START:
            direction = event.direction or ResizeDirection.RIGHT
            handled = session.begin_resize(event.field_id, direction) is not None
        elif event.event_type == EventType.RESIZE_UPDATE:
            handled = session.resize_by(event.field_id, event.delta, width) is not None
        elif event.event_type == EventType.RESIZE_END:
            handled = session.end_resize(event.field_id, width) is not None
        elif event.event_type == EventType.FRAME_TICK:
            self._frame_count += 1
            session.tick(self._now)
        elif event.event_type == EventType.FIELD_ADD:
            width_fraction = event.width if event.width is not None else 1.0
            handled = session.add_field(event.field_id, width_fraction) is not None
        elif event.event_type == EventType.FIELD_REMOVE:
            handled = session.remove_field(event.field_id)
        
        if not handled:
            self._ignored_count += 1
        
        for handler in self._event_handlers:
            handler(event)
    
    def run(self, events: List[GestureEvent]) -> ConfigMap:
        """
        回放全部事件并完成剩余动画
        
        Returns:
            最终已提交配置表
        """
        self.on_startup()
        try:
            for event in events:
                self.process_event(event)
            self.settle()
        finally:
            self.on_shutdown()
        return self.session.configs
    
    def settle(self) -> None:
        """完成所有进行中的动画"""
        self.session.tick(math.inf)
    
    def on_startup(self) -> None:
        """启动回调"""
        timestamp = datetime.now()
        self.session.load()
        
        print(f"[{timestamp}] ReplayEventLoop started")
        print(f"  Session ID: {self.session_id}")
        print(f"  Config Hash: {self.session.config_hash}")
        print(f"  Storage Key: {self.session.storage_key}")
        print(f"  Fields: {len(self.session.configs)}")
    
    def on_shutdown(self) -> None:
        """关闭回调"""
        timestamp = datetime.now()
        
        print(f"[{timestamp}] ReplayEventLoop stopped")
        print(f"  Total events: {self._event_count}")
        print(f"  Ignored events: {self._ignored_count}")
        print(f"  Frames: {self._frame_count}")
        print(f"  Haptics: {sum(self.haptics.counts().values())}")
        print(f"  Layout valid: {self.session.is_layout_valid()}")
        
        self.audit_journal.close()
    
    @property
    def event_count(self) -> int:
        """已处理事件数"""
        return self._event_count
    
    @property
    def ignored_count(self) -> int:
        """被忽略（无效）的事件数"""
        return self._ignored_count
