"""
审计事件类型定义

布局引擎的最小事件集：
- 提交/回退: DRAG_COMMIT, RESIZE_COMMIT, RESIZE_REVERT
- 自动扩展: AUTO_EXPAND
- 字段增删: FIELD_ADDED, FIELD_REMOVED
- 持久化: LAYOUT_LOADED, LAYOUT_SAVED, LAYOUT_REJECTED
- 手势阶段: PHASE_CHANGE
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class AuditEventType(Enum):
    """审计事件类型"""
    # 手势提交
    DRAG_COMMIT = auto()           # 拖拽提交
    DRAG_CANCEL = auto()           # 拖拽取消
    RESIZE_COMMIT = auto()         # 缩放提交
    RESIZE_REVERT = auto()         # 缩放回退到快照
    
    # 布局调整
    AUTO_EXPAND = auto()           # 自动扩展填充空隙
    COMMIT_REJECTED = auto()       # 提交结果未通过严格校验
    
    # 字段增删
    FIELD_ADDED = auto()
    FIELD_REMOVED = auto()
    
    # 持久化
    LAYOUT_LOADED = auto()
    LAYOUT_SAVED = auto()
    LAYOUT_REJECTED = auto()       # 加载的布局无效，改用默认布局
    
    # 状态相关
    PHASE_CHANGE = auto()          # 手势阶段迁移
    
    # 配置相关
    CONFIG_INVALID = auto()        # 配置无效
    
    # 输入相关
    INVALID_INPUT = auto()         # 无效输入被忽略


@dataclass
class AuditEvent:
    """
    审计事件
    
    所有审计事件必须包含：
    - session_id: 会话 ID
    - timestamp: 时间戳
    - event_type: 事件类型
    - reason: 触发原因
    """
    session_id: str
    timestamp: datetime
    event_type: AuditEventType
    reason: str
    
    # 字段相关
    field_id: Optional[str] = None
    
    # 阶段迁移相关
    from_phase: Optional[str] = None
    to_phase: Optional[str] = None
    
    # 布局变化
    before: Optional[Dict[str, Any]] = None
    after: Optional[Dict[str, Any]] = None
    changed_ids: Optional[List[str]] = None
    
    config_hash: Optional[str] = None
    storage_key: Optional[str] = None
    
    # 额外信息
    details: Dict[str, Any] = field(default_factory=dict)
    
    def to_dict(self) -> Dict[str, Any]:
        """转换为字典（用于 JSON 序列化）"""
        d = {
            "ts": self.timestamp.isoformat(),
            "session": self.session_id,
            "type": self.event_type.name,
            "reason": self.reason,
        }
        
        # 添加非空字段
        if self.field_id:
            d["field"] = self.field_id
        if self.from_phase:
            d["from"] = self.from_phase
        if self.to_phase:
            d["to"] = self.to_phase
        if self.before is not None:
            d["before"] = self.before
        if self.after is not None:
            d["after"] = self.after
        if self.changed_ids:
            d["changed"] = self.changed_ids
        if self.config_hash:
            d["config_hash"] = self.config_hash
        if self.storage_key:
            d["storage_key"] = self.storage_key
        if self.details:
            d["details"] = self.details
        
        return d
    
    @classmethod
    def phase_change(
        cls,
        session_id: str,
        timestamp: datetime,
        from_phase: str,
        to_phase: str,
        reason: str,
        field_id: Optional[str] = None,
    ) -> "AuditEvent":
        """创建阶段迁移事件"""
        return cls(
            session_id=session_id,
            timestamp=timestamp,
            event_type=AuditEventType.PHASE_CHANGE,
            reason=reason,
            field_id=field_id,
            from_phase=from_phase,
            to_phase=to_phase,
        )
    
    @classmethod
    def layout_change(
        cls,
        session_id: str,
        timestamp: datetime,
        event_type: AuditEventType,
        field_id: str,
        before: Optional[Dict[str, Any]],
        after: Optional[Dict[str, Any]],
        reason: str,
        changed_ids: Optional[List[str]] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> "AuditEvent":
        """创建布局变化事件（提交、回退、增删字段）"""
        return cls(
            session_id=session_id,
            timestamp=timestamp,
            event_type=event_type,
            reason=reason,
            field_id=field_id,
            before=before,
            after=after,
            changed_ids=changed_ids,
            details=details or {},
        )
    
    @classmethod
    def auto_expand(
        cls,
        session_id: str,
        timestamp: datetime,
        changed_ids: List[str],
        reason: str,
    ) -> "AuditEvent":
        """创建自动扩展事件"""
        return cls(
            session_id=session_id,
            timestamp=timestamp,
            event_type=AuditEventType.AUTO_EXPAND,
            reason=reason,
            changed_ids=changed_ids,
        )
    
    @classmethod
    def storage(
        cls,
        session_id: str,
        timestamp: datetime,
        event_type: AuditEventType,
        storage_key: str,
        field_count: int,
        reason: str = "",
        details: Optional[Dict[str, Any]] = None,
    ) -> "AuditEvent":
        """创建持久化事件"""
        merged = {"field_count": field_count}
        if details:
            merged.update(details)
        return cls(
            session_id=session_id,
            timestamp=timestamp,
            event_type=event_type,
            reason=reason,
            storage_key=storage_key,
            details=merged,
        )
    
    @classmethod
    def invalid_input(
        cls,
        session_id: str,
        timestamp: datetime,
        operation: str,
        reason: str,
        field_id: Optional[str] = None,
    ) -> "AuditEvent":
        """创建无效输入事件"""
        return cls(
            session_id=session_id,
            timestamp=timestamp,
            event_type=AuditEventType.INVALID_INPUT,
            reason=reason,
            field_id=field_id,
            details={"operation": operation},
        )
