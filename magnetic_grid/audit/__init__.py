"""
审计系统模块

包含:
- events: 审计事件类型
- journal: 事件日志写入
"""

from magnetic_grid.audit.events import AuditEventType, AuditEvent
from magnetic_grid.audit.journal import (
    AuditJournal,
    AuditQuery,
    IAuditJournal,
    MemoryAuditJournal,
    NullAuditJournal,
)

__all__ = [
    "AuditEventType",
    "AuditEvent",
    "AuditJournal",
    "AuditQuery",
    "IAuditJournal",
    "MemoryAuditJournal",
    "NullAuditJournal",
]
