"""
审计日志

append-only 的 JSONL 审计日志，外加测试/回放用的内存实现。

查询条件（全部可选，AND 组合）：
- event_types: 事件类型列表
- session_id: 会话
- field_id: 字段（提交、阶段迁移、无效输入都带字段）
- start_time / end_time: 时间范围
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

from magnetic_grid.audit.events import AuditEvent, AuditEventType

AuditRecord = Dict[str, Any]


@dataclass(frozen=True)
class AuditQuery:
    """审计查询条件"""
    event_types: Optional[List[AuditEventType]] = None
    session_id: Optional[str] = None
    field_id: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    def accepts(self, record: AuditRecord) -> bool:
        if self.event_types and record.get("type") not in {et.name for et in self.event_types}:
            return False
        if self.session_id and record.get("session") != self.session_id:
            return False
        if self.field_id and record.get("field") != self.field_id:
            return False
        if self.start_time is None and self.end_time is None:
            return True

        ts = datetime.fromisoformat(record.get("ts", ""))
        if self.start_time and ts < self.start_time:
            return False
        return not (self.end_time and ts > self.end_time)

    def select(self, records: Iterable[AuditRecord]) -> List[AuditRecord]:
        return [r for r in records if self.accepts(r)]


class IAuditJournal(ABC):
    """审计日志接口"""

    @abstractmethod
    def write(self, event: AuditEvent) -> None:
        pass

    @abstractmethod
    def records(self) -> Iterator[AuditRecord]:
        """按写入顺序遍历全部事件（字典形式）"""
        pass

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass

    def query(
        self,
        event_types: Optional[List[AuditEventType]] = None,
        session_id: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
        field_id: Optional[str] = None,
    ) -> List[AuditRecord]:
        """查询审计事件"""
        criteria = AuditQuery(
            event_types=event_types,
            session_id=session_id,
            field_id=field_id,
            start_time=start_time,
            end_time=end_time,
        )
        return criteria.select(self.records())

    def field_history(self, field_id: str) -> List[AuditRecord]:
        """某字段的全部布局变化（提交、回退、增删）"""
        layout_types = [
            AuditEventType.DRAG_COMMIT,
            AuditEventType.RESIZE_COMMIT,
            AuditEventType.RESIZE_REVERT,
            AuditEventType.FIELD_ADDED,
            AuditEventType.FIELD_REMOVED,
        ]
        return self.query(event_types=layout_types, field_id=field_id)


class AuditJournal(IAuditJournal):
    """
    JSONL 审计日志

    - 文件在第一次写入时打开（追加模式）
    - 每条事件写入后立即 flush
    - 读取时跳过损坏的行
    """

    def __init__(self, output_dir: str, filename: str = "layout_audit.jsonl"):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.filepath = self.output_dir / filename
        self._file = None
        self._event_count = 0

    def write(self, event: AuditEvent) -> None:
        if self._file is None:
            self._file = open(self.filepath, "a", encoding="utf-8")

        self._file.write(json.dumps(event.to_dict(), ensure_ascii=False) + "\n")
        self._file.flush()
        self._event_count += 1

    def records(self) -> Iterator[AuditRecord]:
        if not self.filepath.exists():
            return
        self.flush()

        with open(self.filepath, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    record = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if isinstance(record, dict):
                    yield record

    def query(
        self,
        event_types: Optional[List[AuditEventType]] = None,
        session_id: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
        field_id: Optional[str] = None,
    ) -> List[AuditRecord]:
        """时间戳无法解析的行视为损坏，跳过"""
        criteria = AuditQuery(
            event_types=event_types,
            session_id=session_id,
            field_id=field_id,
            start_time=start_time,
            end_time=end_time,
        )
        results = []
        for record in self.records():
            try:
                if criteria.accepts(record):
                    results.append(record)
            except ValueError:
                continue
        return results

    def flush(self) -> None:
        if self._file is not None:
            self._file.flush()

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    @property
    def event_count(self) -> int:
        """本实例写入的事件数"""
        return self._event_count

    def __enter__(self) -> "AuditJournal":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class MemoryAuditJournal(IAuditJournal):
    """内存审计日志（测试和回放）"""

    def __init__(self):
        self.events: List[AuditEvent] = []

    def write(self, event: AuditEvent) -> None:
        self.events.append(event)

    def records(self) -> Iterator[AuditRecord]:
        return (event.to_dict() for event in self.events)

    @property
    def event_count(self) -> int:
        return len(self.events)


class NullAuditJournal(IAuditJournal):
    """空审计日志（禁用审计）"""

    def write(self, event: AuditEvent) -> None:
        pass

    def records(self) -> Iterator[AuditRecord]:
        return iter(())
