"""
动画编排器 (AnimationOrchestrator)

把一次提交从配置表 A 插值到配置表 B：
- 由外部逐帧调用 tick 推进，从不阻塞
- 对同一字段，后开始的动画接管（last-writer-wins）
- 到达时长后精确交付目标配置
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Union

import numpy as np

from magnetic_grid.animation.curves import Curve, get_curve
from magnetic_grid.models.field import ConfigMap, FieldConfig, Position

UpdateCallback = Callable[[ConfigMap], None]
CompleteCallback = Callable[[], None]


@dataclass
class Transition:
    """
    一次进行中的过渡
    
    values 的列为 (x, y, width)
    """
    transition_id: int
    field_ids: List[str]
    to_configs: ConfigMap
    start_values: np.ndarray
    end_values: np.ndarray
    start_time: float
    duration: float
    curve: Curve
    on_update: Optional[UpdateCallback]
    on_complete: Optional[CompleteCallback]
    owned: List[str] = field(default_factory=list)
    
    def rows(self, field_ids: List[str]) -> List[int]:
        index = {fid: i for i, fid in enumerate(self.field_ids)}
        return [index[fid] for fid in field_ids]


class AnimationOrchestrator:
    """
    动画编排器
    
    on_update 收到的是该过渡当前拥有的字段的配置（部分配置表），
    调用方负责合并到显示配置表
    """
    
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._transitions: Dict[int, Transition] = {}
        self._owners: Dict[str, int] = {}
        self._next_id = 1
    
    def animate(
        self,
        from_configs: ConfigMap,
        to_configs: ConfigMap,
        duration: float,
        curve: Union[str, Curve] = "ease_out_cubic",
        on_update: Optional[UpdateCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
    ) -> int:
        """
        开始过渡
        
        Args:
            from_configs: 起始配置表；缺失的字段直接从目标开始
            to_configs: 目标配置表
            duration: 时长（秒），<= 0 时在本调用内完成
            curve: 缓动曲线名称或函数
            on_update: 每帧回调
            on_complete: 完成回调（被完全接管的过渡不会回调）
            
        Returns:
            过渡 id
        """
        if isinstance(curve, str):
            curve = get_curve(curve)
        
        transition_id = self._next_id
        self._next_id += 1
        
        field_ids = list(to_configs)
        end_values = self._to_array([to_configs[fid] for fid in field_ids])
        start_values = self._to_array(
            [from_configs.get(fid, to_configs[fid]) for fid in field_ids]
        )
        
        transition = Transition(
            transition_id=transition_id,
            field_ids=field_ids,
            to_configs=dict(to_configs),
            start_values=start_values,
            end_values=end_values,
            start_time=self._clock(),
            duration=max(0.0, duration),
            curve=curve,
            on_update=on_update,
            on_complete=on_complete,
        )
        self._claim(transition)
        self._transitions[transition_id] = transition
        
        if transition.duration <= 0:
            self._finish(transition)
        
        return transition_id
    
    def tick(self, now: Optional[float] = None) -> int:
        """
        推进一帧
        
        Returns:
            仍在进行的过渡数
        """
        if now is None:
            now = self._clock()
        
        for transition in list(self._transitions.values()):
            if transition.transition_id not in self._transitions:
                continue  # 在本帧的回调中被接管
            
            elapsed = now - transition.start_time
            if elapsed >= transition.duration:
                self._finish(transition)
                continue
            
            progress = transition.curve(elapsed / transition.duration)
            if transition.on_update is not None:
                transition.on_update(self._frame(transition, progress))
        
        return len(self._transitions)
    
    def is_animating(self, field_id: Optional[str] = None) -> bool:
        if field_id is None:
            return bool(self._transitions)
        return field_id in self._owners
    
    def owner_of(self, field_id: str) -> Optional[int]:
        return self._owners.get(field_id)
    
    @property
    def active_count(self) -> int:
        return len(self._transitions)
    
    # ==================== 内部 ====================
    
    def _claim(self, transition: Transition) -> None:
        for fid in transition.field_ids:
            previous_id = self._owners.get(fid)
            if previous_id is not None and previous_id in self._transitions:
                previous = self._transitions[previous_id]
                previous.owned.remove(fid)
                if not previous.owned:
                    del self._transitions[previous_id]
            self._owners[fid] = transition.transition_id
            transition.owned.append(fid)
    
    def _release(self, transition: Transition) -> None:
        for fid in transition.owned:
            if self._owners.get(fid) == transition.transition_id:
                del self._owners[fid]
        self._transitions.pop(transition.transition_id, None)
    
    def _finish(self, transition: Transition) -> None:
        final = {fid: transition.to_configs[fid] for fid in transition.owned}
        self._release(transition)
        if transition.on_update is not None:
            transition.on_update(final)
        if transition.on_complete is not None:
            transition.on_complete()
    
    def _frame(self, transition: Transition, progress: float) -> ConfigMap:
        rows = transition.rows(transition.owned)
        start = transition.start_values[rows]
        end = transition.end_values[rows]
        values = start + (end - start) * progress
        
        frame: ConfigMap = {}
        for fid, (x, y, width) in zip(transition.owned, values.tolist()):
            frame[fid] = transition.to_configs[fid].copy_with(
                width=width, position=Position(x, y)
            )
        return frame
    
    @staticmethod
    def _to_array(configs: List[FieldConfig]) -> np.ndarray:
        if not configs:
            return np.zeros((0, 3), dtype=float)
        return np.array([[c.x, c.y, c.width] for c in configs], dtype=float)
